"""Logging configuration for the command line tool."""
from __future__ import annotations

import sys
from typing import Any

from loguru import logger

HUMAN_FORMAT = "<level>{level: <7}</level> {message}"
WARNING_NO = 30


def configure_logging(
    *,
    level: str = "INFO",
    serialize: bool = False,
    sink: Any | None = None,
    error_sink: Any | None = None,
) -> None:
    """
    Route loguru records below WARNING to stdout and the rest to stderr.

    Lines are readable text, or JSON when serialize is set.
    """

    out_sink = sink if sink is not None else sys.stdout
    err_sink = error_sink if error_sink is not None else sys.stderr
    threshold = logger.level(level.upper()).no

    def handler(target: Any, **options: Any) -> dict[str, Any]:
        h: dict[str, Any] = {
            "sink": target,
            "serialize": serialize,
            "backtrace": False,
            "diagnose": False,
            **options,
        }
        if not serialize:
            h["format"] = HUMAN_FORMAT
        return h

    logger.remove()
    logger.configure(
        handlers=[
            handler(out_sink, level=threshold, filter=lambda record: record["level"].no < WARNING_NO),
            handler(err_sink, level=max(threshold, WARNING_NO)),
        ],
        extra={"path": None},
    )
