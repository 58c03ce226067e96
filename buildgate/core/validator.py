from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Awaitable, Callable, Dict, List

from loguru import logger

from buildgate.config import BuildConfig
from buildgate.core.runtime import NodeLaunchError, NodeResult, import_module, require_module
from buildgate.core.typecheck import check_declaration_file
from buildgate.errors import FileValidationError

FileCheck = Callable[[BuildConfig, str], Awaitable[None]]


def _read_text(path: str) -> str:
    # Binary assets (wasm, images, fonts) are valid; only emptiness matters.
    return Path(path).read_bytes().decode("utf-8", errors="replace")


def _raise_for_node(path: str, result: NodeResult) -> None:
    if not result.ok:
        raise FileValidationError(path, result.output())


async def check_commonjs(config: BuildConfig, path: str) -> None:
    try:
        result = await require_module(config, path)
    except NodeLaunchError as e:
        raise FileValidationError(path, str(e)) from e
    _raise_for_node(path, result)


async def check_esm(config: BuildConfig, path: str) -> None:
    # Without a node ESM run, .mjs files get the declaration type-check instead.
    if not config.esm_node:
        await check_declaration_file(config, path)
        return

    try:
        result = await import_module(config, path)
    except NodeLaunchError as e:
        raise FileValidationError(path, str(e)) from e
    _raise_for_node(path, result)


async def check_json(config: BuildConfig, path: str) -> None:
    text = await asyncio.to_thread(_read_text, path)
    try:
        json.loads(text)
    except json.JSONDecodeError as e:
        raise FileValidationError(path, f"invalid JSON: {e}") from e


async def check_not_empty(config: BuildConfig, path: str) -> None:
    text = await asyncio.to_thread(_read_text, path)
    if text.strip() == "":
        raise FileValidationError(path, "empty file")


CHECKS: Dict[str, FileCheck] = {
    ".cjs": check_commonjs,
    ".mjs": check_esm,
    ".ts": check_declaration_file,
    ".json": check_json,
    ".map": check_json,
}


def check_for(path: str) -> FileCheck:
    # ".d.ts" has the extension ".ts"
    ext = os.path.splitext(path)[1]
    return CHECKS.get(ext, check_not_empty)


async def validate_file(config: BuildConfig, path: str) -> None:
    if not await asyncio.to_thread(os.path.isfile, path):
        raise FileValidationError(path, "missing file")

    check = check_for(path)
    logger.bind(path=path).debug("{} {}", check.__name__, path)
    try:
        await check(config, path)
    except FileValidationError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise FileValidationError(path, str(e)) from e


async def validate_files(config: BuildConfig, paths: List[str]) -> int:
    """
    Check every declared file, one at a time, in declared order.

    Stops at the first failure. Returns the number of files checked.
    """
    for path in paths:
        await validate_file(config, path)
    return len(paths)
