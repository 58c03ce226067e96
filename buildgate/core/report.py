from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from buildgate.config import APP_NAME, APP_VERSION, BuildConfig
from buildgate.models import ValidationResult


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def build_report_dict(
    config: BuildConfig,
    results: List[ValidationResult],
    ok: bool,
) -> Dict[str, Any]:
    return {
        "tool": APP_NAME,
        "version": APP_VERSION,
        "timestamp_utc": _utc_now_iso(),
        "pkg_dir": config.pkg_dir,
        "root_dir": config.root_dir,
        "esm_node": config.esm_node,
        "ok": ok,
        "results": [asdict(r) for r in results],
    }


def write_report_json(report: Dict[str, Any], report_path: str) -> str:
    path = Path(report_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)

    return str(path)
