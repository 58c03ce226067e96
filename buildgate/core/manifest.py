from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from buildgate.config import BuildConfig
from buildgate.errors import ManifestError
from buildgate.models import ExportTarget, PackageManifest

ENTRY_FIELDS = ("main", "module", "types")


def _read_json(path: str) -> Any:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Cannot read package manifest: {path} ({e})", path=path) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Cannot parse package manifest: {path} ({e})", path=path) from e


def _optional_str(d: Dict[str, Any], key: str, path: str) -> Optional[str]:
    value = d.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ManifestError(f'"{key}" must be a string in {path}', path=path)
    return value


def _exports(d: Dict[str, Any], path: str) -> Dict[str, ExportTarget]:
    raw = d.get("exports")
    if raw is None:
        return {}
    # "exports": "./index.js" is shorthand for {".": "./index.js"}
    if isinstance(raw, str):
        return {".": raw}
    if not isinstance(raw, dict):
        raise ManifestError(f'"exports" must be a string or an object in {path}', path=path)

    out: Dict[str, ExportTarget] = {}
    for key, value in raw.items():
        if not isinstance(value, (str, dict)):
            raise ManifestError(
                f'export "{key}" must be a path or a condition object in {path}',
                path=path,
            )
        out[str(key)] = value
    return out


def load_manifest(config: BuildConfig) -> PackageManifest:
    """
    Read <pkg_dir>/package.json and return the typed manifest.

    Any read, parse or shape problem raises ManifestError; nothing past this
    point can run without a manifest.
    """
    path = config.manifest_path
    d = _read_json(path)
    if not isinstance(d, dict):
        raise ManifestError(f"Package manifest must be a JSON object: {path}", path=path)

    files = d.get("files")
    if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
        raise ManifestError(f'"files" must be an array of paths in {path}', path=path)

    return PackageManifest(
        path=path,
        files=tuple(files),
        main=_optional_str(d, "main", path),
        module=_optional_str(d, "module", path),
        types=_optional_str(d, "types", path),
        exports=_exports(d, path),
    )


def resolve_in_pkg(config: BuildConfig, relpath: str) -> str:
    return os.path.normpath(os.path.join(config.pkg_dir, relpath))


def expected_files(config: BuildConfig, manifest: PackageManifest) -> List[str]:
    seen = set()
    out: List[str] = []
    for f in manifest.files:
        full = resolve_in_pkg(config, f)
        if full in seen:
            continue
        seen.add(full)
        out.append(full)
    return out
