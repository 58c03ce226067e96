from __future__ import annotations

import asyncio
import os
from typing import List, Tuple

from loguru import logger

from buildgate.config import BuildConfig
from buildgate.core.manifest import ENTRY_FIELDS, resolve_in_pkg
from buildgate.errors import EntryResolutionError, ManifestError
from buildgate.models import ExportTarget, PackageManifest


def _condition_targets(key: str, target: ExportTarget, manifest_path: str) -> List[str]:
    if isinstance(target, str):
        return [target]

    # import/require first, then any other conditions in declaration order
    ordered = [c for c in ("import", "require") if c in target]
    ordered += [c for c in target if c not in ("import", "require")]

    out: List[str] = []
    for cond in ordered:
        value = target[cond]
        if value is None:
            continue
        if isinstance(value, (str, dict)):
            out.extend(_condition_targets(f"{key}[{cond}]", value, manifest_path))
            continue
        raise ManifestError(
            f'export "{key}" condition "{cond}" must be a path in {manifest_path}',
            path=manifest_path,
        )

    if not out:
        raise ManifestError(f'export "{key}" declares no paths in {manifest_path}', path=manifest_path)
    return out


def entry_targets(manifest: PackageManifest) -> List[Tuple[str, str]]:
    """
    Every (label, relpath) the manifest promises consumers.

    main/module/types are skipped when absent; a condition object contributes
    its import and require paths plus any other string conditions.
    """
    targets: List[Tuple[str, str]] = []
    for field_name in ENTRY_FIELDS:
        value = getattr(manifest, field_name)
        if value is not None:
            targets.append((field_name, value))

    for key, target in manifest.exports.items():
        for relpath in _condition_targets(key, target, manifest.path):
            targets.append((f"exports[{key}]", relpath))
    return targets


async def validate_path(config: BuildConfig, manifest: PackageManifest, relpath: str) -> str:
    full = resolve_in_pkg(config, relpath)
    try:
        await asyncio.to_thread(os.stat, full)
    except OSError as e:
        raise EntryResolutionError(relpath, manifest.path, str(e)) from e
    logger.bind(path=full).debug("resolved {}", relpath)
    return full


async def validate_entry_points(config: BuildConfig, manifest: PackageManifest) -> int:
    """
    Check all entry points concurrently.

    The first missing path propagates; sibling checks still running are
    abandoned. Returns the number of paths checked.
    """
    targets = entry_targets(manifest)
    await asyncio.gather(*(validate_path(config, manifest, relpath) for _, relpath in targets))
    return len(targets)
