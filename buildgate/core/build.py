from __future__ import annotations

import asyncio
from typing import List

from loguru import logger

from buildgate.config import BuildConfig
from buildgate.core.entrypoints import validate_entry_points
from buildgate.core.manifest import expected_files, load_manifest
from buildgate.core.scanner import check_no_unexpected, scan_tree
from buildgate.core.validator import validate_files
from buildgate.models import ValidationResult


async def validate_build(config: BuildConfig) -> List[ValidationResult]:
    """
    Validate a finished build before it is published.

    Loads the manifest, checks every declared file and every entry point,
    then makes sure nothing undeclared is sitting in pkg_dir. Raises a
    BuildValidationError subclass on the first problem found.
    """
    manifest = load_manifest(config)
    expected = expected_files(config, manifest)
    logger.debug("{} declared file(s) in {}", len(expected), manifest.path)

    checked, entries = await asyncio.gather(
        validate_files(config, expected),
        validate_entry_points(config, manifest),
    )

    actual = await asyncio.to_thread(scan_tree, config.pkg_dir)
    check_no_unexpected(actual, expected, config.files_hint or manifest.path)

    return [
        ValidationResult("INFO", "FILES_OK", f"{checked} declared file(s) validated", None),
        ValidationResult("INFO", "ENTRIES_OK", f"{entries} entry point(s) resolved", None),
        ValidationResult("INFO", "TREE_OK", f"{len(actual)} file(s) in build, none unexpected", None),
    ]


def run(config: BuildConfig) -> List[ValidationResult]:
    return asyncio.run(validate_build(config))
