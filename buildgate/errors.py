"""
Failure taxonomy for a build validation run.

Every check raises one of these where it detects the problem; nothing is
caught or retried on the way up. The CLI is the only place that turns them
into output and an exit code.
"""
from __future__ import annotations

import os
from typing import List, Optional

from buildgate.models import ValidationResult


class BuildValidationError(Exception):
    code = "BUILD_INVALID"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def relpath(self, pkg_dir: str) -> Optional[str]:
        if not self.path:
            return None
        try:
            rel = os.path.relpath(self.path, pkg_dir)
        except ValueError:
            return self.path
        if rel.startswith(".."):
            return self.path
        return rel.replace("\\", "/")

    def to_result(self, pkg_dir: str) -> ValidationResult:
        return ValidationResult(
            level="ERROR",
            code=self.code,
            message=self.message,
            relpath=self.relpath(pkg_dir),
        )


class ManifestError(BuildValidationError):
    code = "MANIFEST_INVALID"


class FileValidationError(BuildValidationError):
    code = "FILE_INVALID"

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}\n{reason}", path=path)
        self.reason = reason


class TypeCheckError(FileValidationError):
    code = "TYPECHECK_FAILED"


class EntryResolutionError(BuildValidationError):
    code = "ENTRY_MISSING"

    def __init__(self, entry: str, manifest_path: str, reason: str = ""):
        message = f'Error validating path "{entry}" inside of "{manifest_path}"'
        if reason:
            message = f"{message}\n{reason}"
        super().__init__(message, path=manifest_path)
        self.entry = entry
        self.manifest_path = manifest_path


class UnexpectedFilesError(BuildValidationError):
    code = "UNEXPECTED_FILES"

    def __init__(self, paths: List[str], hint: str):
        listing = "\n".join(paths)
        super().__init__(
            f"Unexpected files found in the package build:\n{listing}\n\n"
            f'If this is on purpose, add the file(s) to the "files" array in "{hint}"'
        )
        self.paths = list(paths)
        self.hint = hint


class StructuralError(BuildValidationError):
    code = "UNEXPECTED_ENTRY"

    def __init__(self, path: str):
        super().__init__(f"unexpected {path}", path=path)
