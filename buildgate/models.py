from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class ValidationResult:
    level: str  # INFO | ERROR
    code: str   # stable short identifier (e.g. FILE_INVALID)
    message: str
    relpath: Optional[str] = None  # relative to pkg_dir when applicable


# "./sub" -> "./sub.cjs" or {"import": "./sub.mjs", "require": "./sub.cjs"}
ExportTarget = Union[str, Dict[str, object]]


@dataclass(frozen=True)
class PackageManifest:
    path: str                       # absolute path of package.json
    files: Tuple[str, ...]          # relative to pkg_dir, declared order
    main: Optional[str] = None
    module: Optional[str] = None
    types: Optional[str] = None
    exports: Dict[str, ExportTarget] = field(default_factory=dict)
