from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

APP_NAME = "buildgate"
APP_VERSION = "0.3.0"

NODE_BIN_DEFAULT = "node"
MANIFEST_NAME = "package.json"
TSCONFIG_NAME = "tsconfig.json"


def _abs(path: str, base_dir: Optional[str] = None) -> str:
    p = Path(path).expanduser()
    if not p.is_absolute() and base_dir:
        p = Path(base_dir) / p
    return os.path.normpath(os.path.abspath(p))


@dataclass(frozen=True)
class BuildConfig:
    pkg_dir: str    # absolute path of the build output
    root_dir: str   # project root holding tsconfig.json
    esm_node: bool = False
    node_bin: str = NODE_BIN_DEFAULT
    files_hint: Optional[str] = None  # where the declared file list is edited

    @classmethod
    def create(
        cls,
        pkg_dir: str,
        root_dir: Optional[str] = None,
        esm_node: bool = False,
        node_bin: Optional[str] = None,
        files_hint: Optional[str] = None,
        base_dir: Optional[str] = None,
    ) -> "BuildConfig":
        """
        Build a config with every path made absolute.

        Relative paths resolve against base_dir (or the current directory).
        root_dir defaults to the current directory.
        """
        if not str(pkg_dir).strip():
            raise ValueError("pkg_dir is required")

        return cls(
            pkg_dir=_abs(pkg_dir, base_dir),
            root_dir=_abs(root_dir or os.getcwd(), base_dir),
            esm_node=bool(esm_node),
            node_bin=node_bin or NODE_BIN_DEFAULT,
            files_hint=_abs(files_hint, base_dir) if files_hint else None,
        )

    @property
    def manifest_path(self) -> str:
        return os.path.join(self.pkg_dir, MANIFEST_NAME)

    @property
    def tsconfig_path(self) -> str:
        return os.path.join(self.root_dir, TSCONFIG_NAME)


def from_json_dict(d: Dict[str, Any], base_dir: Optional[str] = None) -> BuildConfig:
    pkg_dir = d.get("pkgDir")
    if not isinstance(pkg_dir, str) or not pkg_dir.strip():
        raise ValueError('config is missing "pkgDir"')

    return BuildConfig.create(
        pkg_dir=pkg_dir,
        root_dir=d.get("rootDir") or base_dir,
        esm_node=bool(d.get("esmNode", False)),
        node_bin=d.get("nodeBin") or None,
        files_hint=d.get("filesHint") or None,
        base_dir=base_dir,
    )


def load_config(path: str) -> BuildConfig:
    config_path = Path(path).resolve()
    d = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(d, dict):
        raise ValueError(f"config must be a JSON object: {config_path}")
    return from_json_dict(d, base_dir=str(config_path.parent))
