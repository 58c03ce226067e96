from __future__ import annotations

import json
import sys
from pathlib import Path

DEMO_MANIFEST = {
    "name": "demo-pkg",
    "version": "0.0.1",
    "main": "./index.cjs",
    "module": "./index.mjs",
    "exports": {
        ".": {"import": "./index.mjs", "require": "./index.cjs"},
        "./package.json": "./package.json",
    },
    "files": [
        "package.json",
        "index.cjs",
        "index.mjs",
        "index.cjs.map",
        "README.md",
    ],
}


def make_demo_build(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)

    (root / "package.json").write_text(json.dumps(DEMO_MANIFEST, indent=2), encoding="utf-8")
    (root / "index.cjs").write_text("module.exports = { answer: 42 };\n", encoding="utf-8")
    (root / "index.mjs").write_text("export const answer = 42;\n", encoding="utf-8")
    (root / "index.cjs.map").write_text('{"version":3,"sources":[],"mappings":""}', encoding="utf-8")
    (root / "README.md").write_text("# demo-pkg\n", encoding="utf-8")
    return root


def main():
    root = Path(sys.argv[1] if len(sys.argv) > 1 else "demo_build/dist")
    make_demo_build(root)
    print(f"Created demo build at: {root.resolve()}")
    print(f"Validate it with: buildgate --pkg-dir {root} --esm-node")

if __name__ == "__main__":
    main()
