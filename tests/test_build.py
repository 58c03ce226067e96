import importlib.util
import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from buildgate.config import BuildConfig
from buildgate.core.build import run
from buildgate.errors import (
    EntryResolutionError,
    FileValidationError,
    ManifestError,
    UnexpectedFilesError,
)

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "make_demo_build.py"
_spec = importlib.util.spec_from_file_location("make_demo_build", SCRIPT_PATH)
make_demo_build = importlib.util.module_from_spec(_spec)
assert _spec and _spec.loader
_spec.loader.exec_module(make_demo_build)


def _snapshot(root: Path):
    return sorted(
        (str(p.relative_to(root)), p.read_bytes()) for p in root.rglob("*") if p.is_file()
    )


class TestValidateBuild(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name)
        self.pkg = self.root / "dist"
        self.pkg.mkdir()
        self.config = BuildConfig.create(pkg_dir=str(self.pkg), root_dir=str(self.root))

    def tearDown(self):
        self._td.cleanup()

    def _build(self, files, manifest_extra=None):
        manifest = {"name": "pkg", "files": ["package.json"] + list(files)}
        manifest.update(manifest_extra or {})
        (self.pkg / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
        for rel in files:
            p = self.pkg / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text("{}" if rel.endswith((".json", ".map")) else "content", encoding="utf-8")

    def test_valid_build_passes_and_is_idempotent(self):
        self._build(
            ["data.json", "lib/index.js", "lib/index.js.map", "README.md"],
            {"main": "./lib/index.js", "exports": {".": "./lib/index.js", "./data": "./data.json"}},
        )
        before = _snapshot(self.pkg)

        first = run(self.config)
        second = run(self.config)

        self.assertEqual(first, second)
        self.assertTrue(all(r.level == "INFO" for r in first))
        self.assertIn("5 declared file(s) validated", [r.message for r in first])
        self.assertEqual(_snapshot(self.pkg), before)

    def test_missing_declared_file_fails_before_tree_scan(self):
        self._build(["a.txt"])
        (self.pkg / "package.json").write_text(
            json.dumps({"files": ["package.json", "a.txt", "b.txt"]}), encoding="utf-8"
        )
        with mock.patch("buildgate.core.build.scan_tree") as scan:
            with self.assertRaises(FileValidationError) as ctx:
                run(self.config)
        scan.assert_not_called()
        self.assertEqual(ctx.exception.path, str(self.pkg / "b.txt"))
        self.assertEqual(ctx.exception.reason, "missing file")

    def test_unexpected_files_fail(self):
        self._build(["index.js"])
        (self.pkg / "index.js.tmp").write_text("left over", encoding="utf-8")
        (self.pkg / "cache").mkdir()
        (self.pkg / "cache" / "x.bin").write_bytes(b"x")

        with self.assertRaises(UnexpectedFilesError) as ctx:
            run(self.config)
        self.assertEqual(
            ctx.exception.paths,
            [str(self.pkg / "cache" / "x.bin"), str(self.pkg / "index.js.tmp")],
        )
        self.assertEqual(ctx.exception.hint, self.config.manifest_path)

    def test_files_hint_is_used_in_guidance(self):
        self._build([])
        (self.pkg / "stray.js").write_text("x", encoding="utf-8")
        hint = str(self.root / "scripts" / "package-json.ts")
        config = BuildConfig.create(
            pkg_dir=str(self.pkg), root_dir=str(self.root), files_hint=hint
        )
        with self.assertRaises(UnexpectedFilesError) as ctx:
            run(config)
        self.assertIn(hint, str(ctx.exception))

    def test_missing_export_target_fails(self):
        self._build(
            ["sub.cjs"],
            {"exports": {"./sub": {"import": "./sub.mjs", "require": "./sub.cjs"}}},
        )
        with mock.patch("buildgate.core.validator.require_module") as req:
            req.return_value.ok = True
            with self.assertRaises(EntryResolutionError) as ctx:
                run(self.config)
        self.assertEqual(ctx.exception.entry, "./sub.mjs")

    def test_manifest_missing(self):
        with self.assertRaises(ManifestError):
            run(self.config)


@unittest.skipUnless(shutil.which("node"), "node is not installed")
class TestDemoBuild(unittest.TestCase):
    def test_demo_build_validates(self):
        with tempfile.TemporaryDirectory() as td:
            pkg = make_demo_build.make_demo_build(Path(td) / "dist")
            config = BuildConfig.create(pkg_dir=str(pkg), root_dir=td, esm_node=True)
            results = run(config)
            self.assertEqual([r.code for r in results], ["FILES_OK", "ENTRIES_OK", "TREE_OK"])

    def test_demo_build_with_throwing_entry_fails(self):
        with tempfile.TemporaryDirectory() as td:
            pkg = make_demo_build.make_demo_build(Path(td) / "dist")
            (pkg / "index.cjs").write_text("throw new Error('broken build');\n", encoding="utf-8")
            config = BuildConfig.create(pkg_dir=str(pkg), root_dir=td, esm_node=True)
            with self.assertRaises(FileValidationError) as ctx:
                run(config)
            self.assertEqual(ctx.exception.path, os.path.join(config.pkg_dir, "index.cjs"))


if __name__ == "__main__":
    unittest.main()
