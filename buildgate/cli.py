from __future__ import annotations

import argparse
from typing import List, Optional

from loguru import logger

from buildgate.config import APP_NAME, APP_VERSION, BuildConfig, load_config
from buildgate.core.build import run
from buildgate.core.report import build_report_dict, write_report_json
from buildgate.errors import BuildValidationError
from buildgate.logs import configure_logging
from buildgate.models import ValidationResult

EXIT_OK = 0
EXIT_INVALID = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Validate a finished package build before publishing it.",
    )
    parser.add_argument("--pkg-dir", help="Build output directory holding package.json")
    parser.add_argument("--root-dir", help="Project root holding tsconfig.json (default: cwd)")
    parser.add_argument(
        "--esm-node",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Execute .mjs files with a dynamic import instead of type-checking them",
    )
    parser.add_argument("--node", dest="node_bin", help="node executable (default: node)")
    parser.add_argument(
        "--files-hint",
        help="File to point at when undeclared files are found (default: the manifest)",
    )
    parser.add_argument("--config", help="JSON file with pkgDir/rootDir/esmNode/nodeBin/filesHint")
    parser.add_argument("--report", help="Write a JSON report of the run to this path")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-json", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    return parser


def config_from_args(args: argparse.Namespace) -> BuildConfig:
    """CLI flags override values loaded from --config."""
    base: Optional[BuildConfig] = load_config(args.config) if args.config else None

    pkg_dir = args.pkg_dir or (base.pkg_dir if base else None)
    if not pkg_dir:
        raise ValueError("--pkg-dir or --config is required")

    esm_node = args.esm_node
    if esm_node is None:
        esm_node = base.esm_node if base else False

    return BuildConfig.create(
        pkg_dir=pkg_dir,
        root_dir=args.root_dir or (base.root_dir if base else None),
        esm_node=esm_node,
        node_bin=args.node_bin or (base.node_bin if base else None),
        files_hint=args.files_hint or (base.files_hint if base else None),
    )


def _write_report(config: BuildConfig, path: Optional[str], results: List[ValidationResult], ok: bool) -> None:
    if not path:
        return
    written = write_report_json(build_report_dict(config, results, ok), path)
    logger.debug("report written to {}", written)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level, serialize=args.log_json)

    try:
        config = config_from_args(args)
    except (OSError, ValueError) as e:
        parser.error(str(e))

    try:
        results = run(config)
    except BuildValidationError as e:
        result = e.to_result(config.pkg_dir)
        logger.bind(path=e.path).error("Validate Build Error! [{}]\n{}", e.code, e.message)
        _write_report(config, args.report, [result], ok=False)
        return EXIT_INVALID

    for r in results:
        logger.debug("{}: {}", r.code, r.message)
    _write_report(config, args.report, results, ok=True)
    logger.info("validated build")
    return EXIT_OK
