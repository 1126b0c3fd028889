"""
Command line entry point for jsonnet-bundler.

Renames the local variables of every given file with a per-file prefix and
writes the results to the output directory.

Example:
    Run from the command line:
    $ jsonnet-bundler lib/util.libsonnet main.jsonnet -o bundle --root .
    $ python -m jsonnet_bundler.main --config bundle.json main.jsonnet
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from jsonnet_bundler import __version__
from jsonnet_bundler.core.config import VALID_CONFLICT_STRATEGIES, BundlerConfig
from jsonnet_bundler.core.orchestrator import BundleError, BundleOrchestrator
from jsonnet_bundler.utils.logger import VALID_LOG_LEVELS, setup_logger

APP_NAME = "jsonnet-bundler"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Prefix Jsonnet local variables per file so files can be bundled together.",
    )
    parser.add_argument("files", nargs="+", type=Path, metavar="FILE", help="Jsonnet files to process")
    parser.add_argument("-o", "--output-dir", help="output directory (default: output)")
    parser.add_argument("--root", help="project root; identities and output layout are relative to it")
    parser.add_argument("--config", type=Path, help="JSON configuration file")
    parser.add_argument("--separator", help="text between the file prefix and the original name")
    parser.add_argument("--no-header", action="store_true", help="do not prepend the provenance comment")
    parser.add_argument(
        "--conflict",
        choices=sorted(VALID_CONFLICT_STRATEGIES),
        help="what to do with existing output files",
    )
    parser.add_argument("--log-level", type=str.upper, choices=VALID_LOG_LEVELS, help="logging level")
    parser.add_argument("--log-file", type=Path, help="also write a detailed log to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_config(args: argparse.Namespace) -> BundlerConfig:
    """Merge the optional configuration file with command line overrides."""
    config = BundlerConfig.load(args.config) if args.config else BundlerConfig()
    if args.output_dir is not None:
        config.output_dir = args.output_dir
    if args.root is not None:
        config.project_root = args.root
    if args.separator is not None:
        config.separator = args.separator
    if args.no_header:
        config.add_header = False
    if args.conflict is not None:
        config.conflict_strategy = args.conflict
    if args.log_level is not None:
        config.log_level = args.log_level
    config.validate()
    return config


def main(argv: list[str] | None = None) -> int:
    """
    Run the bundler.

    Returns:
        Exit code: 0 on success, 1 on a fatal error, 2 on usage errors.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 2

    try:
        config = build_config(args)
    except (OSError, ValueError) as e:
        print(f"{APP_NAME}: error: {e}", file=sys.stderr)
        return 2

    logger = setup_logger("jsonnet_bundler", level=config.log_level, log_file=args.log_file)
    logger.info(f"{APP_NAME} {__version__} starting")

    try:
        result = BundleOrchestrator(config).process_files(args.files)
    except BundleError as e:
        for error in e.errors:
            logger.error(error)
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1

    for file_result in result.files:
        target = file_result.output_path or "skipped"
        print(f"{file_result.input_path} -> {target} ({file_result.prefix})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
