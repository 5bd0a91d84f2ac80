"""Command line entrypoint: `tauri-typegen generate` and `tauri-typegen init`."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tauri_typegen.core.config import (
    CONFIG_FILE_NAME, GenerateConfig, build_config, discover_config, get_version, load_config, save_config,
)
from tauri_typegen.core.errors import ConfigError, TypegenError
from tauri_typegen.core.integrator import generate
from tauri_typegen.core.utils import configure_logging


logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tauri-typegen",
        description="Generate a typed TypeScript client from the commands of a Tauri project.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Analyze Rust sources and write TypeScript bindings.",
    )
    generate_parser.add_argument("-p", "--project-path", help="Tauri source directory (default ./src-tauri).")
    generate_parser.add_argument("-o", "--output-path", help="Output directory (default ./src/generated).")
    generate_parser.add_argument(
        "-v", "--validation",
        dest="validation_library",
        help="Validation library: zod or none (default none).",
    )
    generate_parser.add_argument("--verbose", action="store_true", default=None, help="Enable debug logging.")
    generate_parser.add_argument(
        "--visualize-deps",
        action="store_true",
        default=None,
        help="Also write dependency-graph.txt and dependency-graph.dot.",
    )
    generate_parser.add_argument("-c", "--config", help="Path to a typegen.json configuration file.")

    init_parser = subparsers.add_parser(
        "init",
        help="Write a typegen.json with default settings.",
    )
    init_parser.add_argument(
        "path",
        nargs="?",
        default=CONFIG_FILE_NAME,
        help=f"Where to write the configuration (defaults to ./{CONFIG_FILE_NAME}).",
    )
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing configuration file.")
    init_parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    return parser


def _resolve_config(args: argparse.Namespace) -> GenerateConfig:
    """File configuration first, then any flags given explicitly."""
    base = load_config(Path(args.config)) if args.config else discover_config()
    overrides = {
        "project_path": args.project_path,
        "output_path": args.output_path,
        "validation_library": args.validation_library,
        "verbose": args.verbose,
        "visualize_deps": args.visualize_deps,
    }
    return build_config(overrides, base)


def _run_generate(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    configure_logging(verbose=config.verbose)

    result = generate(config)
    for diagnostic in result.diagnostics:
        logger.debug(f"Diagnostic: {diagnostic}")
    print(f"tauri-typegen: wrote {len(result.files)} files to {config.output_path}")
    return 0


def _run_init(args: argparse.Namespace) -> int:
    config_path = Path(args.path)
    if config_path.exists() and not args.force:
        raise ConfigError(f"{config_path} already exists; pass --force to overwrite")
    save_config(GenerateConfig(), config_path)
    print(f"tauri-typegen: created {config_path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint. Returns the process exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        if args.command == "init":
            return _run_init(args)
        return _run_generate(args)
    except TypegenError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
