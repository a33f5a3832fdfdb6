# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the typesync command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from typesync.compiler.type_compiler import UnsupportedTypeError
from typesync.emit.writer import NameCollisionError
from typesync.pipeline import check, clean, generate
from typesync.workspace.config import CONFIG_FILE_NAME, WorkspaceConfig, WorkspaceConfigError, load_workspace_config
from typesync.workspace.schema_file import SchemaFileError, load_schema_files

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the typesync CLI."""
    parser = argparse.ArgumentParser(
        prog="typesync",
        description="typesync - compile entity schemas into TypeScript type declarations",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every file written or removed")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate TypeScript declarations",
        description="Write one declaration file per entity plus an index file, and remove stale generated files.",
    )
    _add_common_arguments(generate_parser)
    generate_parser.add_argument(
        "--force",
        action="store_true",
        help="Rewrite every file even when its fingerprint is unchanged",
    )

    clean_parser = subparsers.add_parser(
        "clean",
        help="Remove the output directory",
        description="Delete the configured output directory and everything in it.",
    )
    _add_common_arguments(clean_parser)

    check_parser = subparsers.add_parser(
        "check",
        help="Check that generated declarations are up to date",
        description="Compare the output directory with freshly rendered declarations without writing anything.",
    )
    _add_common_arguments(check_parser)

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the typesync configuration (default: current directory)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to the configuration file (default: DIRECTORY/{CONFIG_FILE_NAME})",
    )


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "generate":
        return _cmd_generate(args)
    if args.command == "clean":
        return _cmd_clean(args)
    if args.command == "check":
        return _cmd_check(args)
    return 0


def _load_config(args: argparse.Namespace) -> WorkspaceConfig | None:
    """Load the configuration named by *args*, printing the error on failure."""
    directory = Path(args.directory).resolve()
    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return None

    config_path = Path(args.config) if args.config else directory / CONFIG_FILE_NAME
    try:
        return load_workspace_config(config_path)
    except WorkspaceConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    config = _load_config(args)
    if config is None:
        return 1

    try:
        entities = load_schema_files(config.schema_files)
        result = generate(entities, config.layer, force=args.force)
    except (SchemaFileError, UnsupportedTypeError, NameCollisionError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Generated {len(result.files)} TypeScript file(s) in {config.layer.output_dir}")
    return 0


def _cmd_clean(args: argparse.Namespace) -> int:
    """Handle the clean subcommand."""
    config = _load_config(args)
    if config is None:
        return 1

    output_dir = config.layer.output_dir
    if output_dir is None:
        print("Error: no output directory configured.", file=sys.stderr)
        return 1
    try:
        removed = clean(output_dir)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if removed:
        print(f"Removed {output_dir}")
    else:
        print(f"Nothing to clean: {output_dir} does not exist.")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    config = _load_config(args)
    if config is None:
        return 1

    try:
        entities = load_schema_files(config.schema_files)
        result = check(entities, config.layer)
    except (SchemaFileError, UnsupportedTypeError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not result.fresh:
        for discrepancy in result.discrepancies:
            print(discrepancy, file=sys.stderr)
        print("Error: generated TypeScript declarations are out of date. Run 'typesync generate'.", file=sys.stderr)
        return 1

    print("Generated TypeScript declarations are up to date.")
    return 0
