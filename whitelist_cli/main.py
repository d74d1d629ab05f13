"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m whitelist_cli root <items_file> [--json]
    python -m whitelist_cli prove <items_file> <target> [--out PATH] [--json]
    python -m whitelist_cli verify <proof_file> <target> (--root HEX | --items FILE | --trust-envelope-root) [--json]
    python -m whitelist_cli check <items_file> <target> [--json]
    python -m whitelist_cli config --init | --show

Environment Variables:
    WHITELIST_HASH_ALGORITHM    Digest algorithm (default: sha256)
    WHITELIST_ODD_POLICY        duplicate or promote (default: duplicate)
    WHITELIST_LOG_LEVEL         Log level (default: INFO)
    WHITELIST_LOG_FILE          Also write logs to this file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from whitelist_cli.commands import build, verify
from whitelist_cli.items import ItemsFileError
from whitelist_core import __version__
from whitelist_core.config import get_default_config_template, load_config
from whitelist_core.schemas.errors import WhitelistException


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _add_output_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on errors",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="whitelist",
        description="Merkle whitelist CLI - commit to an item set and prove membership.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./whitelist.yaml or ./whitelist.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- root command ---
    root_parser = subparsers.add_parser(
        "root",
        help="Build a tree and print its root",
    )
    root_parser.add_argument("items", type=str, help="Items file, one item per line")
    _add_output_flags(root_parser)
    root_parser.set_defaults(func=build.root_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Generate a membership proof for one item",
    )
    prove_parser.add_argument("items", type=str, help="Items file, one item per line")
    prove_parser.add_argument("target", type=str, help="Item to prove")
    prove_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the proof envelope here instead of stdout",
    )
    _add_output_flags(prove_parser)
    prove_parser.set_defaults(func=build.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a proof envelope against a root",
        description="Verify a membership proof without the item set.",
    )
    verify_parser.add_argument("proof", type=str, help="Proof envelope JSON file")
    verify_parser.add_argument("target", type=str, help="Item the proof is for")
    root_source = verify_parser.add_mutually_exclusive_group()
    root_source.add_argument(
        "--root",
        type=str,
        default=None,
        help="Trusted 0x-prefixed root",
    )
    root_source.add_argument(
        "--items",
        type=str,
        default=None,
        help="Items file to rebuild the trusted root from",
    )
    root_source.add_argument(
        "--trust-envelope-root",
        action="store_true",
        help="Use the root stored in the proof file (unsafe for untrusted proofs)",
    )
    _add_output_flags(verify_parser)
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- check command ---
    check_parser = subparsers.add_parser(
        "check",
        help="Check whether an item is on the whitelist",
    )
    check_parser.add_argument("items", type=str, help="Items file, one item per line")
    check_parser.add_argument("target", type=str, help="Item to look up")
    _add_output_flags(check_parser)
    check_parser.set_defaults(func=verify.check_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="whitelist.yaml",
        help="Path for config file (default: whitelist.yaml)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("You can also use environment variables (WHITELIST_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: whitelist config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=not a member / verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except (WhitelistException, OSError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file)

    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except (WhitelistException, ItemsFileError, OSError, ValueError) as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
