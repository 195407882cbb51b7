#!/usr/bin/env python3
"""Command line entry point for the Terragrunt docs MCP server.

Usage:
  python -m terragrunt_docs_mcp             # serve over stdio
  python -m terragrunt_docs_mcp --test      # print the tool/resource listing and exit
  python -m terragrunt_docs_mcp --version
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from terragrunt_docs_mcp import __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-terragrunt-docs",
        description="MCP server exposing Terragrunt documentation and open GitHub issues.",
    )
    parser.add_argument(
        "--test",
        action="store_true",
        help="Build the tool and resource listing, print it to stderr, then exit.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run the server (or its self-check) until it exits."""
    args = build_parser().parse_args(sys.argv[1:] if argv is None else argv)

    # Imported late so --help and --version work without the MCP SDK.
    from terragrunt_docs_mcp.server import run_server, test_server

    try:
        asyncio.run(test_server() if args.test else run_server())
    except KeyboardInterrupt:
        print("\nmcp-terragrunt-docs interrupted, shutting down", file=sys.stderr)
        return 130
    except Exception as exc:  # pylint: disable=broad-exception-caught
        print(f"mcp-terragrunt-docs failed: {exc}", file=sys.stderr)
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
