#!/usr/bin/env python3
"""
Entry point for the CHUK Patterns MCP Server.

Supports the stdio and http transports. Paths given on the command line
override the working-directory defaults used by async_server.
"""

import argparse
import asyncio
import logging
import os

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PATH_OPTIONS = {
    "store_dir": "CHUK_PATTERNS_STORE_DIR",
    "fields_file": "CHUK_PATTERNS_FIELDS_FILE",
    "settings_file": "CHUK_PATTERNS_SETTINGS_FILE",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CHUK Patterns MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport mode (default: stdio)",
    )
    parser.add_argument("--port", type=int, default=8000, help="HTTP port (http transport only)")
    parser.add_argument("--store-dir", help="Directory holding saved pattern documents")
    parser.add_argument("--fields-file", help="YAML index -> fields mapping for discovery")
    parser.add_argument("--settings-file", help="YAML service settings")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main() -> None:
    """Parse arguments, configure paths and run the server."""
    args = build_parser().parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    for option, env_var in PATH_OPTIONS.items():
        value = getattr(args, option)
        if value:
            os.environ[env_var] = value

    # async_server builds the service at import time, so paths must be set first
    from chuk_mcp_patterns.async_server import mcp

    if args.transport == "stdio":
        logger.info("Starting CHUK Patterns MCP Server (stdio)")
        asyncio.run(mcp.run_stdio())
    else:
        logger.info("Starting CHUK Patterns MCP Server (http:%d)", args.port)
        asyncio.run(mcp.run_http(port=args.port))


if __name__ == "__main__":
    main()
