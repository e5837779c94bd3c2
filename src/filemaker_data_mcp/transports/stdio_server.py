# FileMaker Data MCP Server
# File: transports/stdio_server.py
# Version: v1

"""STDIO entrypoint for the FileMaker Data MCP server.

This is the script behind the ``filemaker-data-mcp`` console command.

It:

- routes package logging to stderr (stdout carries the MCP protocol),
- creates one SessionManager for the process,
- registers every fm_* tool on a FastMCP server, and
- runs the built-in stdio transport.
"""

from __future__ import annotations

import logging
import os

from mcp.server.fastmcp import FastMCP

from .. import __version__
from ..logging_config import configure_logging
from ..session import SessionManager
from ..tools import register_all_tools

logger = logging.getLogger(__name__)


def build_server(session: SessionManager | None = None) -> FastMCP:
    mcp = FastMCP("filemaker-data-mcp")
    register_all_tools(mcp, session or SessionManager())
    return mcp


def main() -> None:
    """Synchronous entrypoint for console_scripts."""
    configure_logging(os.getenv("FM_LOG_LEVEL") or os.getenv("LOG_LEVEL"))
    logger.info("Starting FileMaker Data MCP server %s", __version__)

    mcp = build_server()

    # Let FastMCP handle stdio + event loop setup.
    mcp.run()


if __name__ == "__main__":
    main()
