# FileMaker Data MCP Server
# File: tools/__init__.py
# Version: v1

"""Helpers for registering MCP tools."""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP  # type: ignore[import]

from ..session import SessionManager
from . import analysis, auth, metadata, records


def register_all_tools(mcp: FastMCP, session: SessionManager) -> None:
    """Register all MCP tools exposed by this server."""
    auth.register_tools(mcp, session)
    metadata.register_tools(mcp, session)
    records.register_tools(mcp, session)
    analysis.register_tools(mcp, session)
