# FileMaker Data MCP Server
# File: tools/metadata.py
# Version: v1

"""Metadata tools: layouts, layout metadata, scripts and value lists."""

from __future__ import annotations

from typing import Any, Dict

from ..session import SessionManager
from .common import respond


async def get_layouts(session: SessionManager) -> Dict[str, Any]:
    entries = await session.run_authenticated(lambda client, token: client.list_layouts(token))
    return {"layouts": [e.to_dict() for e in entries]}


async def get_layout_metadata(session: SessionManager, layout: str) -> Dict[str, Any]:
    metadata = await session.run_authenticated(
        lambda client, token: client.get_layout_metadata(layout, token)
    )
    return {
        "layout": layout,
        "fields": [f.to_dict() for f in metadata.fields],
        "portals": {
            name: [f.to_dict() for f in fields] for name, fields in metadata.portals.items()
        },
        "value_lists": [
            {"name": name, "values": values} for name, values in metadata.value_lists.items()
        ],
    }


async def get_scripts(session: SessionManager) -> Dict[str, Any]:
    entries = await session.run_authenticated(lambda client, token: client.list_scripts(token))
    return {"scripts": [e.to_dict() for e in entries]}


async def list_value_lists(session: SessionManager, layout: str) -> Dict[str, Any]:
    metadata = await session.run_authenticated(
        lambda client, token: client.get_layout_metadata(layout, token)
    )
    return {
        "layout": layout,
        "value_lists": [
            {"name": name, "values": values} for name, values in metadata.value_lists.items()
        ],
    }


def register_tools(server: Any, session: SessionManager) -> None:
    """Register metadata tools on an MCP Server-like instance."""
    if server is None or not hasattr(server, "tool"):
        raise ValueError(
            "register_tools(server, session) expects an MCP Server-like object that exposes a .tool() decorator."
        )

    @server.tool(name="fm_get_layouts", description="List all layouts of the FileMaker database.")
    async def mcp_get_layouts() -> Dict[str, Any]:
        return await respond(get_layouts(session))

    @server.tool(
        name="fm_get_layout_metadata",
        description="Get field definitions, portals and value lists of a layout.",
    )
    async def mcp_get_layout_metadata(layout: str) -> Dict[str, Any]:
        return await respond(get_layout_metadata(session, layout))

    @server.tool(name="fm_get_scripts", description="List all scripts of the FileMaker database (names only).")
    async def mcp_get_scripts() -> Dict[str, Any]:
        return await respond(get_scripts(session))

    @server.tool(
        name="fm_list_value_lists",
        description="List the value lists (and their values) available on a layout.",
    )
    async def mcp_list_value_lists(layout: str) -> Dict[str, Any]:
        return await respond(list_value_lists(session, layout))
