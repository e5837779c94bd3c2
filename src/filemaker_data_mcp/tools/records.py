# FileMaker Data MCP Server
# File: tools/records.py
# Version: v1

"""Read-only record tools.

The FileMaker Data API offset is 1-based. Nothing here creates, edits or
deletes records.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..errors import FileMakerError, create_error
from ..session import SessionManager
from .common import respond

DEFAULT_OFFSET = 1
DEFAULT_LIMIT = 20


async def get_records(
    session: SessionManager,
    layout: str,
    offset: int = DEFAULT_OFFSET,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    record_set = await session.run_authenticated(
        lambda client, token: client.get_records(layout, token, offset=offset, limit=limit)
    )
    return {
        "layout": layout,
        "records": [r.to_dict() for r in record_set.records],
        "data_info": record_set.data_info(),
    }


async def get_record_by_id(session: SessionManager, layout: str, record_id: str) -> Dict[str, Any]:
    record_set = await session.run_authenticated(
        lambda client, token: client.get_record(layout, record_id, token)
    )
    if not record_set.records:
        raise FileMakerError(create_error(404, 101, f"Record {record_id} not found on {layout}"))
    return {"layout": layout, "record": record_set.records[0].to_dict()}


async def find_records(
    session: SessionManager,
    layout: str,
    query: List[Dict[str, Any]],
    sort: Optional[List[Dict[str, Any]]] = None,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
) -> Dict[str, Any]:
    """Run a FileMaker find; each entry of ``query`` is one OR-ed request."""
    if not query:
        raise FileMakerError(create_error(400, details="Find query must contain at least one request"))

    record_set = await session.run_authenticated(
        lambda client, token: client.find_records(
            layout, token, query, sort=sort, offset=offset, limit=limit
        )
    )
    return {
        "layout": layout,
        "records": [r.to_dict() for r in record_set.records],
        "data_info": record_set.data_info(),
    }


async def get_record_count(session: SessionManager, layout: str) -> Dict[str, Any]:
    record_set = await session.run_authenticated(
        lambda client, token: client.get_records(layout, token, offset=1, limit=1)
    )
    return {
        "layout": layout,
        "total_record_count": record_set.total_record_count,
        "found_count": record_set.found_count,
    }


def register_tools(server: Any, session: SessionManager) -> None:
    """Register record tools on an MCP Server-like instance."""
    if server is None or not hasattr(server, "tool"):
        raise ValueError(
            "register_tools(server, session) expects an MCP Server-like object that exposes a .tool() decorator."
        )

    @server.tool(
        name="fm_get_records",
        description="Read records from a layout with paging (offset starts at 1, default limit 20).",
    )
    async def mcp_get_records(
        layout: str,
        offset: int = DEFAULT_OFFSET,
        limit: int = DEFAULT_LIMIT,
    ) -> Dict[str, Any]:
        return await respond(get_records(session, layout, offset=offset, limit=limit))

    @server.tool(name="fm_get_record_by_id", description="Read a single record by its FileMaker record id.")
    async def mcp_get_record_by_id(layout: str, record_id: str) -> Dict[str, Any]:
        return await respond(get_record_by_id(session, layout, record_id))

    @server.tool(
        name="fm_find_records",
        description=(
            "Find records matching FileMaker find requests, e.g. "
            '[{"FirstName": "John"}, {"LastName": "Doe"}]; requests are OR-ed. '
            'Optional sort: [{"fieldName": "LastName", "sortOrder": "ascend"}].'
        ),
    )
    async def mcp_find_records(
        layout: str,
        query: List[Dict[str, Any]],
        sort: Optional[List[Dict[str, Any]]] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await respond(
            find_records(session, layout, query, sort=sort, offset=offset, limit=limit)
        )

    @server.tool(
        name="fm_get_record_count",
        description="Return the total record count of a layout's table.",
    )
    async def mcp_get_record_count(layout: str) -> Dict[str, Any]:
        return await respond(get_record_count(session, layout))
