# FileMaker Data MCP Server
# File: tools/analysis.py
# Version: v1

"""Analysis tools: metadata export, relationship inference, portal analysis
and cross-layout search."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..analyzers import metadata, portals, relationships, search
from ..session import SessionManager
from .common import respond


def register_tools(server: Any, session: SessionManager) -> None:
    """Register analysis tools on an MCP Server-like instance."""
    if server is None or not hasattr(server, "tool"):
        raise ValueError(
            "register_tools(server, session) expects an MCP Server-like object that exposes a .tool() decorator."
        )

    @server.tool(
        name="fm_export_database_metadata",
        description=(
            "Export the structure of the whole database (layouts, fields, portals, scripts, "
            "value lists, guessed relationships) as JSON. Lists what the Data API cannot provide."
        ),
    )
    async def mcp_export_database_metadata(
        include_layouts: bool = True,
        include_scripts: bool = True,
        include_value_lists: bool = True,
        include_portal_analysis: bool = True,
    ) -> Dict[str, Any]:
        return await respond(
            metadata.export_database_metadata(
                session,
                include_layouts=include_layouts,
                include_scripts=include_scripts,
                include_value_lists=include_value_lists,
                include_portal_analysis=include_portal_analysis,
            )
        )

    @server.tool(
        name="fm_infer_relationships",
        description=(
            "Guess the relationships of a layout from its portals and foreign-key-like field "
            "names. Results are heuristic and carry a confidence level."
        ),
    )
    async def mcp_infer_relationships(layout: str, depth: int = 1) -> Dict[str, Any]:
        return await respond(relationships.infer_relationships(session, layout, depth=depth))

    @server.tool(
        name="fm_analyze_portal_data",
        description=(
            "Describe the portals of a layout (related table guess, fields) and optionally "
            "sample related rows from the first record (default 5, max 100)."
        ),
    )
    async def mcp_analyze_portal_data(
        layout: str,
        include_sample_data: bool = False,
        sample_limit: int = portals.DEFAULT_SAMPLE_LIMIT,
    ) -> Dict[str, Any]:
        return await respond(
            portals.analyze_portal_data(
                session,
                layout,
                include_sample_data=include_sample_data,
                sample_limit=sample_limit,
            )
        )

    @server.tool(
        name="fm_global_search_data",
        description=(
            "Search a text across several layouts at once (partial match on text, number, "
            "date and time fields). search_mode: contains, startsWith or exact."
        ),
    )
    async def mcp_global_search_data(
        search_text: str,
        layouts: List[str],
        max_fields_per_layout: int = search.DEFAULT_MAX_FIELDS_PER_LAYOUT,
        max_records_per_layout: int = search.DEFAULT_MAX_RECORDS_PER_LAYOUT,
        include_calculations: bool = False,
        search_mode: str = "contains",
    ) -> Dict[str, Any]:
        return await respond(
            search.global_search_data(
                session,
                search_text,
                layouts,
                max_fields_per_layout=max_fields_per_layout,
                max_records_per_layout=max_records_per_layout,
                include_calculations=include_calculations,
                search_mode=search_mode,
            )
        )

    @server.tool(
        name="fm_global_search_fields",
        description=(
            "Find fields across layouts by partial name and/or result type "
            "(text, number, date, time, timestamp, container)."
        ),
    )
    async def mcp_global_search_fields(
        field_name: Optional[str] = None,
        field_type: Optional[str] = None,
        max_layouts: int = search.DEFAULT_MAX_LAYOUTS,
        max_results: int = search.DEFAULT_MAX_FIELD_RESULTS,
    ) -> Dict[str, Any]:
        return await respond(
            search.global_search_fields(
                session,
                field_name=field_name,
                field_type=field_type,
                max_layouts=max_layouts,
                max_results=max_results,
            )
        )
