# FileMaker Data MCP Server
# File: analyzers/metadata.py
# Version: v1

"""Database-wide metadata export.

Walks every layout sequentially and assembles fields, portals, scripts, value
lists and portal-derived relationship guesses into one document. A layout
whose metadata cannot be read is skipped; failing to list layouts or scripts
fails the whole export.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from ..errors import ErrorCode, FileMakerError
from ..models import LayoutMetadata, flatten_entries
from ..session import SessionManager
from .relationships import infer_relationship_from_portal, infer_table_from_portal_name

logger = logging.getLogger(__name__)

DATA_API_LIMITATIONS: List[str] = [
    "Relationship definitions are not available through the Data API",
    "Calculation formulas are not available through the Data API",
    "Script contents are not available (names only)",
    "Table definitions are not available (inferred from layouts only)",
    "Security and privilege settings are not available",
    "Custom functions are not available",
]

SESSION_ERRORS = (ErrorCode.SESSION_EXPIRED, ErrorCode.SESSION_INVALID)


def _layout_entry(metadata: LayoutMetadata) -> Dict[str, Any]:
    return {
        "name": metadata.name,
        "fields": [f.to_dict() for f in metadata.fields],
        "portals": [
            {
                "name": portal_name,
                "related_table_name": infer_table_from_portal_name(portal_name),
                "fields": [f.to_dict() for f in portal_fields],
            }
            for portal_name, portal_fields in metadata.portals.items()
        ],
    }


async def export_database_metadata(
    session: SessionManager,
    include_layouts: bool = True,
    include_scripts: bool = True,
    include_value_lists: bool = True,
    include_portal_analysis: bool = True,
) -> Dict[str, Any]:
    logger.info(
        "Exporting database metadata (layouts=%s, scripts=%s, value_lists=%s, portals=%s)",
        include_layouts,
        include_scripts,
        include_value_lists,
        include_portal_analysis,
    )

    layouts: List[Dict[str, Any]] = []
    scripts: List[Dict[str, Any]] = []
    relationships: List[Dict[str, Any]] = []
    value_lists: Dict[str, List[str]] = {}
    skipped: List[Dict[str, str]] = []

    if include_layouts:
        entries = await session.run_authenticated(
            lambda client, token: client.list_layouts(token)
        )
        layout_names = flatten_entries(entries)
        logger.debug("Found %s layouts", len(layout_names))

        for layout_name in layout_names:
            try:
                metadata = await session.run_authenticated(
                    lambda client, token: client.get_layout_metadata(layout_name, token)
                )
            except FileMakerError as exc:
                if exc.code in SESSION_ERRORS:
                    raise
                logger.warning(
                    "Skipping layout %s: %s", layout_name, exc.error.message
                )
                skipped.append({"layout": layout_name, "reason": exc.error.message})
                continue

            layouts.append(_layout_entry(metadata))

            if include_portal_analysis:
                for portal_name, portal_fields in metadata.portals.items():
                    relationships.append(
                        infer_relationship_from_portal(
                            layout_name, portal_name, portal_fields
                        ).to_dict()
                    )

            if include_value_lists:
                for vl_name, vl_values in metadata.value_lists.items():
                    value_lists.setdefault(vl_name, vl_values)

    if include_scripts:
        script_entries = await session.run_authenticated(
            lambda client, token: client.list_scripts(token)
        )
        scripts = [
            {"name": name, "is_available": True} for name in flatten_entries(script_entries)
        ]

    info = session.session_info
    data: Dict[str, Any] = {
        "database": {
            "name": info.database if info and info.database else "unknown",
            "server": info.server if info and info.server else "unknown",
        },
        "layouts": layouts,
        "scripts": scripts,
    }

    if include_value_lists and value_lists:
        data["value_lists"] = [
            {"name": name, "values": values} for name, values in value_lists.items()
        ]

    if include_portal_analysis and relationships:
        data["inferred_relationships"] = relationships

    if skipped:
        data["skipped_layouts"] = skipped

    logger.info(
        "Metadata export completed: %s layouts, %s scripts, %s value lists, %s relationships",
        len(layouts),
        len(scripts),
        len(value_lists),
        len(relationships),
    )

    return {
        "data": data,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "limitations": list(DATA_API_LIMITATIONS),
    }
