# FileMaker Data MCP Server
# File: analyzers/portals.py
# Version: v1

"""Portal (related record list) analysis for a single layout."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..errors import ErrorCode, FileMakerError
from ..session import SessionManager
from .relationships import infer_table_from_portal_name

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_LIMIT = 5
MAX_SAMPLE_LIMIT = 100

_RECORD_KEYS = ("recordId", "modId")

SESSION_ERRORS = (ErrorCode.SESSION_EXPIRED, ErrorCode.SESSION_INVALID)


def _sample_rows(rows: List[Dict[str, Any]], limit: int) -> List[Dict[str, Any]]:
    samples: List[Dict[str, Any]] = []
    for row in rows[:limit]:
        if not isinstance(row, dict):
            continue
        samples.append({k: v for k, v in row.items() if k not in _RECORD_KEYS})
    return samples


async def analyze_portal_data(
    session: SessionManager,
    layout: str,
    include_sample_data: bool = False,
    sample_limit: int = DEFAULT_SAMPLE_LIMIT,
) -> Dict[str, Any]:
    """Describe every portal on ``layout``.

    With ``include_sample_data`` the first record of the layout is read and
    up to ``sample_limit`` (max 100) related rows per portal are returned. A
    failure reading that record is logged; the metadata is still returned.
    """
    sample_limit = max(0, min(int(sample_limit), MAX_SAMPLE_LIMIT))

    logger.info(
        "Analyzing portals on layout %s (sample_data=%s, limit=%s)",
        layout,
        include_sample_data,
        sample_limit,
    )

    metadata = await session.run_authenticated(
        lambda client, token: client.get_layout_metadata(layout, token)
    )

    if not metadata.portals:
        return {
            "layout": layout,
            "portals": [],
            "summary": {"total_portals": 0, "related_tables": []},
        }

    portal_rows: Dict[str, List[Dict[str, Any]]] = {}
    if include_sample_data:
        try:
            record_set = await session.run_authenticated(
                lambda client, token: client.get_records(layout, token, offset=1, limit=1)
            )
        except FileMakerError as exc:
            if exc.code in SESSION_ERRORS:
                raise
            logger.warning(
                "Could not read sample record from %s: %s", layout, exc.error.message
            )
        else:
            if record_set.records:
                portal_rows = record_set.records[0].portal_data

    portals: List[Dict[str, Any]] = []
    related_tables: List[str] = []

    for portal_name, portal_fields in metadata.portals.items():
        related_table = infer_table_from_portal_name(portal_name)
        if related_table not in related_tables:
            related_tables.append(related_table)

        entry: Dict[str, Any] = {
            "name": portal_name,
            "related_table_name": related_table,
            "fields": [f.to_dict() for f in portal_fields],
            "record_count": 0,
        }

        rows = portal_rows.get(portal_name)
        if include_sample_data and isinstance(rows, list):
            entry["record_count"] = len(rows)
            entry["sample_data"] = _sample_rows(rows, sample_limit)

        portals.append(entry)

    logger.info("Portal analysis of %s found %s portals", layout, len(portals))

    return {
        "layout": layout,
        "portals": portals,
        "summary": {
            "total_portals": len(portals),
            "related_tables": related_tables,
        },
    }
