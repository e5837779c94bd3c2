# FileMaker Data MCP Server
# File: analyzers/search.py
# Version: v1

"""Cross-layout search.

- global_search_data(): find records whose searchable fields contain a text,
  one OR-query per layout, layouts processed strictly one after another.
- global_search_fields(): find fields by (partial) name and/or result type
  across the layouts of the database.

A failing layout is reported as skipped and never aborts the batch. Session
errors (expired / missing session) still propagate, since no later layout
could succeed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..errors import ErrorCode, FileMakerError, create_error
from ..models import FieldMetadata, flatten_entries
from ..session import SessionManager

logger = logging.getLogger(__name__)

DEFAULT_MAX_FIELDS_PER_LAYOUT = 50
DEFAULT_MAX_RECORDS_PER_LAYOUT = 100
ABSOLUTE_MAX_RECORDS = 1000

DEFAULT_MAX_LAYOUTS = 50
DEFAULT_MAX_FIELD_RESULTS = 500

SEARCHABLE_RESULT_TYPES = ("text", "number", "date", "time", "timestamp")
SEARCH_MODES = ("contains", "startsWith", "exact")

SESSION_ERRORS = (ErrorCode.SESSION_EXPIRED, ErrorCode.SESSION_INVALID)

GLOBAL_SEARCH_LIMITATIONS: List[str] = [
    "Layouts are searched one after another; many layouts make the search slow",
    "Container (binary) fields are never searched",
    "Calculation fields are only searched when explicitly requested",
    "Search values follow FileMaker find syntax (=, ==, !, * ...)",
]

GLOBAL_SEARCH_DISCLAIMER = (
    "This is a partial-match search over the fields of the given layouts, not "
    "a full-text search. Data outside those layouts and fields is not searched."
)


def _cap_int(value: Any, cap: int, min_value: int = 1) -> tuple[int, bool]:
    """Clamp an integer to [min_value, cap]. Returns (effective, cap_applied)."""
    try:
        v = int(value)
    except (TypeError, ValueError):
        v = min_value

    if v < min_value:
        return min_value, True

    if cap > 0 and v > cap:
        return cap, True

    return v, False


def _bad_request(details: str) -> FileMakerError:
    return FileMakerError(create_error(400, details=details))


class _SkipLayout(Exception):
    """Layout could not be searched; ``reason`` ends up in the summary."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


# ---------------------------------------------------------------------------
# Record search
# ---------------------------------------------------------------------------


def is_searchable_field(field: FieldMetadata, include_calculations: bool = False) -> bool:
    if field.result not in SEARCHABLE_RESULT_TYPES:
        return False
    if field.type == "summary" or field.is_global:
        return False
    if field.type == "calculation" and not include_calculations:
        return False
    return True


def build_search_value(search_text: str, search_mode: str, result_type: str) -> str:
    """Find-request value for one field.

    Only text fields get wildcard or equality decoration; other types are
    searched with the raw text whatever the mode.
    """
    if result_type != "text":
        return search_text
    if search_mode == "exact":
        return f"=={search_text}"
    if search_mode == "startsWith":
        return f"{search_text}*"
    return f"*{search_text}*"


def _matched_fields(
    field_data: Dict[str, Any],
    searched: Iterable[FieldMetadata],
    search_text: str,
) -> List[str]:
    needle = search_text.lower()
    matched = []
    for f in searched:
        value = field_data.get(f.name)
        if value is not None and needle in str(value).lower():
            matched.append(f.name)
    return matched


async def _search_layout(
    session: SessionManager,
    layout: str,
    search_text: str,
    max_fields: int,
    max_records: int,
    include_calculations: bool,
    search_mode: str,
) -> Dict[str, Any]:
    """Search one layout, raising _SkipLayout when it has to be skipped."""
    try:
        metadata = await session.run_authenticated(
            lambda client, token: client.get_layout_metadata(layout, token)
        )
    except FileMakerError as exc:
        if exc.code in SESSION_ERRORS:
            raise
        raise _SkipLayout(f"Metadata error: {exc.error.message}") from exc

    fields = [f for f in metadata.fields if is_searchable_field(f, include_calculations)]
    fields = fields[:max_fields]
    if not fields:
        raise _SkipLayout("No searchable fields")

    query = [{f.name: build_search_value(search_text, search_mode, f.result)} for f in fields]
    searched_names = [f.name for f in fields]

    try:
        record_set = await session.run_authenticated(
            lambda client, token: client.find_records(layout, token, query, limit=max_records)
        )
    except FileMakerError as exc:
        if exc.error.is_no_records_match:
            return {
                "layout": layout,
                "record_count": 0,
                "records": [],
                "searched_fields": searched_names,
            }
        if exc.code in SESSION_ERRORS:
            raise
        raise _SkipLayout(f"Search error: {exc.error.message}") from exc

    records = [
        {"record_id": r.record_id, "field_data": r.field_data} for r in record_set.records
    ]
    result: Dict[str, Any] = {
        "layout": layout,
        "record_count": len(records),
        "records": records,
        "searched_fields": searched_names,
    }

    if record_set.records:
        matched = _matched_fields(record_set.records[0].field_data, fields, search_text)
        if matched:
            result["matched_fields"] = matched

    return result


async def global_search_data(
    session: SessionManager,
    search_text: str,
    layouts: List[str],
    max_fields_per_layout: int = DEFAULT_MAX_FIELDS_PER_LAYOUT,
    max_records_per_layout: int = DEFAULT_MAX_RECORDS_PER_LAYOUT,
    include_calculations: bool = False,
    search_mode: str = "contains",
) -> Dict[str, Any]:
    if not search_text or not search_text.strip():
        raise _bad_request("Search text is empty")
    if not layouts:
        raise _bad_request("No layouts given to search")
    if search_mode not in SEARCH_MODES:
        raise _bad_request(
            f"Unknown search mode '{search_mode}' (expected one of: {', '.join(SEARCH_MODES)})"
        )

    max_fields, _ = _cap_int(max_fields_per_layout, 0)
    max_records, _ = _cap_int(max_records_per_layout, ABSOLUTE_MAX_RECORDS)

    logger.info(
        "Starting global search over %s layouts (mode=%s, max_fields=%s, max_records=%s)",
        len(layouts),
        search_mode,
        max_fields,
        max_records,
    )

    results: List[Dict[str, Any]] = []
    skipped: List[Dict[str, str]] = []
    total_records = 0

    for layout in layouts:
        try:
            result = await _search_layout(
                session,
                layout,
                search_text,
                max_fields,
                max_records,
                include_calculations,
                search_mode,
            )
        except _SkipLayout as skip:
            logger.warning("Layout %s skipped: %s", layout, skip.reason)
            skipped.append({"layout": layout, "reason": skip.reason})
            continue

        results.append(result)
        total_records += result["record_count"]

    logger.info(
        "Global search completed: %s searched, %s skipped, %s records",
        len(results),
        len(skipped),
        total_records,
    )

    return {
        "search_text": search_text,
        "results": results,
        "summary": {
            "total_layouts": len(layouts),
            "total_records_found": total_records,
            "searched_layouts": [r["layout"] for r in results],
            "skipped_layouts": [s["layout"] for s in skipped],
            "skipped_details": skipped,
        },
        "limitations": list(GLOBAL_SEARCH_LIMITATIONS),
        "disclaimer": GLOBAL_SEARCH_DISCLAIMER,
    }


# ---------------------------------------------------------------------------
# Field search
# ---------------------------------------------------------------------------


async def global_search_fields(
    session: SessionManager,
    field_name: Optional[str] = None,
    field_type: Optional[str] = None,
    max_layouts: int = DEFAULT_MAX_LAYOUTS,
    max_results: int = DEFAULT_MAX_FIELD_RESULTS,
) -> Dict[str, Any]:
    """Find fields by partial name and/or result type across layouts."""
    layout_cap, _ = _cap_int(max_layouts, 0)
    result_cap, _ = _cap_int(max_results, 0)
    needle = field_name.lower() if field_name else None

    entries = await session.run_authenticated(lambda client, token: client.list_layouts(token))
    layout_names = flatten_entries(entries)[:layout_cap]

    logger.info(
        "Searching fields (name=%s, type=%s) across %s layouts",
        field_name,
        field_type,
        len(layout_names),
    )

    results: List[Dict[str, Any]] = []
    searched: List[str] = []
    skipped: List[Dict[str, str]] = []
    truncated = False

    for layout in layout_names:
        if len(results) >= result_cap:
            truncated = True
            break

        try:
            metadata = await session.run_authenticated(
                lambda client, token: client.get_layout_metadata(layout, token)
            )
        except FileMakerError as exc:
            if exc.code in SESSION_ERRORS:
                raise
            logger.warning("Layout %s skipped: %s", layout, exc.error.message)
            skipped.append({"layout": layout, "reason": exc.error.message})
            continue

        searched.append(layout)
        for f in metadata.fields:
            if needle is not None and needle not in f.name.lower():
                continue
            if field_type and f.result != field_type:
                continue
            if len(results) >= result_cap:
                truncated = True
                break
            results.append(
                {
                    "layout": layout,
                    "field_name": f.name,
                    "field_type": f.type,
                    "result_type": f.result,
                    "display_type": f.display_type,
                }
            )

    return {
        "criteria": {"field_name": field_name, "field_type": field_type},
        "results": results,
        "summary": {
            "total_matches": len(results),
            "searched_layouts": searched,
            "skipped_layouts": [s["layout"] for s in skipped],
            "skipped_details": skipped,
            "truncated": truncated,
        },
        "limitations": [
            f"At most {layout_cap} layouts are scanned",
            f"At most {result_cap} fields are returned",
            "Folder entries are not scanned",
            "Field names match case-insensitively on any part of the name",
        ],
    }
