# FileMaker Data MCP Server
# File: analyzers/relationships.py
# Version: v2

"""Relationship inference from field names and portal structure.

The Data API does not expose relationship definitions, so everything here is
a heuristic guess:

- a portal on a layout suggests a one-to-many link to the table it shows;
- a field named like a foreign key (``Customer_ID``, ``fk_Invoice``, ...)
  suggests a link to the table named in it.

The analysis functions are pure; only :func:`infer_relationships` talks to the
server (through the session).
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..models import FieldMetadata, InferredForeignKey, InferredRelationship, LayoutMetadata
from ..session import SessionManager

logger = logging.getLogger(__name__)

INFERENCE_DISCLAIMER = (
    "These results are guesses based on field names and portal structure and "
    "may differ from the actual FileMaker relationship definitions. Check the "
    "Manage Database dialog in FileMaker Pro for the authoritative definitions."
)

# Ordered; the first pattern that matches decides the referenced table.
FOREIGN_KEY_PATTERNS: List[Tuple[re.Pattern, Callable[[re.Match], str]]] = [
    # Customer_ID, customer_id
    (re.compile(r"(.+)_[Ii][Dd]"), lambda m: m.group(1)),
    # CustomerID, customerId
    (re.compile(r"(.+?)([A-Z]?[Ii][Dd])"), lambda m: m.group(1)),
    # fk_Customer, FK_Customer
    (re.compile(r"[Ff][Kk]_(.+)"), lambda m: m.group(1)),
    # id_Customer, ID_Customer
    (re.compile(r"[Ii][Dd]_(.+)"), lambda m: m.group(1)),
]

FOREIGN_KEY_RESULT_TYPES = ("text", "number")

PORTAL_PREFIXES = ("portal_", "Portal_", "PORTAL_", "rel_", "Rel_", "REL_")
PORTAL_SUFFIXES = ("_portal", "_Portal", "_PORTAL", "_rel", "_Rel", "_REL")

METHOD_PORTAL = "portal name pattern"
METHOD_FIELD = "field name pattern (foreign key)"


def infer_foreign_key(field: FieldMetadata) -> Optional[InferredForeignKey]:
    """Guess whether ``field`` references another table.

    Only text and number fields are considered. Confidence is ``high`` for a
    numeric field ending in ``_id``, ``medium`` otherwise.
    """
    if field.result not in FOREIGN_KEY_RESULT_TYPES:
        return None

    name = field.name
    for pattern, extract_table in FOREIGN_KEY_PATTERNS:
        match = pattern.fullmatch(name)
        if not match:
            continue

        table = extract_table(match)
        if not table:
            continue

        confidence = (
            "high" if name.lower().endswith("_id") and field.result == "number" else "medium"
        )
        return InferredForeignKey(
            field_name=name,
            inferred_referenced_table=table,
            confidence=confidence,
            inference_reason=f"Field name '{name}' matches a foreign key pattern",
        )

    return None


def infer_table_from_portal_name(portal_name: str) -> str:
    """Strip one conventional prefix and one suffix; never return ''."""
    table = portal_name

    for prefix in PORTAL_PREFIXES:
        if table.startswith(prefix):
            table = table[len(prefix):]
            break

    for suffix in PORTAL_SUFFIXES:
        if table.endswith(suffix):
            table = table[: -len(suffix)]
            break

    return table or portal_name


def infer_relationship_from_portal(
    source_layout: str,
    portal_name: str,
    portal_fields: Iterable[FieldMetadata],
) -> InferredRelationship:
    """Portal-derived relationship, always one-to-many."""
    target_table = infer_table_from_portal_name(portal_name)

    target_field = None
    for f in portal_fields:
        fk = infer_foreign_key(f)
        if fk is not None:
            target_field = fk.field_name
            break

    confidence = "high" if target_table.lower() == portal_name.lower() else "medium"

    return InferredRelationship(
        name=f"{source_layout} -> {target_table}",
        source_table=source_layout,
        target_table=target_table,
        type="one-to-many",
        confidence=confidence,
        inference_method=METHOD_PORTAL,
        target_field=target_field,
        portal_name=portal_name,
    )


def _table_key(name: str) -> str:
    """Case-folded table name with simple English plurals reduced to singular.

    ``Orders``, ``order`` and ``ORDER`` share one key; so do ``Categories``
    and ``Category``. The key is only a comparison token, not a display name:
    irregular words fold to non-words (``Series`` -> ``sery``, ``Bus`` -> ``bu``),
    which is harmless because both spellings of a table fold the same way.
    """
    key = name.lower()
    if key.endswith("ies") and len(key) > 3:
        return key[:-3] + "y"
    if key.endswith(("sses", "xes", "ches", "shes")):
        return key[:-2]
    if key.endswith("s") and not key.endswith("ss"):
        return key[:-1]
    return key


def _confidence_breakdown(
    relationships: Iterable[InferredRelationship],
    foreign_keys: Iterable[InferredForeignKey],
) -> Dict[str, int]:
    breakdown = {"high": 0, "medium": 0, "low": 0}
    for item in list(relationships) + list(foreign_keys):
        breakdown[item.confidence] = breakdown.get(item.confidence, 0) + 1
    return breakdown


def infer_layout_relationships(layout: str, metadata: LayoutMetadata) -> Dict[str, Any]:
    """Run portal and field inference over one layout's metadata.

    Portal relationships come first. A foreign key adds a relationship of its
    own only when no earlier relationship targets the same table.
    """
    relationships: List[InferredRelationship] = [
        infer_relationship_from_portal(layout, portal_name, portal_fields)
        for portal_name, portal_fields in metadata.portals.items()
    ]
    foreign_keys: List[InferredForeignKey] = []

    for f in metadata.fields:
        fk = infer_foreign_key(f)
        if fk is None:
            continue
        foreign_keys.append(fk)

        key = _table_key(fk.inferred_referenced_table)
        if any(_table_key(r.target_table) == key for r in relationships):
            continue

        relationships.append(
            InferredRelationship(
                name=f"{layout} -> {fk.inferred_referenced_table}",
                source_table=layout,
                target_table=fk.inferred_referenced_table,
                type="unknown",
                confidence=fk.confidence,
                inference_method=METHOD_FIELD,
                source_field=fk.field_name,
            )
        )

    return {
        "layout": layout,
        "inferred_relationships": [r.to_dict() for r in relationships],
        "inferred_foreign_keys": [fk.to_dict() for fk in foreign_keys],
        "summary": {
            "total_inferred": len(relationships) + len(foreign_keys),
            "confidence_breakdown": _confidence_breakdown(relationships, foreign_keys),
        },
        "disclaimer": INFERENCE_DISCLAIMER,
    }


async def infer_relationships(
    session: SessionManager,
    layout: str,
    depth: int = 1,
) -> Dict[str, Any]:
    """Fetch ``layout``'s metadata and infer its relationships.

    ``depth`` is accepted for forward compatibility; only the given layout is
    analysed.
    """
    logger.info("Inferring relationships for layout %s (depth=%s)", layout, depth)

    metadata = await session.run_authenticated(
        lambda client, token: client.get_layout_metadata(layout, token)
    )
    result = infer_layout_relationships(layout, metadata)

    logger.info(
        "Relationship inference completed for %s: %s relationships, %s foreign keys",
        layout,
        len(result["inferred_relationships"]),
        len(result["inferred_foreign_keys"]),
    )
    return result
