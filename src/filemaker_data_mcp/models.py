# FileMaker Data MCP Server
# File: models.py
# Version: v2

"""Domain models used by the FileMaker Data MCP server."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


def _parse_int(value: Any, default: int) -> int:
    """Lenient int parsing for numeric metadata; falls back to ``default``."""
    if not value:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class FieldMetadata:
    """One field of a layout or portal, as returned by GET /layouts/{name}.

    ``type`` is the field kind (normal / calculation / summary); ``result`` is
    the declared value type (text, number, date, time, timestamp, container).
    """

    name: str
    type: str = "normal"
    display_type: str = "editText"
    result: str = "text"
    is_global: bool = False
    auto_enter: bool = False
    not_empty: bool = False
    numeric: bool = False
    max_repeat: int = 1
    max_characters: int = 0

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "FieldMetadata":
        return cls(
            name=str(item.get("name") or ""),
            type=str(item.get("type") or "normal"),
            display_type=str(item.get("displayType") or "editText"),
            result=str(item.get("result") or "text"),
            is_global=bool(item.get("global", False)),
            auto_enter=bool(item.get("autoEnter", False)),
            not_empty=bool(item.get("notEmpty", False)),
            numeric=bool(item.get("numeric", False)),
            max_repeat=_parse_int(item.get("maxRepeat"), 1),
            max_characters=_parse_int(item.get("maxCharacters"), 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "display_type": self.display_type,
            "result": self.result,
            "global": self.is_global,
            "auto_enter": self.auto_enter,
            "not_empty": self.not_empty,
            "numeric": self.numeric,
            "max_repeat": self.max_repeat,
            "max_characters": self.max_characters,
        }


def _parse_fields(items: Any) -> List[FieldMetadata]:
    if not isinstance(items, list):
        return []
    return [FieldMetadata.from_api(i) for i in items if isinstance(i, dict)]


def _parse_value_lists(raw: Any) -> Dict[str, List[str]]:
    """Normalise value lists to ``{name: [value, ...]}``.

    The Data API sends a list of ``{"name", "type", "values": [{"value",
    "displayValue"}]}`` objects; a plain ``{name: [values]}`` mapping is also
    accepted.
    """
    out: Dict[str, List[str]] = {}

    if isinstance(raw, dict):
        for name, values in raw.items():
            out[str(name)] = [str(v) for v in values] if isinstance(values, list) else []
        return out

    if isinstance(raw, list):
        for item in raw:
            if not isinstance(item, dict) or not item.get("name"):
                continue
            values: List[str] = []
            for v in item.get("values") or []:
                if isinstance(v, dict):
                    values.append(str(v.get("value", v.get("displayValue", ""))))
                else:
                    values.append(str(v))
            out[str(item["name"])] = values

    return out


@dataclass
class LayoutMetadata:
    """Fields, portals (related field groups) and value lists of one layout."""

    name: str
    fields: List[FieldMetadata] = field(default_factory=list)
    portals: Dict[str, List[FieldMetadata]] = field(default_factory=dict)
    value_lists: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_api(cls, name: str, payload: Dict[str, Any]) -> "LayoutMetadata":
        portals: Dict[str, List[FieldMetadata]] = {}
        raw_portals = payload.get("portalMetaData")
        if isinstance(raw_portals, dict):
            for portal_name, portal_fields in raw_portals.items():
                portals[str(portal_name)] = _parse_fields(portal_fields)

        return cls(
            name=name,
            fields=_parse_fields(payload.get("fieldMetaData")),
            portals=portals,
            value_lists=_parse_value_lists(payload.get("valueLists")),
        )


@dataclass
class NamedEntry:
    """Entry of the layout or script list; folders group other entries."""

    name: str
    is_folder: bool = False
    children: List["NamedEntry"] = field(default_factory=list)

    @classmethod
    def from_api(cls, item: Dict[str, Any], children_key: str = "folderLayoutNames") -> "NamedEntry":
        children = [
            cls.from_api(c, children_key)
            for c in item.get(children_key) or []
            if isinstance(c, dict)
        ]
        return cls(
            name=str(item.get("name") or ""),
            is_folder=bool(item.get("isFolder", False)),
            children=children,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "is_folder": self.is_folder}
        if self.is_folder:
            out["children"] = [c.to_dict() for c in self.children]
        return out


def flatten_entries(entries: Iterable[NamedEntry]) -> List[str]:
    """Names of all non-folder entries, walking into folders in order."""
    names: List[str] = []
    for entry in entries:
        if entry.is_folder:
            names.extend(flatten_entries(entry.children))
        elif entry.name:
            names.append(entry.name)
    return names


@dataclass
class Record:
    record_id: str
    mod_id: Optional[str] = None
    field_data: Dict[str, Any] = field(default_factory=dict)
    portal_data: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "Record":
        portal_data = item.get("portalData")
        return cls(
            record_id=str(item.get("recordId", "")),
            mod_id=str(item["modId"]) if item.get("modId") is not None else None,
            field_data=dict(item.get("fieldData") or {}),
            portal_data=dict(portal_data) if isinstance(portal_data, dict) else {},
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "record_id": self.record_id,
            "mod_id": self.mod_id,
            "field_data": self.field_data,
        }
        if self.portal_data:
            out["portal_data"] = self.portal_data
        return out


@dataclass
class RecordSet:
    """Records plus the ``dataInfo`` counters of a read or find call."""

    records: List[Record]
    total_record_count: int = 0
    found_count: int = 0
    returned_count: int = 0

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "RecordSet":
        raw = payload.get("data") if isinstance(payload, dict) else None
        records = [Record.from_api(r) for r in raw or [] if isinstance(r, dict)]
        info = payload.get("dataInfo") if isinstance(payload, dict) else None
        info = info if isinstance(info, dict) else {}
        return cls(
            records=records,
            total_record_count=int(info.get("totalRecordCount") or 0),
            found_count=int(info.get("foundCount") or 0),
            returned_count=int(info.get("returnedCount") or len(records)),
        )

    def data_info(self) -> Dict[str, int]:
        return {
            "total_record_count": self.total_record_count,
            "found_count": self.found_count,
            "returned_count": self.returned_count,
        }


@dataclass
class InferredForeignKey:
    field_name: str
    inferred_referenced_table: str
    confidence: str
    inference_reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field_name": self.field_name,
            "inferred_referenced_table": self.inferred_referenced_table,
            "confidence": self.confidence,
            "inference_reason": self.inference_reason,
        }


@dataclass
class InferredRelationship:
    """A guessed link between a layout and another table.

    ``type`` is one of one-to-one, one-to-many, many-to-many or unknown.
    """

    name: str
    source_table: str
    target_table: str
    type: str
    confidence: str
    inference_method: str
    source_field: Optional[str] = None
    target_field: Optional[str] = None
    portal_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.name,
            "source_table": self.source_table,
            "target_table": self.target_table,
            "source_field": self.source_field,
            "target_field": self.target_field,
            "type": self.type,
            "confidence": self.confidence,
            "inference_method": self.inference_method,
        }
        if self.portal_name is not None:
            out["portal_name"] = self.portal_name
        return out
