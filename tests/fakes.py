# FileMaker Data MCP Server
# File: tests/fakes.py
# Version: v1

"""Fakes and payload builders shared by the test-suite.

Nothing here talks to a real FileMaker server: ``FakeFileMakerClient``
implements the subset of ``FileMakerClient`` the session, analyzers and tools
use, and records every call it receives.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from filemaker_data_mcp.client import ApiResponse
from filemaker_data_mcp.errors import FileMakerError, create_error
from filemaker_data_mcp.models import LayoutMetadata, NamedEntry, RecordSet

Outcome = Union[Any, Exception]


def fm_error(http_status: int, fm_code: Optional[int] = None) -> FileMakerError:
    return FileMakerError(create_error(http_status, fm_code))


def field(name: str, result: str = "text", type: str = "normal", **extra: Any) -> Dict[str, Any]:
    """Raw fieldMetaData entry as the Data API returns it."""
    item = {"name": name, "result": result, "type": type}
    item.update(extra)
    return item


def layout_meta(
    name: str,
    fields: Optional[List[Dict[str, Any]]] = None,
    portals: Optional[Dict[str, List[Dict[str, Any]]]] = None,
    value_lists: Any = None,
) -> LayoutMetadata:
    payload: Dict[str, Any] = {"fieldMetaData": fields or []}
    if portals is not None:
        payload["portalMetaData"] = portals
    if value_lists is not None:
        payload["valueLists"] = value_lists
    return LayoutMetadata.from_api(name, payload)


def record_set(rows: List[Dict[str, Any]], total: Optional[int] = None) -> RecordSet:
    return RecordSet.from_api(
        {
            "data": rows,
            "dataInfo": {
                "totalRecordCount": total if total is not None else len(rows),
                "foundCount": len(rows),
                "returnedCount": len(rows),
            },
        }
    )


class FakeFileMakerClient:
    """In-memory stand-in for FileMakerClient."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.token = "TOKEN-1"

        self.login_outcome: Optional[Exception] = None
        self.logout_outcome: Optional[Exception] = None
        self.validate_outcome: Optional[Exception] = None

        self.layouts: Outcome = []
        self.scripts: Outcome = []
        self.metadata: Dict[str, Outcome] = {}
        self.records: Dict[str, Outcome] = {}
        self.find_results: Dict[str, Outcome] = {}

    @staticmethod
    def _resolve(outcome: Outcome) -> Any:
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def login_request(self, username: str, password: str) -> ApiResponse:
        self.calls.append(("login", username))
        if self.login_outcome is not None:
            raise self.login_outcome
        return ApiResponse(status=200, data={"token": self.token})

    async def logout_request(self, token: str) -> ApiResponse:
        self.calls.append(("logout", token))
        if self.logout_outcome is not None:
            raise self.logout_outcome
        return ApiResponse(status=200, data={})

    async def get(self, path: str, token: Optional[str] = None, params: Any = None) -> ApiResponse:
        self.calls.append(("get", path))
        if self.validate_outcome is not None:
            raise self.validate_outcome
        return ApiResponse(status=200, data={"layouts": []})

    async def list_layouts(self, token: str) -> List[NamedEntry]:
        self.calls.append(("list_layouts",))
        return self._resolve(self.layouts)

    async def list_scripts(self, token: str) -> List[NamedEntry]:
        self.calls.append(("list_scripts",))
        return self._resolve(self.scripts)

    async def get_layout_metadata(self, layout: str, token: str) -> LayoutMetadata:
        self.calls.append(("metadata", layout))
        if layout not in self.metadata:
            raise fm_error(500, 105)
        return self._resolve(self.metadata[layout])

    async def get_records(self, layout: str, token: str, offset: int = 1, limit: int = 20) -> RecordSet:
        self.calls.append(("records", layout, offset, limit))
        return self._resolve(self.records.get(layout, record_set([])))

    async def get_record(self, layout: str, record_id: str, token: str) -> RecordSet:
        self.calls.append(("record", layout, record_id))
        return self._resolve(self.records.get(layout, record_set([])))

    async def find_records(
        self,
        layout: str,
        token: str,
        query: List[Dict[str, Any]],
        sort: Any = None,
        offset: Any = None,
        limit: Any = None,
    ) -> RecordSet:
        self.calls.append(("find", layout, query, limit))
        return self._resolve(self.find_results.get(layout, fm_error(500, 401)))
