# FileMaker Data MCP Server
# File: tests/test_tools.py
# Version: v1

"""Tests for MCP tool registration and the success / error envelope."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict

import pytest

from fakes import FakeFileMakerClient, field, fm_error, layout_meta, record_set
from filemaker_data_mcp.session import SessionManager
from filemaker_data_mcp.tools import auth, metadata, records, register_all_tools
from filemaker_data_mcp.tools.common import respond


def _run(coro):
    """Helper to run async coroutines in plain pytest tests."""
    return asyncio.run(coro)


class DummyServer:
    """Collects tools registered through ``@server.tool(name=...)``."""

    def __init__(self) -> None:
        self.tools: Dict[str, Callable[..., Any]] = {}

    def tool(self, *args: Any, **kwargs: Any):
        def decorator(fn):
            self.tools[kwargs.get("name", fn.__name__)] = fn
            return fn

        return decorator


EXPECTED_TOOLS = {
    "fm_login",
    "fm_logout",
    "fm_validate_session",
    "fm_get_layouts",
    "fm_get_layout_metadata",
    "fm_get_scripts",
    "fm_list_value_lists",
    "fm_get_records",
    "fm_get_record_by_id",
    "fm_find_records",
    "fm_get_record_count",
    "fm_export_database_metadata",
    "fm_infer_relationships",
    "fm_analyze_portal_data",
    "fm_global_search_data",
    "fm_global_search_fields",
}


def test_register_all_tools_exposes_every_tool() -> None:
    server = DummyServer()
    register_all_tools(server, SessionManager())

    assert set(server.tools) == EXPECTED_TOOLS


def test_register_tools_rejects_non_server() -> None:
    with pytest.raises(ValueError):
        auth.register_tools(object(), SessionManager())


def test_respond_wraps_success_and_failure() -> None:
    async def good():
        return {"value": 1}

    async def bad():
        raise fm_error(404)

    assert _run(respond(good())) == {"success": True, "value": 1}

    failed = _run(respond(bad()))
    assert failed["success"] is False
    assert failed["error"]["code"] == 3001
    assert failed["error"]["retryable"] is False


def test_tools_without_session_return_no_session_error() -> None:
    server = DummyServer()
    register_all_tools(server, SessionManager())

    result = _run(server.tools["fm_get_layouts"]())

    assert result["success"] is False
    assert result["error"]["code"] == 2002


def test_login_tool_reports_config_errors(monkeypatch) -> None:
    for var in ("FM_SERVER", "FM_DATABASE", "FM_USERNAME", "FM_PASSWORD"):
        monkeypatch.delenv(var, raising=False)
    fake = FakeFileMakerClient()
    server = DummyServer()
    register_all_tools(server, SessionManager(client_factory=lambda cfg: fake))

    result = _run(server.tools["fm_login"](server="http://fm.example.com", database="Sales"))

    assert result["success"] is False
    assert result["error"]["code"] == 5002
    assert "HTTPS" in result["error"]["details"]
    assert fake.calls == []


def test_login_logout_round_trip(monkeypatch) -> None:
    monkeypatch.setenv("FM_PASSWORD", "from-env")
    fake = FakeFileMakerClient()
    server = DummyServer()
    register_all_tools(server, SessionManager(client_factory=lambda cfg: fake))

    login = _run(
        server.tools["fm_login"](server="fm.example.com", database="Sales", username="admin")
    )
    assert login["success"] is True
    assert login["session_info"]["server"] == "https://fm.example.com"
    assert "from-env" not in str(login)

    validation = _run(server.tools["fm_validate_session"]())
    assert validation["success"] is True
    assert validation["valid"] is True

    assert _run(server.tools["fm_logout"]())["success"] is True

    second = _run(server.tools["fm_logout"]())
    assert second["success"] is False
    assert second["error"]["code"] == 2002


def test_metadata_tools(session, fake_client) -> None:
    fake_client.metadata["Contacts"] = layout_meta(
        "Contacts",
        fields=[field("Name")],
        portals={"Orders": [field("Orders::Total", "number")]},
        value_lists=[{"name": "Status", "values": [{"value": "Open"}]}],
    )

    meta = _run(metadata.get_layout_metadata(session, "Contacts"))
    assert meta["fields"][0]["name"] == "Name"
    assert list(meta["portals"]) == ["Orders"]

    vls = _run(metadata.list_value_lists(session, "Contacts"))
    assert vls["value_lists"] == [{"name": "Status", "values": ["Open"]}]


def test_record_tools(session, fake_client) -> None:
    fake_client.records["Contacts"] = record_set(
        [{"recordId": "5", "modId": "1", "fieldData": {"Name": "Ada"}}], total=12
    )

    page = _run(records.get_records(session, "Contacts"))
    assert page["records"][0]["record_id"] == "5"
    assert ("records", "Contacts", 1, 20) in fake_client.calls

    count = _run(records.get_record_count(session, "Contacts"))
    assert count["total_record_count"] == 12

    single = _run(records.get_record_by_id(session, "Contacts", "5"))
    assert single["record"]["field_data"] == {"Name": "Ada"}


def test_record_by_id_empty_result_is_record_missing(session) -> None:
    result = _run(respond(records.get_record_by_id(session, "Contacts", "404")))

    assert result["success"] is False
    assert result["error"]["code"] == 3002
    assert result["error"]["fm_error_code"] == 101


def test_find_records_requires_a_query(session, fake_client) -> None:
    result = _run(respond(records.find_records(session, "Contacts", [])))

    assert result["error"]["code"] == 3004
    assert fake_client.calls == []


def test_analysis_tool_envelope(session, fake_client) -> None:
    server = DummyServer()
    register_all_tools(server, session)
    fake_client.metadata["Contacts"] = layout_meta("Contacts", fields=[field("Name")])
    fake_client.find_results["Contacts"] = record_set(
        [{"recordId": "1", "fieldData": {"Name": "Ada"}}]
    )

    result = _run(server.tools["fm_global_search_data"](search_text="ada", layouts=["Contacts"]))

    assert result["success"] is True
    assert result["summary"]["total_records_found"] == 1
