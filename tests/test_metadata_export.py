# FileMaker Data MCP Server
# File: tests/test_metadata_export.py
# Version: v2

"""Tests for the database-wide metadata export."""

from __future__ import annotations

import asyncio

import pytest

from fakes import field, fm_error, layout_meta
from filemaker_data_mcp.analyzers.metadata import DATA_API_LIMITATIONS, export_database_metadata
from filemaker_data_mcp.errors import ErrorCode, FileMakerError
from filemaker_data_mcp.models import NamedEntry


def _run(coro):
    """Helper to run async coroutines in plain pytest tests."""
    return asyncio.run(coro)


def _entries(*names: str):
    return [NamedEntry(name=n) for n in names]


def test_one_failing_layout_is_skipped(session, fake_client) -> None:
    names = ["Contacts", "Invoices", "Broken", "Products", "Vendors"]
    fake_client.layouts = _entries(*names)
    for name in names:
        fake_client.metadata[name] = layout_meta(name, fields=[field("Name")])
    fake_client.metadata["Broken"] = fm_error(500, 952)
    fake_client.scripts = _entries("Startup")

    result = _run(export_database_metadata(session))
    data = result["data"]

    assert [layout["name"] for layout in data["layouts"]] == [
        "Contacts",
        "Invoices",
        "Products",
        "Vendors",
    ]
    assert data["skipped_layouts"] == [
        {"layout": "Broken", "reason": "Insufficient access privileges"}
    ]
    assert data["scripts"] == [{"name": "Startup", "is_available": True}]
    assert data["database"] == {"name": "Sales", "server": "https://fm.example.com"}
    assert result["limitations"] == DATA_API_LIMITATIONS
    assert result["generated_at"].endswith("+00:00")


def test_layout_listing_failure_is_fatal(session, fake_client) -> None:
    fake_client.layouts = fm_error(503)

    with pytest.raises(FileMakerError) as excinfo:
        _run(export_database_metadata(session))

    assert excinfo.value.code == ErrorCode.AUTH_SERVER_UNAVAILABLE


def test_script_listing_failure_is_fatal(session, fake_client) -> None:
    fake_client.layouts = []
    fake_client.scripts = fm_error(403)

    with pytest.raises(FileMakerError):
        _run(export_database_metadata(session))


def test_session_expiry_is_not_swallowed(session, fake_client) -> None:
    fake_client.layouts = _entries("Contacts", "Invoices")
    fake_client.metadata["Contacts"] = fm_error(401)

    with pytest.raises(FileMakerError) as excinfo:
        _run(export_database_metadata(session, include_scripts=False))

    assert excinfo.value.code == ErrorCode.SESSION_EXPIRED
    assert session.has_active_session is False


def test_folders_are_walked_not_exported(session, fake_client) -> None:
    fake_client.layouts = [
        NamedEntry(name="Contacts"),
        NamedEntry(name="Admin", is_folder=True, children=_entries("Users")),
    ]
    fake_client.metadata["Contacts"] = layout_meta("Contacts")
    fake_client.metadata["Users"] = layout_meta("Users")

    result = _run(export_database_metadata(session, include_scripts=False))

    assert [layout["name"] for layout in result["data"]["layouts"]] == ["Contacts", "Users"]
    assert ("metadata", "Admin") not in fake_client.calls


def test_value_lists_first_seen_wins(session, fake_client) -> None:
    fake_client.layouts = _entries("A", "B")
    fake_client.metadata["A"] = layout_meta(
        "A",
        value_lists=[
            {"name": "Status", "values": [{"value": "Open"}, {"value": "Closed"}]},
            {"name": "Yes/No", "values": [{"value": "Yes"}, {"value": "No"}]},
        ],
    )
    fake_client.metadata["B"] = layout_meta(
        "B",
        value_lists=[
            {"name": "Status", "values": [{"value": "Draft"}]},
            {"name": "Country", "values": [{"value": "DE"}]},
        ],
    )

    result = _run(export_database_metadata(session, include_scripts=False))

    assert result["data"]["value_lists"] == [
        {"name": "Status", "values": ["Open", "Closed"]},
        {"name": "Yes/No", "values": ["Yes", "No"]},
        {"name": "Country", "values": ["DE"]},
    ]


def test_portals_feed_inferred_relationships(session, fake_client) -> None:
    fake_client.layouts = _entries("Customers")
    fake_client.metadata["Customers"] = layout_meta(
        "Customers",
        portals={"portal_Orders": [field("Orders::Customer_ID", "number")]},
    )

    result = _run(export_database_metadata(session, include_scripts=False))
    data = result["data"]

    assert data["layouts"][0]["portals"][0]["related_table_name"] == "Orders"
    rel = data["inferred_relationships"][0]
    assert rel["source_table"] == "Customers"
    assert rel["target_table"] == "Orders"
    assert rel["portal_name"] == "portal_Orders"


def test_optional_sections_are_omitted(session, fake_client) -> None:
    fake_client.layouts = _entries("Customers")
    fake_client.metadata["Customers"] = layout_meta(
        "Customers",
        portals={"Orders": []},
        value_lists=[{"name": "Status", "values": []}],
    )

    result = _run(
        export_database_metadata(
            session,
            include_scripts=False,
            include_value_lists=False,
            include_portal_analysis=False,
        )
    )

    assert "value_lists" not in result["data"]
    assert "inferred_relationships" not in result["data"]
    assert ("list_scripts",) not in fake_client.calls
