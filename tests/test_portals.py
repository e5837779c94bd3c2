# FileMaker Data MCP Server
# File: tests/test_portals.py
# Version: v1

"""Tests for portal analysis."""

from __future__ import annotations

import asyncio

import pytest

from fakes import field, fm_error, layout_meta, record_set
from filemaker_data_mcp.analyzers.portals import analyze_portal_data
from filemaker_data_mcp.errors import ErrorCode, FileMakerError


def _run(coro):
    """Helper to run async coroutines in plain pytest tests."""
    return asyncio.run(coro)


def _customers_layout():
    return layout_meta(
        "Customers",
        fields=[field("Name")],
        portals={
            "portal_Orders": [field("Orders::Total", "number")],
            "Contacts": [field("Contacts::Email")],
        },
    )


def test_layout_without_portals(session, fake_client) -> None:
    fake_client.metadata["Plain"] = layout_meta("Plain", fields=[field("Name")])

    result = _run(analyze_portal_data(session, "Plain"))

    assert result == {
        "layout": "Plain",
        "portals": [],
        "summary": {"total_portals": 0, "related_tables": []},
    }


def test_metadata_only_by_default(session, fake_client) -> None:
    fake_client.metadata["Customers"] = _customers_layout()

    result = _run(analyze_portal_data(session, "Customers"))

    assert [p["name"] for p in result["portals"]] == ["portal_Orders", "Contacts"]
    assert result["portals"][0]["related_table_name"] == "Orders"
    assert result["portals"][0]["fields"][0]["name"] == "Orders::Total"
    assert "sample_data" not in result["portals"][0]
    assert result["summary"]["related_tables"] == ["Orders", "Contacts"]
    assert [c[0] for c in fake_client.calls] == ["metadata"]


def test_sample_data_from_first_record(session, fake_client) -> None:
    fake_client.metadata["Customers"] = _customers_layout()
    rows = [
        {"recordId": str(i), "modId": "0", "Orders::Total": i * 10} for i in range(1, 9)
    ]
    fake_client.records["Customers"] = record_set(
        [{"recordId": "1", "fieldData": {"Name": "ACME"}, "portalData": {"portal_Orders": rows}}]
    )

    result = _run(
        analyze_portal_data(session, "Customers", include_sample_data=True, sample_limit=3)
    )
    orders, contacts = result["portals"]

    assert orders["record_count"] == 8
    assert orders["sample_data"] == [
        {"Orders::Total": 10},
        {"Orders::Total": 20},
        {"Orders::Total": 30},
    ]
    assert contacts["record_count"] == 0
    assert "sample_data" not in contacts
    assert ("records", "Customers", 1, 1) in fake_client.calls


def test_sample_limit_is_capped(session, fake_client) -> None:
    fake_client.metadata["Customers"] = _customers_layout()
    rows = [{"Orders::Total": i} for i in range(150)]
    fake_client.records["Customers"] = record_set(
        [{"recordId": "1", "fieldData": {}, "portalData": {"portal_Orders": rows}}]
    )

    result = _run(
        analyze_portal_data(session, "Customers", include_sample_data=True, sample_limit=500)
    )

    assert len(result["portals"][0]["sample_data"]) == 100


def test_sample_failure_keeps_metadata(session, fake_client) -> None:
    fake_client.metadata["Customers"] = _customers_layout()
    fake_client.records["Customers"] = fm_error(500, 952)

    result = _run(analyze_portal_data(session, "Customers", include_sample_data=True))

    assert result["summary"]["total_portals"] == 2
    assert all("sample_data" not in p for p in result["portals"])


def test_missing_layout_raises(session) -> None:
    with pytest.raises(FileMakerError) as excinfo:
        _run(analyze_portal_data(session, "Nope"))

    assert excinfo.value.code == ErrorCode.API_LAYOUT_NOT_FOUND
