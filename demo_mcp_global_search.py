# demo_mcp_global_search.py
# Version: v1

r"""
Quick demo for the fm_global_search_data MCP tool.

Usage (PowerShell):

  $env:FM_SERVER   = "fm.example.com"
  $env:FM_DATABASE = "Sales"
  $env:FM_USERNAME = "api_user"
  $env:FM_PASSWORD = "..."
  $env:FM_TEST_LAYOUTS = "Contacts,Invoices"
  $env:FM_TEST_SEARCH  = "acme"
  python demo_mcp_global_search.py
"""

import asyncio
import os

from filemaker_data_mcp.analyzers.search import global_search_data
from filemaker_data_mcp.config import load_config
from filemaker_data_mcp.session import SessionManager


LAYOUTS = [l.strip() for l in os.environ.get("FM_TEST_LAYOUTS", "Contacts").split(",") if l.strip()]
QUERY = os.environ.get("FM_TEST_SEARCH", "acme")
MODE = os.environ.get("FM_TEST_MODE", "contains")


async def main() -> None:
    session = SessionManager()
    await session.login(load_config())

    print("Calling MCP tool: fm_global_search_data")
    print(f"Layouts: {LAYOUTS!r}")
    print(f"Query:   {QUERY!r} ({MODE})")
    print()

    try:
        result = await global_search_data(session, QUERY, LAYOUTS, search_mode=MODE)
    finally:
        await session.logout()

    summary = result["summary"]
    print("Records found :", summary["total_records_found"])
    print("Searched      :", ", ".join(summary["searched_layouts"]) or "-")
    for skipped in summary["skipped_details"]:
        print(f"Skipped       : {skipped['layout']} ({skipped['reason']})")
    print()

    for layout in result["results"]:
        print(f"[{layout['layout']}] {layout['record_count']} records")
        if layout.get("matched_fields"):
            print(f"    matched fields: {', '.join(layout['matched_fields'])}")
        for record in layout["records"][:5]:
            print(f"  - #{record['record_id']}: {record['field_data']}")


if __name__ == "__main__":
    asyncio.run(main())
