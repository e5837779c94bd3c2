# demo_mcp_export_metadata.py
# Version: v1

r"""
Quick demo for the fm_export_database_metadata MCP tool.

Usage (PowerShell):

  $env:FM_SERVER   = "fm.example.com"
  $env:FM_DATABASE = "Sales"
  $env:FM_USERNAME = "api_user"
  $env:FM_PASSWORD = "..."
  python demo_mcp_export_metadata.py > metadata.json
"""

import asyncio
import json

from filemaker_data_mcp.analyzers.metadata import export_database_metadata
from filemaker_data_mcp.config import load_config
from filemaker_data_mcp.session import SessionManager


async def main() -> None:
    session = SessionManager()
    await session.login(load_config())

    try:
        result = await export_database_metadata(session)
    finally:
        await session.logout()

    print(json.dumps(result, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    asyncio.run(main())
