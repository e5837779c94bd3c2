# FileMaker Data MCP Server
# File: tools/auth.py
# Version: v1

"""Session tools: fm_login, fm_logout, fm_validate_session."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..config import load_config
from ..session import SessionManager
from .common import fail, ok, respond

logger = logging.getLogger(__name__)


async def login(
    session: SessionManager,
    server: Optional[str] = None,
    database: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> Dict[str, Any]:
    """Log in with explicit arguments, falling back to FM_* env vars."""
    config = load_config(
        server=server,
        database=database,
        username=username,
        password=password,
    )
    logger.debug("Login configuration", extra={"context": config.redacted()})

    info = await session.login(config)
    return {"message": "Login successful", "session_info": info.to_dict()}


async def logout(session: SessionManager) -> Dict[str, Any]:
    result = await session.logout()
    if not result.success and result.error is not None:
        return fail(result.error)
    return ok({"message": result.message})


async def validate_session(session: SessionManager) -> Dict[str, Any]:
    result = await session.validate_session()
    out: Dict[str, Any] = {"valid": result.valid, "message": result.message}
    if result.session_age is not None:
        out["session_age"] = result.session_age
    # Reports state rather than failing; always a successful call.
    return ok(out)


def register_tools(server: Any, session: SessionManager) -> None:
    """Register session tools on an MCP Server-like instance."""
    if server is None or not hasattr(server, "tool"):
        raise ValueError(
            "register_tools(server, session) expects an MCP Server-like object that exposes a .tool() decorator."
        )

    @server.tool(
        name="fm_login",
        description=(
            "Log in to the FileMaker server and open a Data API session. "
            "Omitted arguments are read from FM_SERVER, FM_DATABASE, FM_USERNAME and FM_PASSWORD."
        ),
    )
    async def mcp_login(
        server: Optional[str] = None,
        database: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await respond(
            login(session, server=server, database=database, username=username, password=password)
        )

    @server.tool(name="fm_logout", description="Close the current FileMaker session.")
    async def mcp_logout() -> Dict[str, Any]:
        return await logout(session)

    @server.tool(
        name="fm_validate_session",
        description="Check whether the current FileMaker session is still valid.",
    )
    async def mcp_validate_session() -> Dict[str, Any]:
        return await validate_session(session)
