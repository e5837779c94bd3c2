# FileMaker Data MCP Server
# File: tools/common.py
# Version: v1

"""Result envelope shared by every MCP tool.

Tools return ``{"success": True, **payload}`` on success and
``{"success": False, "error": {...}}`` on failure, so the calling agent can
branch on one key and read the retry hint from ``error.retryable``.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Dict, Mapping

from ..config import ConfigError
from ..errors import ErrorDescriptor, FileMakerError, config_error

logger = logging.getLogger(__name__)


def ok(payload: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"success": True}
    if payload:
        out.update(payload)
    return out


def fail(error: ErrorDescriptor) -> Dict[str, Any]:
    return {"success": False, "error": error.to_dict()}


async def respond(awaitable: Awaitable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Await a tool operation and wrap its outcome in the envelope."""
    try:
        payload = await awaitable
    except FileMakerError as exc:
        logger.debug("Tool failed with code %s: %s", exc.code, exc.error.message)
        return fail(exc.error)
    except ConfigError as exc:
        return fail(config_error(exc.errors))
    return ok(payload)
