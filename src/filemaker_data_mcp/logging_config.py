# FileMaker Data MCP Server
# File: logging_config.py
# Version: v1

"""Logging setup with secret redaction.

All output goes to stderr: stdout carries the MCP JSON-RPC stream, and
nothing is ever written to a log file.

Every record passes through :class:`RedactingFilter`, which masks the value of
any mapping key that looks sensitive (passwords, tokens, auth headers, ...)
in ``record.args`` and in the optional ``context`` extra. The formatter
appends ``context`` as JSON, so callers can attach structured data::

    logger.info("Login attempt", extra={"context": {"database": db}})
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Optional

PACKAGE_LOGGER = "filemaker_data_mcp"
MASK = "***MASKED***"

SENSITIVE_KEYS = (
    "password",
    "passwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "api-key",
    "authorization",
    "auth",
    "credential",
    "credentials",
)

# Above CRITICAL: nothing gets through.
LEVEL_OFF = logging.CRITICAL + 10

_LEVEL_ALIASES = {
    "TRACE": logging.DEBUG,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "NONE": LEVEL_OFF,
    "OFF": LEVEL_OFF,
    "SILENT": LEVEL_OFF,
}


def parse_log_level(value: Optional[str]) -> int:
    if not value:
        return logging.WARNING
    return _LEVEL_ALIASES.get(str(value).strip().upper(), logging.WARNING)


def is_sensitive_key(key: Any) -> bool:
    lowered = str(key).lower()
    return any(s in lowered for s in SENSITIVE_KEYS)


def mask_sensitive_data(data: Any) -> Any:
    """Return a copy of ``data`` with sensitive mapping values masked."""
    if isinstance(data, dict):
        return {
            k: (MASK if is_sensitive_key(k) else mask_sensitive_data(v))
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive_data(item) for item in data]
    if isinstance(data, tuple):
        return tuple(mask_sensitive_data(item) for item in data)
    return data


class RedactingFilter(logging.Filter):
    """Mask secrets in a record before any handler formats it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            record.args = mask_sensitive_data(record.args)

        context = getattr(record, "context", None)
        if context is not None:
            record.context = mask_sensitive_data(context)

        return True


class ContextFormatter(logging.Formatter):
    """Standard formatter that appends the ``context`` extra as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        context = getattr(record, "context", None)
        if context is None:
            return text
        try:
            return f"{text} {json.dumps(context, default=str)}"
        except (TypeError, ValueError):
            return f"{text} [unserializable context]"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a single redacting stderr handler to the package logger.

    Safe to call more than once; later calls only adjust the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(parse_log_level(level))

    for handler in logger.handlers:
        if getattr(handler, "_fm_redacting", False):
            return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ContextFormatter("[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s")
    )
    handler.addFilter(RedactingFilter())
    handler._fm_redacting = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.propagate = False
    return logger
