# FileMaker Data MCP Server
# File: tests/test_logging_config.py
# Version: v1

"""Tests for log redaction and handler setup."""

from __future__ import annotations

import logging

from filemaker_data_mcp.logging_config import (
    LEVEL_OFF,
    MASK,
    PACKAGE_LOGGER,
    RedactingFilter,
    configure_logging,
    mask_sensitive_data,
    parse_log_level,
)


def test_mask_sensitive_data_is_recursive() -> None:
    data = {
        "database": "Sales",
        "password": "s3cret",
        "nested": {"Authorization": "Bearer abc", "items": [{"apiKey": "k"}, {"name": "x"}]},
    }

    masked = mask_sensitive_data(data)

    assert masked["database"] == "Sales"
    assert masked["password"] == MASK
    assert masked["nested"]["Authorization"] == MASK
    assert masked["nested"]["items"][0]["apiKey"] == MASK
    assert masked["nested"]["items"][1] == {"name": "x"}
    # Input untouched.
    assert data["password"] == "s3cret"


def test_filter_masks_args_and_context() -> None:
    record = logging.LogRecord(
        name="filemaker_data_mcp.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="layout %s config %s",
        args=("Contacts", {"token": "abc", "server": "https://fm"}),
        exc_info=None,
    )
    record.context = {"session_token": "abc", "layout": "Contacts"}

    assert RedactingFilter().filter(record) is True
    assert record.args[0] == "Contacts"
    assert record.args[1] == {"token": MASK, "server": "https://fm"}
    assert record.context == {"session_token": MASK, "layout": "Contacts"}
    assert "abc" not in record.getMessage()


def test_parse_log_level_aliases() -> None:
    assert parse_log_level("trace") == logging.DEBUG
    assert parse_log_level("WARN") == logging.WARNING
    assert parse_log_level("silent") == LEVEL_OFF
    assert parse_log_level("bogus") == logging.WARNING
    assert parse_log_level(None) == logging.WARNING


def test_configure_logging_is_idempotent() -> None:
    logger = configure_logging("debug")
    configure_logging("error")

    redacting = [h for h in logger.handlers if getattr(h, "_fm_redacting", False)]
    assert logger.name == PACKAGE_LOGGER
    assert len(redacting) == 1
    assert logger.level == logging.ERROR
    assert logger.propagate is False
