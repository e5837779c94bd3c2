# FileMaker Data MCP Server
# File: tests/conftest.py
# Version: v1

from __future__ import annotations

import asyncio

import pytest

from fakes import FakeFileMakerClient
from filemaker_data_mcp.config import FileMakerConfig
from filemaker_data_mcp.session import SessionManager


@pytest.fixture
def fm_config() -> FileMakerConfig:
    return FileMakerConfig(
        server="https://fm.example.com",
        database="Sales",
        username="admin",
        password="s3cret",
    )


@pytest.fixture
def fake_client() -> FakeFileMakerClient:
    return FakeFileMakerClient()


@pytest.fixture
def session(fake_client: FakeFileMakerClient, fm_config: FileMakerConfig) -> SessionManager:
    """A SessionManager already logged in through the fake client."""
    manager = SessionManager(client_factory=lambda cfg: fake_client)
    asyncio.run(manager.login(fm_config))
    fake_client.calls.clear()
    return manager
