"""Shared test fixtures for oracle-agent."""

from __future__ import annotations

import os
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from oracle_agent.agent.runtime.config import ConfigTemplate
from oracle_agent.agent.runtime.controller import RunController
from oracle_agent.agent.runtime.events import RunEventLog
from oracle_agent.agent.runtime.registry import AgentRunRegistry
from oracle_agent.config.manager import ConfigManager
from oracle_agent.oracle.gateway import OracleGateway, OracleIdentity
from oracle_agent.oracle.transports import InMemoryOracleTransport

ORACLE_TOKEN = "oracle-secret-token"
ADMIN = "admin"
ADMIN_TOKEN = "admin-secret-token"
OWNER = "alice"


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ConfigManager singleton and ORACLE_AGENT_* env vars out of other tests."""
    for key in list(os.environ):
        if key.startswith("ORACLE_AGENT_"):
            monkeypatch.delenv(key, raising=False)
    ConfigManager._reset_for_tests()


@pytest.fixture
def transport() -> InMemoryOracleTransport:
    return InMemoryOracleTransport()


@pytest.fixture
def events() -> RunEventLog:
    return RunEventLog()


@pytest.fixture
def gateway(transport: InMemoryOracleTransport, events: RunEventLog) -> OracleGateway:
    return OracleGateway(
        transport,
        OracleIdentity(name="oracle", token=ORACLE_TOKEN),
        admin=ADMIN,
        admin_token=ADMIN_TOKEN,
        events=events,
    )


@pytest.fixture
def controller(gateway: OracleGateway, events: RunEventLog) -> RunController:
    return RunController(AgentRunRegistry(), gateway, ConfigTemplate(), events=events)


@pytest_asyncio.fixture
async def started_run(controller: RunController, transport: InMemoryOracleTransport) -> int:
    """Start a run with a budget of 5 and clear the initial model request."""
    run_id = await controller.start("sys", "hello", 5, owner=OWNER)
    transport.drain()
    return run_id


@pytest.fixture
def mock_hatchet_client() -> AsyncMock:
    """Reusable mocked Hatchet client fixture."""
    client = AsyncMock()
    client.run_task_now.return_value = "workflow-run-id"
    return client
