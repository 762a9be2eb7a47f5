"""Unit tests for create_controller."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from oracle_agent.agent.runtime.models import ModelResponse
from oracle_agent.app import create_controller
from oracle_agent.config.manager import ConfigManager
from oracle_agent.config.models import OracleAgentConfig
from oracle_agent.oracle.transports import HatchetOracleTransport, InMemoryOracleTransport


def _config(**oracle: object) -> OracleAgentConfig:
    return OracleAgentConfig.model_validate({"oracle": {"token": "tok", **oracle}})


def test_requires_oracle_token() -> None:
    with pytest.raises(ValueError, match="oracle.token"):
        create_controller(OracleAgentConfig.model_validate({}))


@pytest.mark.asyncio
async def test_builds_working_controller_from_config() -> None:
    transport = InMemoryOracleTransport()
    cfg = OracleAgentConfig.model_validate(
        {
            "oracle": {"token": "tok", "admin": "root", "admin_token": "root-secret"},
            "template": {"model": "gpt-4o", "tools": []},
        }
    )
    controller = create_controller(cfg, transport=transport)

    run_id = await controller.start("sys", "q", 2, owner="alice")
    [request] = transport.drain()
    assert request.config.model == "gpt-4o"
    await controller.on_model_response(run_id, ModelResponse(content="a"), credential="tok")
    assert controller.is_finished(run_id)
    assert controller.gateway.admin == "root"
    assert controller.gateway.authenticate_admin("root-secret") == "root"


def test_uses_config_manager_snapshot_by_default() -> None:
    ConfigManager.load(overrides={"oracle": {"token": "from-manager"}})
    controller = create_controller()
    assert controller.gateway.authenticate("from-manager") == "oracle"


def test_hatchet_transport_from_config(mock_hatchet_client: AsyncMock) -> None:
    controller = create_controller(_config(transport="hatchet"), hatchet_client=mock_hatchet_client)
    assert isinstance(controller.gateway._transport, HatchetOracleTransport)
