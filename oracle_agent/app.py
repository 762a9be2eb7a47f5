"""Assemble a RunController from configuration."""

from __future__ import annotations

import logging
from typing import Any

from oracle_agent.agent.runtime.controller import RunController
from oracle_agent.agent.runtime.events import RunEventLog
from oracle_agent.agent.runtime.registry import AgentRunRegistry
from oracle_agent.config import ConfigManager, OracleAgentConfig
from oracle_agent.oracle.gateway import OracleGateway, OracleIdentity, OracleTransport
from oracle_agent.oracle.transports import build_transport

logger = logging.getLogger(__name__)


def create_controller(
    config: OracleAgentConfig | None = None,
    *,
    transport: OracleTransport | None = None,
    hatchet_client: Any = None,
    registry: AgentRunRegistry | None = None,
) -> RunController:
    """Build registry, gateway and controller from *config*.

    Uses the current :class:`ConfigManager` snapshot when *config* is omitted.
    An explicit *transport* takes precedence over ``oracle.transport``.
    """
    cfg = config if config is not None else ConfigManager.instance().get()
    if not cfg.oracle.token:
        raise ValueError("oracle.token must be configured (ORACLE_AGENT_ORACLE__TOKEN)")
    events = RunEventLog()
    identity = OracleIdentity(name=cfg.oracle.name, token=cfg.oracle.token)
    outbound = transport if transport is not None else build_transport(cfg.oracle, hatchet_client=hatchet_client)
    gateway = OracleGateway(
        outbound,
        identity,
        admin=cfg.oracle.admin,
        admin_token=cfg.oracle.admin_token,
        events=events,
    )
    logger.info(
        "oracle agent controller ready transport=%s oracle=%s fingerprint=%s",
        type(outbound).__name__,
        identity.name,
        identity.fingerprint,
    )
    return RunController(
        registry if registry is not None else AgentRunRegistry(),
        gateway,
        cfg.template,
        events=events,
    )
