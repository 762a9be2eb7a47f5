"""oracle-agent: multi-turn LLM agent runs advanced by an external oracle service."""

from oracle_agent.agent.runtime import (
    AgentRun,
    AgentRunRegistry,
    ConfigTemplate,
    Message,
    ModelResponse,
    Role,
    RunController,
    RunState,
)
from oracle_agent.app import create_controller
from oracle_agent.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    OracleAgentError,
    OracleDispatchError,
    UpstreamError,
)
from oracle_agent.oracle import InMemoryOracleTransport, OracleGateway, OracleIdentity

__all__ = [
    "AgentRun",
    "AgentRunRegistry",
    "AuthorizationError",
    "ConfigTemplate",
    "InMemoryOracleTransport",
    "InvalidStateError",
    "Message",
    "ModelResponse",
    "NotFoundError",
    "OracleAgentError",
    "OracleDispatchError",
    "OracleGateway",
    "OracleIdentity",
    "Role",
    "RunController",
    "RunState",
    "UpstreamError",
    "create_controller",
]
