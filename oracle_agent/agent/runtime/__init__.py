"""Agent runtime package: run registry, message log, and the run state machine."""

from oracle_agent.agent.runtime.config import ConfigTemplate, default_tools
from oracle_agent.agent.runtime.controller import RunController
from oracle_agent.agent.runtime.events import RunEvent, RunEventLog
from oracle_agent.agent.runtime.messages import ContentBlock, Message, MessageLog, Role
from oracle_agent.agent.runtime.models import (
    MAX_ITERATIONS_LIMIT,
    AgentRun,
    FinishReason,
    ModelResponse,
    RunState,
)
from oracle_agent.agent.runtime.registry import AgentRunRegistry

__all__ = [
    "AgentRun",
    "AgentRunRegistry",
    "ConfigTemplate",
    "ContentBlock",
    "FinishReason",
    "MAX_ITERATIONS_LIMIT",
    "Message",
    "MessageLog",
    "ModelResponse",
    "Role",
    "RunController",
    "RunEvent",
    "RunEventLog",
    "RunState",
    "default_tools",
]
