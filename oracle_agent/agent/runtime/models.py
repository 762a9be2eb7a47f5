"""Agent run data model: run state, oracle model responses, and the run record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from oracle_agent.agent.runtime.messages import MessageLog
from oracle_agent.exceptions import UpstreamError

# The iteration counter is an 8-bit unsigned value.
MAX_ITERATIONS_LIMIT = 255


class RunState(str, Enum):
    STARTED = "started"
    AWAITING_MODEL = "awaiting_model"
    AWAITING_TOOL = "awaiting_tool"
    FINISHED = "finished"


class FinishReason(str, Enum):
    ANSWER = "answer"
    ERROR = "error"
    ITERATION_LIMIT = "iteration_limit"


class ModelResponse(BaseModel):
    """Model completion as reported by the oracle.

    Only ``content``, ``function_name`` and ``function_arguments`` drive the
    run; the rest is metadata kept for callers and logs. Keys are accepted in
    snake_case or camelCase and unknown keys are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        protected_namespaces=(),
    )

    content: str = ""
    function_name: str = ""
    function_arguments: str = ""
    id: str = ""
    created: int = 0
    model: str = ""
    system_fingerprint: str = ""
    object: str = ""
    completion_tokens: int = Field(default=0, ge=0)
    prompt_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)


@dataclass(slots=True)
class AgentRun:
    """One agent run.

    ``id``, ``owner`` and ``max_iterations`` are fixed at creation. The
    controller is the only writer of the remaining fields; once ``state`` is
    ``FINISHED`` nothing changes again.
    """

    id: int
    owner: str
    max_iterations: int
    messages: MessageLog
    responses_count: int = 0
    state: RunState = RunState.STARTED
    finish_reason: FinishReason | None = None
    error: UpstreamError | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    @property
    def is_finished(self) -> bool:
        return self.state is RunState.FINISHED

    def snapshot(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner": self.owner,
            "max_iterations": self.max_iterations,
            "responses_count": self.responses_count,
            "state": self.state.value,
            "is_finished": self.is_finished,
            "finish_reason": self.finish_reason.value if self.finish_reason else None,
            "error": self.error.message if self.error else None,
            "created_at": self.created_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "messages": self.messages.to_list(),
        }
