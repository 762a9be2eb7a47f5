"""RunController: the agent run state machine.

A run starts with a system and a user message and then alternates between
waiting for a model response and waiting for a tool response, both delivered
as authenticated callbacks from the oracle:

    start -> AWAITING_MODEL -> (AWAITING_TOOL <-> AWAITING_MODEL) -> FINISHED

No call blocks on the oracle. Each operation dispatches the next request (or
finishes the run) and returns; the continuation arrives as a new callback.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from oracle_agent.agent.runtime.config import ConfigTemplate
from oracle_agent.agent.runtime.events import (
    AGENT_RESPONSE_RECEIVED,
    AGENT_RUN_CREATED,
    AGENT_RUN_FINISHED,
    RunEventLog,
)
from oracle_agent.agent.runtime.messages import Message, Role
from oracle_agent.agent.runtime.models import AgentRun, FinishReason, ModelResponse, RunState
from oracle_agent.agent.runtime.registry import AgentRunRegistry
from oracle_agent.exceptions import InvalidStateError, UpstreamError
from oracle_agent.oracle.gateway import ModelRequest, OracleGateway, OracleIdentity, ToolRequest

logger = logging.getLogger(__name__)


class RunController:
    """Start runs and advance them in response to oracle callbacks.

    Args:
        registry: Store of runs; passed in so several controllers or tests can
            share or isolate state explicitly.
        gateway: Outbound dispatch and callback authentication.
        template: Request defaults attached to every model request.
        events: Notification sink for run lifecycle events.
    """

    def __init__(
        self,
        registry: AgentRunRegistry,
        gateway: OracleGateway,
        template: ConfigTemplate | None = None,
        *,
        events: RunEventLog | None = None,
    ) -> None:
        self.registry = registry
        self.gateway = gateway
        self.template = template if template is not None else ConfigTemplate()
        self.events = events if events is not None else RunEventLog()

    async def start(self, system_prompt: str, query: str, max_iterations: int, *, owner: str) -> int:
        """Create a run owned by *owner*, seed its history, and request the first model turn."""
        if not isinstance(system_prompt, str):
            raise ValueError("system_prompt must be a string")
        if not isinstance(query, str):
            raise ValueError("query must be a string")
        run = self.registry.create(owner, max_iterations)
        run.messages.append(Message.text(Role.SYSTEM, system_prompt))
        run.messages.append(Message.text(Role.USER, query))
        self.events.record(AGENT_RUN_CREATED, owner=run.owner, run_id=run.id)
        async with self.registry.lock_for(run.id):
            run.state = RunState.AWAITING_MODEL
            await self.gateway.dispatch_model(self._model_request(run))
        return run.id

    async def on_model_response(
        self,
        run_id: int,
        response: ModelResponse | dict[str, Any],
        error_message: str = "",
        *,
        credential: str | None,
    ) -> None:
        """Handle the oracle's answer to a model request.

        Decision order: upstream error finishes the run with the error text as
        the last assistant message; an exhausted iteration budget finishes the
        run without recording the response; otherwise non-empty content is
        recorded and a requested function call is dispatched, or the run
        finishes with the model's answer.
        """
        self.gateway.authenticate(credential)
        if not isinstance(response, ModelResponse):
            response = ModelResponse.model_validate(response)
        if not isinstance(error_message, str):
            raise ValueError("error_message must be a string")
        run = self.registry.get(run_id)
        async with self.registry.lock_for(run_id):
            self._ensure_open(run)
            if run.state is not RunState.AWAITING_MODEL:
                logger.warning("model response for run %d received in state %s", run_id, run.state.value)

            if error_message:
                run.error = UpstreamError(run_id, error_message)
                logger.warning("model call failed for run %d: %s", run_id, error_message)
                self._append_assistant(run, error_message)
                self._finish(run, FinishReason.ERROR)
                return

            # Checked before recording content: a response arriving with the
            # budget already spent is dropped, even if it carries an answer.
            if run.responses_count >= run.max_iterations:
                self._finish(run, FinishReason.ITERATION_LIMIT)
                return

            if response.content:
                self._append_assistant(run, response.content)

            if response.function_name:
                run.state = RunState.AWAITING_TOOL
                await self.gateway.dispatch_tool(
                    ToolRequest(
                        run_id=run_id,
                        function_name=response.function_name,
                        function_arguments=response.function_arguments,
                    )
                )
                return

            self._finish(run, FinishReason.ANSWER)

    async def on_tool_response(
        self,
        run_id: int,
        response: str,
        error_message: str = "",
        *,
        credential: str | None,
    ) -> None:
        """Record a tool result (or its error text) and request the next model turn."""
        self.gateway.authenticate(credential)
        if not isinstance(response, str) or not isinstance(error_message, str):
            raise ValueError("tool response and error_message must be strings")
        run = self.registry.get(run_id)
        async with self.registry.lock_for(run_id):
            self._ensure_open(run)
            if run.state is not RunState.AWAITING_TOOL:
                logger.warning("tool response for run %d received in state %s", run_id, run.state.value)
            result = error_message if error_message else response
            run.messages.append(Message.text(Role.USER, result))
            self._count_response(run)
            run.state = RunState.AWAITING_MODEL
            await self.gateway.dispatch_model(self._model_request(run))

    def get_run(self, run_id: int) -> AgentRun:
        return self.registry.get(run_id)

    def get_history(self, run_id: int) -> tuple[Message, ...]:
        return self.registry.get_history(run_id)

    def is_finished(self, run_id: int) -> bool:
        return self.registry.is_finished(run_id)

    def set_oracle_identity(self, identity: OracleIdentity, *, caller: str) -> None:
        self.gateway.set_oracle_identity(identity, caller=caller)

    def _model_request(self, run: AgentRun) -> ModelRequest:
        return ModelRequest(run_id=run.id, messages=run.messages.snapshot(), config=self.template)

    @staticmethod
    def _ensure_open(run: AgentRun) -> None:
        if run.is_finished:
            logger.warning("rejected callback for finished run %d", run.id)
            raise InvalidStateError(run.id)

    @staticmethod
    def _count_response(run: AgentRun) -> None:
        # Saturates so responses_count never exceeds max_iterations.
        run.responses_count = min(run.responses_count + 1, run.max_iterations)

    def _append_assistant(self, run: AgentRun, content: str) -> None:
        run.messages.append(Message.text(Role.ASSISTANT, content))
        self._count_response(run)
        self.events.record(AGENT_RESPONSE_RECEIVED, run_id=run.id, content=content)

    def _finish(self, run: AgentRun, reason: FinishReason) -> None:
        run.state = RunState.FINISHED
        run.finish_reason = reason
        run.finished_at = datetime.now(timezone.utc)
        run.messages.freeze()
        self.events.record(
            AGENT_RUN_FINISHED,
            run_id=run.id,
            reason=reason.value,
            responses_count=run.responses_count,
        )
