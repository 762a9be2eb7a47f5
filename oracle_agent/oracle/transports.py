"""Outbound transports that deliver model/tool requests to the oracle service."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import httpx

from oracle_agent.exceptions import OracleDispatchError
from oracle_agent.oracle.gateway import ModelRequest, OracleTransport, ToolRequest

if TYPE_CHECKING:
    from oracle_agent.config.models import OracleConfig

logger = logging.getLogger(__name__)


class InMemoryOracleTransport:
    """Keep dispatched requests in an outbox.

    Used in lite mode and tests where another component (or the test itself)
    plays the oracle and feeds callbacks back to the controller.
    """

    def __init__(self) -> None:
        self._outbox: list[ModelRequest | ToolRequest] = []

    async def send_model_request(self, request: ModelRequest) -> None:
        self._outbox.append(request)

    async def send_tool_request(self, request: ToolRequest) -> None:
        self._outbox.append(request)

    @property
    def outbox(self) -> list[ModelRequest | ToolRequest]:
        return list(self._outbox)

    def drain(self) -> list[ModelRequest | ToolRequest]:
        """Return pending requests and clear the outbox."""
        pending = list(self._outbox)
        self._outbox.clear()
        return pending


class HatchetOracleTransport:
    """Deliver requests as immediate Hatchet task runs."""

    def __init__(
        self,
        hatchet_client: Any,
        *,
        model_task: str = "oracle_model_call",
        tool_task: str = "oracle_tool_call",
    ) -> None:
        for name, value in (("model_task", model_task), ("tool_task", tool_task)):
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{name} must be a non-empty string")
        if not callable(getattr(hatchet_client, "run_task_now", None)):
            raise ValueError("hatchet client does not support run_task_now")
        self.hatchet = hatchet_client
        self.model_task = model_task.strip()
        self.tool_task = tool_task.strip()

    async def send_model_request(self, request: ModelRequest) -> None:
        workflow_run_id = await self.hatchet.run_task_now(self.model_task, **request.to_payload())
        logger.debug("hatchet model task started run_id=%d workflow_run_id=%s", request.run_id, workflow_run_id)

    async def send_tool_request(self, request: ToolRequest) -> None:
        workflow_run_id = await self.hatchet.run_task_now(self.tool_task, **request.to_payload())
        logger.debug("hatchet tool task started run_id=%d workflow_run_id=%s", request.run_id, workflow_run_id)


class HttpOracleTransport:
    """POST requests as JSON to an HTTP oracle endpoint.

    Transport errors and 5xx responses are retried with exponential backoff;
    4xx responses fail immediately.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout_seconds: float = 10.0,
        max_attempts: int = 3,
        backoff_seconds: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not isinstance(base_url, str) or not base_url.strip():
            raise ValueError("base_url must be a non-empty string")
        if max_attempts < 1:
            raise ValueError("max_attempts must be a positive integer")
        self.base_url = base_url.strip().rstrip("/")
        self._token = token
        self._timeout_seconds = timeout_seconds
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds
        self._transport = transport

    async def send_model_request(self, request: ModelRequest) -> None:
        await self._post("/model-requests", request.to_payload())

    async def send_tool_request(self, request: ToolRequest) -> None:
        await self._post("/tool-requests", request.to_payload())

    async def _post(self, path: str, body: dict[str, Any]) -> None:
        url = f"{self.base_url}{path}"
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        delay = self._backoff_seconds
        last_error: str = ""
        for attempt in range(1, self._max_attempts + 1):
            try:
                async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                    response = await client.post(url, json=body, headers=headers)
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                last_error = f"{type(exc).__name__}: {exc}"
            else:
                if response.status_code < 400:
                    return
                if response.status_code < 500:
                    raise OracleDispatchError(f"oracle rejected request to {path}: HTTP {response.status_code}")
                last_error = f"HTTP {response.status_code}"
            if attempt < self._max_attempts:
                logger.warning(
                    "oracle request to %s failed (attempt %d/%d): %s",
                    path,
                    attempt,
                    self._max_attempts,
                    last_error,
                )
                await asyncio.sleep(delay)
                delay *= 2
        raise OracleDispatchError(f"oracle request to {path} failed after {self._max_attempts} attempts: {last_error}")


def build_transport(config: OracleConfig, *, hatchet_client: Any = None) -> OracleTransport:
    """Create the transport selected by ``oracle.transport``."""
    if config.transport == "memory":
        return InMemoryOracleTransport()
    if config.transport == "hatchet":
        if hatchet_client is None:
            raise ValueError("hatchet transport requires a hatchet client")
        return HatchetOracleTransport(
            hatchet_client,
            model_task=config.hatchet.model_task,
            tool_task=config.hatchet.tool_task,
        )
    if config.transport == "http":
        return HttpOracleTransport(
            config.http.base_url,
            token=config.http.token or None,
            timeout_seconds=config.http.timeout_seconds,
            max_attempts=config.http.max_attempts,
        )
    raise ValueError(f"unsupported oracle transport: {config.transport}")
