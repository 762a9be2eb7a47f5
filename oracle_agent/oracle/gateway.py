"""OracleGateway: outbound requests to the oracle service and callback authentication."""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from oracle_agent.agent.runtime.config import ConfigTemplate
from oracle_agent.agent.runtime.events import ORACLE_IDENTITY_UPDATED, RunEventLog
from oracle_agent.agent.runtime.messages import Message
from oracle_agent.exceptions import AuthorizationError, OracleDispatchError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ModelRequest:
    """Model call for one run: full history plus the request template."""

    run_id: int
    messages: tuple[Message, ...]
    config: ConfigTemplate

    def to_payload(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "messages": [message.to_dict() for message in self.messages],
            "config": self.config.to_request(),
        }


@dataclass(slots=True)
class ToolRequest:
    """Tool call requested by the model for one run."""

    run_id: int
    function_name: str
    function_arguments: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "function_name": self.function_name,
            "function_arguments": self.function_arguments,
        }


class OracleTransport(Protocol):
    async def send_model_request(self, request: ModelRequest) -> None: ...

    async def send_tool_request(self, request: ToolRequest) -> None: ...


@dataclass(frozen=True, slots=True)
class OracleIdentity:
    """The oracle principal and the bearer token its callbacks must present."""

    name: str
    token: str = field(repr=False)

    def __post_init__(self) -> None:
        for field_name in ("name", "token"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"oracle {field_name} must be a non-empty string")

    @property
    def fingerprint(self) -> str:
        return hashlib.sha256(self.token.encode("utf-8")).hexdigest()[:8]


class OracleGateway:
    """Dispatch model/tool requests and verify who is calling back.

    Args:
        transport: Delivery mechanism for outbound requests.
        identity: The single oracle allowed to deliver callbacks.
        admin: Principal allowed to replace the oracle identity.
        admin_token: Secret the administrator presents over HTTP. When empty,
            remote identity rotation is disabled.
        events: Notification sink; a private one is created when omitted.
    """

    def __init__(
        self,
        transport: OracleTransport,
        identity: OracleIdentity,
        *,
        admin: str,
        admin_token: str = "",
        events: RunEventLog | None = None,
    ) -> None:
        if not isinstance(admin, str) or not admin.strip():
            raise ValueError("admin must be a non-empty string")
        self._transport = transport
        self._identity = identity
        self._admin = admin.strip()
        self._admin_token = admin_token
        self._events = events if events is not None else RunEventLog()

    @property
    def identity_name(self) -> str:
        return self._identity.name

    @property
    def admin(self) -> str:
        return self._admin

    def authenticate(self, credential: str | None) -> str:
        """Return the oracle name if *credential* matches, else raise AuthorizationError."""
        if not isinstance(credential, str) or not credential:
            raise AuthorizationError("oracle credential is required")
        if not hmac.compare_digest(credential.encode("utf-8"), self._identity.token.encode("utf-8")):
            logger.warning("rejected oracle callback with unknown credential")
            raise AuthorizationError("caller is not the oracle")
        return self._identity.name

    def authenticate_admin(self, credential: str | None) -> str:
        """Return the administrator name if *credential* is the admin token."""
        if not self._admin_token:
            raise AuthorizationError("administrator token is not configured")
        if not isinstance(credential, str) or not credential:
            raise AuthorizationError("administrator credential is required")
        if not hmac.compare_digest(credential.encode("utf-8"), self._admin_token.encode("utf-8")):
            logger.warning("rejected administrator request with unknown credential")
            raise AuthorizationError("caller is not the administrator")
        return self._admin

    def set_oracle_identity(self, identity: OracleIdentity, *, caller: str) -> None:
        """Replace the oracle identity. Only the administrator may do this."""
        if caller != self._admin:
            logger.warning("rejected oracle identity update from caller=%s", caller)
            raise AuthorizationError("caller is not the administrator")
        if not isinstance(identity, OracleIdentity):
            raise ValueError("identity must be an OracleIdentity")
        self._identity = identity
        self._events.record(
            ORACLE_IDENTITY_UPDATED,
            identity=identity.name,
            fingerprint=identity.fingerprint,
        )

    async def dispatch_model(self, request: ModelRequest) -> None:
        logger.debug("dispatching model request run_id=%d messages=%d", request.run_id, len(request.messages))
        await self._send(self._transport.send_model_request, request)

    async def dispatch_tool(self, request: ToolRequest) -> None:
        logger.debug(
            "dispatching tool request run_id=%d function=%s args_len=%d",
            request.run_id,
            request.function_name,
            len(request.function_arguments),
        )
        await self._send(self._transport.send_tool_request, request)

    @staticmethod
    async def _send(send: Any, request: ModelRequest | ToolRequest) -> None:
        try:
            await send(request)
        except OracleDispatchError as exc:
            if exc.run_id is None:
                exc.run_id = request.run_id
            raise
        except Exception as exc:
            raise OracleDispatchError(
                f"failed to dispatch {type(request).__name__} for run {request.run_id}: {exc}",
                run_id=request.run_id,
                cause=exc,
            ) from exc
