"""Exceptions raised by the agent run controller and oracle gateway.

Messages never include oracle tokens or other credentials.
"""

from __future__ import annotations


class OracleAgentError(Exception):
    """Base exception for oracle-agent."""


class AuthorizationError(OracleAgentError):
    """Caller is not the configured oracle, or not the administrator."""


class NotFoundError(OracleAgentError):
    """Raised when a run id is unknown."""

    def __init__(self, run_id: int) -> None:
        self.run_id = run_id
        super().__init__(f"agent run not found: {run_id}")


class InvalidStateError(OracleAgentError):
    """Raised when a callback arrives for a run that can no longer change."""

    def __init__(self, run_id: int, message: str = "run is finished") -> None:
        self.run_id = run_id
        super().__init__(f"{message}: {run_id}")


class UpstreamError(OracleAgentError):
    """Error reported by the oracle for a model call.

    Recorded into the run as its final assistant message; the controller does
    not raise it to callers.
    """

    def __init__(self, run_id: int, message: str) -> None:
        self.run_id = run_id
        self.message = message
        super().__init__(message)


class OracleDispatchError(OracleAgentError):
    """Raised when a request could not be delivered to the oracle service."""

    def __init__(self, message: str, *, run_id: int | None = None, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.run_id = run_id
        self.cause = cause
