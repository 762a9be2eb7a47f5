"""Credential checks for the HTTP surface: run owners, the oracle, the administrator."""

from __future__ import annotations

import hmac
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass

from starlette.requests import Request

from oracle_agent.exceptions import AuthorizationError
from oracle_agent.oracle.gateway import OracleGateway


@dataclass(slots=True)
class AuthResult:
    """Outcome of a credential check.

    ``status_code`` is only meaningful on failure: 401 when no credential was
    presented, 403 when one was presented and rejected.
    """

    ok: bool
    identity: str | None = None
    reason: str | None = None
    status_code: int = 401

    @classmethod
    def granted(cls, identity: str) -> AuthResult:
        return cls(ok=True, identity=identity)

    @classmethod
    def missing(cls, reason: str) -> AuthResult:
        return cls(ok=False, reason=reason, status_code=401)

    @classmethod
    def rejected(cls, reason: str) -> AuthResult:
        return cls(ok=False, reason=reason, status_code=403)


class AuthProvider(ABC):
    @abstractmethod
    async def authenticate(self, request: Request) -> AuthResult: ...


class APIKeyAuthProvider(AuthProvider):
    """Map the ``X-API-Key`` header to the owner name configured for that key."""

    def __init__(self, owners_by_key: Mapping[str, str]) -> None:
        self._owners = {
            key.strip(): owner.strip()
            for key, owner in owners_by_key.items()
            if key and key.strip() and owner and owner.strip()
        }

    async def authenticate(self, request: Request) -> AuthResult:
        key = request.headers.get("X-API-Key", "").strip()
        if not key:
            return AuthResult.missing("missing_api_key")
        owner = None
        for known, name in self._owners.items():
            if hmac.compare_digest(key.encode("utf-8"), known.encode("utf-8")):
                owner = name
        if owner is None:
            # Unknown keys answer 401, same as a missing key.
            return AuthResult.missing("invalid_api_key")
        return AuthResult.granted(owner)


class AdminTokenAuthProvider(AuthProvider):
    """Authenticate the administrator by the admin token held by the gateway.

    The token is read from ``X-Admin-Token`` or, failing that, a bearer
    ``Authorization`` header.
    """

    def __init__(self, gateway: OracleGateway) -> None:
        self._gateway = gateway

    async def authenticate(self, request: Request) -> AuthResult:
        credential = request.headers.get("X-Admin-Token", "").strip() or bearer_token(request)
        if not credential:
            return AuthResult.missing("missing_admin_token")
        try:
            return AuthResult.granted(self._gateway.authenticate_admin(credential))
        except AuthorizationError as exc:
            return AuthResult.rejected(str(exc))


def bearer_token(request: Request) -> str | None:
    raw = request.headers.get("Authorization", "")
    if not raw.startswith("Bearer "):
        return None
    token = raw[len("Bearer ") :].strip()
    return token or None
