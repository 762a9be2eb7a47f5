"""HTTP surface for starting runs and receiving oracle callbacks."""

from oracle_agent.api.auth import (
    AdminTokenAuthProvider,
    APIKeyAuthProvider,
    AuthProvider,
    AuthResult,
    bearer_token,
)
from oracle_agent.api.server import (
    ModelResponseCallback,
    OracleIdentityUpdate,
    StartRunRequest,
    ToolResponseCallback,
    create_app,
)

__all__ = [
    "APIKeyAuthProvider",
    "AdminTokenAuthProvider",
    "AuthProvider",
    "AuthResult",
    "ModelResponseCallback",
    "OracleIdentityUpdate",
    "StartRunRequest",
    "ToolResponseCallback",
    "bearer_token",
    "create_app",
]
