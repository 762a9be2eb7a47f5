"""Oracle gateway and outbound transports."""

from oracle_agent.oracle.gateway import (
    ModelRequest,
    OracleGateway,
    OracleIdentity,
    OracleTransport,
    ToolRequest,
)
from oracle_agent.oracle.transports import (
    HatchetOracleTransport,
    HttpOracleTransport,
    InMemoryOracleTransport,
    build_transport,
)

__all__ = [
    "HatchetOracleTransport",
    "HttpOracleTransport",
    "InMemoryOracleTransport",
    "ModelRequest",
    "OracleGateway",
    "OracleIdentity",
    "OracleTransport",
    "ToolRequest",
    "build_transport",
]
