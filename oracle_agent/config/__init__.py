"""Configuration system for oracle-agent."""

from oracle_agent.config.loader import ConfigLoadError, YAMLConfigLoader
from oracle_agent.config.manager import ConfigManager, mask_secrets
from oracle_agent.config.models import (
    AgentConfig,
    APIConfig,
    OracleAgentConfig,
    OracleConfig,
    OracleHatchetConfig,
    OracleHttpConfig,
)

__all__ = [
    "AgentConfig",
    "APIConfig",
    "ConfigLoadError",
    "ConfigManager",
    "OracleAgentConfig",
    "OracleConfig",
    "OracleHatchetConfig",
    "OracleHttpConfig",
    "YAMLConfigLoader",
    "mask_secrets",
]
