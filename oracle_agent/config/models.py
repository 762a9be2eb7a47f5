"""Configuration models for oracle-agent."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from oracle_agent.agent.runtime.config import ConfigTemplate
from oracle_agent.agent.runtime.models import MAX_ITERATIONS_LIMIT


class AgentConfig(BaseModel):
    """Agent run defaults."""

    system_prompt: str = Field(default="You are a helpful AI agent.")
    default_max_iterations: int = Field(default=10, ge=0, le=MAX_ITERATIONS_LIMIT)


class OracleHttpConfig(BaseModel):
    """HTTP oracle transport configuration."""

    base_url: str = Field(default="http://localhost:8545/oracle")
    token: str = Field(default="")
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    max_attempts: int = Field(default=3, ge=1, le=10)


class OracleHatchetConfig(BaseModel):
    """Hatchet oracle transport configuration."""

    model_task: str = Field(default="oracle_model_call")
    tool_task: str = Field(default="oracle_tool_call")


class OracleConfig(BaseModel):
    """Oracle identity and outbound transport."""

    name: str = Field(default="oracle")
    token: str = Field(default="")
    admin: str = Field(default="admin")
    admin_token: str = Field(default="")
    transport: Literal["memory", "hatchet", "http"] = Field(default="memory")
    http: OracleHttpConfig = Field(default_factory=OracleHttpConfig)
    hatchet: OracleHatchetConfig = Field(default_factory=OracleHatchetConfig)


class APIConfig(BaseModel):
    """HTTP API server configuration."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)
    client_api_keys: dict[str, str] = Field(default_factory=dict)

    @field_validator("client_api_keys", mode="before")
    @classmethod
    def _default_owner_names(cls, value: object) -> object:
        # A bare list of keys names each owner after its key prefix.
        if isinstance(value, (list, tuple)):
            return {str(key): f"api_key:{str(key)[:6]}" for key in value}
        return value


class OracleAgentConfig(BaseSettings):
    """Root configuration model for oracle-agent."""

    agent: AgentConfig = Field(default_factory=AgentConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    template: ConfigTemplate = Field(default_factory=ConfigTemplate)
    api: APIConfig = Field(default_factory=APIConfig)

    model_config = SettingsConfigDict(
        env_prefix="ORACLE_AGENT_",
        env_nested_delimiter="__",
        extra="ignore",
    )
