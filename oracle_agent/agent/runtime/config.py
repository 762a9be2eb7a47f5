"""ConfigTemplate: default request parameters sent with every model call."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


def _web_search_schema() -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": "web_search",
            "description": "Search the internet for up-to-date information.",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search query",
                    },
                },
                "required": ["query"],
            },
        },
    }


def _code_interpreter_schema() -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": "code_interpreter",
            "description": (
                "Evaluates python code in a sandbox environment. The environment resets on every "
                "execution, so send the whole script each time and print() any output you need."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "code": {
                        "type": "string",
                        "description": "The pure python script to evaluate, not in markdown format.",
                    },
                },
                "required": ["code"],
            },
        },
    }


def default_tools() -> list[dict[str, Any]]:
    return [_web_search_schema(), _code_interpreter_schema()]


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


class ConfigTemplate(BaseModel):
    """Immutable model request defaults and the tool schema advertised to the model.

    Container fields are stored as read-only mappings and tuples; ``to_request()``
    hands out fresh plain copies.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    model: str = Field(default="gpt-4-turbo-preview", min_length=1)
    frequency_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    logit_bias: Mapping[str, float] | None = Field(default=None, validate_default=True)
    max_tokens: int | None = Field(default=1000, ge=1)
    presence_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    response_format: Mapping[str, Any] | None = Field(
        default_factory=lambda: {"type": "text"}, validate_default=True
    )
    seed: int | None = None
    stop: tuple[str, ...] | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    tools: tuple[Mapping[str, Any], ...] = Field(default_factory=default_tools, validate_default=True)
    tool_choice: str = Field(default="auto")
    user: str | None = None

    @field_validator("tools")
    @classmethod
    def _validate_tools(cls, value: tuple[Mapping[str, Any], ...]) -> tuple[Mapping[str, Any], ...]:
        seen: set[str] = set()
        for tool in value:
            function = tool.get("function")
            if not isinstance(function, Mapping) or tool.get("type") != "function":
                raise ValueError("each tool must be an OpenAI-style function schema")
            name = function.get("name")
            if not isinstance(name, str) or not name.strip():
                raise ValueError("tool function name must be a non-empty string")
            if name in seen:
                raise ValueError(f"duplicate tool name: {name}")
            seen.add(name)
            parameters = function.get("parameters", {"type": "object"})
            if not isinstance(parameters, Mapping) or parameters.get("type") != "object":
                raise ValueError(f"tool {name} parameters must be a JSON schema object")
        return _freeze(value)

    @field_validator("logit_bias", "response_format")
    @classmethod
    def _freeze_mapping(cls, value: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
        return None if value is None else _freeze(value)

    @field_validator("tool_choice")
    @classmethod
    def _validate_tool_choice(cls, value: str) -> str:
        if value not in {"auto", "none", "required"}:
            raise ValueError("tool_choice must be one of auto, none, required")
        return value

    @field_serializer("tools", "logit_bias", "response_format")
    def _serialize_frozen(self, value: Any) -> Any:
        return _thaw(value)

    def tool_names(self) -> list[str]:
        return [tool["function"]["name"] for tool in self.tools]

    def to_request(self) -> dict[str, Any]:
        """Render request parameters, leaving out unset optional fields."""
        data = self.model_dump(mode="json", exclude_none=True)
        if not data.get("tools"):
            data.pop("tools", None)
            data.pop("tool_choice", None)
        return data
