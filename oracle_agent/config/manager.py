"""Configuration manager: defaults <- YAML <- environment <- runtime overrides."""

from __future__ import annotations

import json
import os
from threading import Lock
from typing import Any, Callable, ClassVar

from oracle_agent.config.loader import YAMLConfigLoader
from oracle_agent.config.models import OracleAgentConfig

ConfigListener = Callable[[OracleAgentConfig, OracleAgentConfig], None]

ENV_PREFIX = "ORACLE_AGENT_"
_SECRET_KEYS = frozenset({"token", "admin_token", "client_api_keys"})


def _deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(base)
    for key, value in updates.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _coerce_env_value(raw: str) -> Any:
    value = raw.strip()
    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"null", "none"}:
        return None
    if value[:1] in {"[", "{"}:
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def _collect_env_overrides(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Map ORACLE_AGENT_A__B=v to {"a": {"b": v}}. Numbers stay strings for pydantic to coerce."""
    overrides: dict[str, Any] = {}
    for key, raw_value in os.environ.items():
        if not key.startswith(prefix) or key == f"{prefix}CONFIG":
            continue
        path = [part.strip().lower() for part in key[len(prefix) :].split("__") if part.strip()]
        if not path:
            continue
        cursor = overrides
        for part in path[:-1]:
            nested = cursor.get(part)
            if not isinstance(nested, dict):
                nested = {}
                cursor[part] = nested
            cursor = nested
        cursor[path[-1]] = _coerce_env_value(raw_value)
    return overrides


def mask_secrets(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a config dump with tokens and keys replaced by ``***``."""
    masked: dict[str, Any] = {}
    for key, value in data.items():
        if key in _SECRET_KEYS and value:
            masked[key] = "***"
        elif isinstance(value, dict):
            masked[key] = mask_secrets(value)
        else:
            masked[key] = value
    return masked


class ConfigManager:
    """Thread-safe singleton holding the current configuration snapshot."""

    _instance: ClassVar[ConfigManager | None] = None
    _class_lock: ClassVar[Lock] = Lock()

    def __init__(self) -> None:
        self._lock = Lock()
        self._config = OracleAgentConfig.model_validate({})
        self._listeners: list[ConfigListener] = []
        self._config_path: str | None = None

    @classmethod
    def instance(cls) -> ConfigManager:
        if cls._instance is not None:
            return cls._instance
        with cls._class_lock:
            if cls._instance is None:
                cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset_for_tests(cls) -> None:
        with cls._class_lock:
            cls._instance = None

    @classmethod
    def load(
        cls,
        config_path: str | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> ConfigManager:
        """Build config from YAML, environment, and *overrides*, then notify listeners."""
        manager = cls.instance()
        merged = _deep_merge(YAMLConfigLoader.load_dict(config_path), _collect_env_overrides())
        merged = _deep_merge(merged, overrides or {})
        new_config = OracleAgentConfig.model_validate(merged)
        with manager._lock:
            old = manager._config
            manager._config = new_config
            manager._config_path = config_path
            listeners = list(manager._listeners)
        for callback in listeners:
            callback(old, new_config)
        return manager

    @property
    def config_path(self) -> str | None:
        return self._config_path

    def get(self) -> OracleAgentConfig:
        with self._lock:
            return self._config

    def on_change(self, callback: ConfigListener) -> None:
        with self._lock:
            self._listeners.append(callback)

    def masked_dump(self) -> dict[str, Any]:
        return mask_secrets(self.get().model_dump(mode="json"))
