"""YAML configuration loading and default config file generation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

CONFIG_ENV = "ORACLE_AGENT_CONFIG"

DEFAULT_CONFIG_YAML = """\
# oracle-agent configuration. Environment variables override these values,
# e.g. ORACLE_AGENT_ORACLE__TOKEN=... sets oracle.token.
agent:
  system_prompt: "You are a helpful AI agent."
  default_max_iterations: 10

oracle:
  name: oracle
  token: ""            # bearer token the oracle presents on callbacks
  admin: admin         # principal allowed to replace the oracle identity
  admin_token: ""      # secret the admin presents to PUT /admin/oracle-identity
  transport: memory    # memory | hatchet | http
  http:
    base_url: http://localhost:8545/oracle
    timeout_seconds: 10
    max_attempts: 3
  hatchet:
    model_task: oracle_model_call
    tool_task: oracle_tool_call

template:
  model: gpt-4-turbo-preview
  max_tokens: 1000
  tool_choice: auto

api:
  host: 127.0.0.1
  port: 8080
  client_api_keys: {}  # api key -> run owner name
"""


class ConfigLoadError(ValueError):
    """Raised when configuration YAML cannot be read or parsed."""


class YAMLConfigLoader:
    """Locate and parse oracle_agent.yaml."""

    DEFAULT_FILENAME = "oracle_agent.yaml"

    @classmethod
    def resolve_path(cls, cli_path: str | None = None) -> Path:
        """Pick the config path: ``ORACLE_AGENT_CONFIG`` first, then *cli_path*, then ./oracle_agent.yaml."""
        from_env = os.environ.get(CONFIG_ENV, "").strip()
        if from_env:
            return Path(from_env)
        if cli_path and cli_path.strip():
            return Path(cli_path.strip())
        return Path.cwd() / cls.DEFAULT_FILENAME

    @classmethod
    def load_dict(cls, path: str | Path | None = None) -> dict[str, Any]:
        """Parse the config file; a missing or blank file is an empty mapping."""
        target = Path(path) if path is not None else cls.resolve_path()
        if not target.is_file():
            return {}
        text = target.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            where = f"{target}:{mark.line + 1}:{mark.column + 1}" if mark is not None else str(target)
            raise ConfigLoadError(f"Invalid YAML at {where}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigLoadError(f"Config root must be a mapping: {target}")
        return data

    @classmethod
    def write_default(cls, directory: str | Path, *, force: bool = False) -> Path:
        """Write the default config file into *directory* and return its path."""
        target_dir = Path(directory).resolve()
        target_dir.mkdir(parents=True, exist_ok=True)
        output = target_dir / cls.DEFAULT_FILENAME
        if output.exists() and not force:
            raise FileExistsError(f"Config already exists: {output}")
        output.write_text(DEFAULT_CONFIG_YAML, encoding="utf-8")
        return output
