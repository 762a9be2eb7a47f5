"""Unit tests for the oracle-agent CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from starlette.applications import Starlette
from typer.testing import CliRunner

from oracle_agent.cli import app

runner = CliRunner()


def test_init_writes_default_config(tmp_path: Path) -> None:
    result = runner.invoke(app, ["init", "--path", str(tmp_path)])
    assert result.exit_code == 0
    assert (tmp_path / "oracle_agent.yaml").exists()

    again = runner.invoke(app, ["init", "--path", str(tmp_path)])
    assert again.exit_code == 1
    assert "already exists" in again.output

    forced = runner.invoke(app, ["init", "--path", str(tmp_path), "--force"])
    assert forced.exit_code == 0


def test_config_show_masks_token(tmp_path: Path) -> None:
    cfg = tmp_path / "oracle_agent.yaml"
    cfg.write_text("oracle:\n  token: super-secret\n  admin: root\n", encoding="utf-8")
    result = runner.invoke(app, ["config", "show", "--config", str(cfg)])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["oracle"]["token"] == "***"
    assert data["oracle"]["admin"] == "root"
    assert "super-secret" not in result.output


def test_serve_requires_oracle_token(tmp_path: Path) -> None:
    result = runner.invoke(app, ["serve", "--config", str(tmp_path / "none.yaml")])
    assert result.exit_code == 1
    assert "oracle.token" in result.output


def test_serve_runs_uvicorn_with_configured_app(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    captured: dict[str, Any] = {}

    def _fake_run(http_app: Any, **kwargs: Any) -> None:
        captured["app"] = http_app
        captured.update(kwargs)

    monkeypatch.setattr("uvicorn.run", _fake_run)
    monkeypatch.setenv("ORACLE_AGENT_ORACLE__TOKEN", "tok")
    result = runner.invoke(app, ["serve", "--config", str(tmp_path / "none.yaml"), "--port", "9001"])

    assert result.exit_code == 0, result.output
    assert isinstance(captured["app"], Starlette)
    assert captured["host"] == "127.0.0.1"
    assert captured["port"] == 9001


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.startswith("oracle-agent ")
