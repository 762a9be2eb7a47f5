"""Unit tests for YAMLConfigLoader."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from oracle_agent.config.loader import DEFAULT_CONFIG_YAML, ConfigLoadError, YAMLConfigLoader
from oracle_agent.config.models import OracleAgentConfig


def test_resolve_path_priority(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    assert YAMLConfigLoader.resolve_path() == tmp_path / "oracle_agent.yaml"
    assert YAMLConfigLoader.resolve_path("custom.yaml") == Path("custom.yaml")
    monkeypatch.setenv("ORACLE_AGENT_CONFIG", "/etc/oracle_agent.yaml")
    assert YAMLConfigLoader.resolve_path("custom.yaml") == Path("/etc/oracle_agent.yaml")


def test_missing_or_blank_file_is_empty(tmp_path: Path) -> None:
    assert YAMLConfigLoader.load_dict(tmp_path / "absent.yaml") == {}
    blank = tmp_path / "blank.yaml"
    blank.write_text("  \n", encoding="utf-8")
    assert YAMLConfigLoader.load_dict(blank) == {}


def test_invalid_yaml_reports_location(tmp_path: Path) -> None:
    broken = tmp_path / "broken.yaml"
    broken.write_text("agent:\n  system_prompt: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="broken.yaml"):
        YAMLConfigLoader.load_dict(broken)


def test_non_mapping_root_is_rejected(tmp_path: Path) -> None:
    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="mapping"):
        YAMLConfigLoader.load_dict(listing)


def test_write_default_creates_valid_config(tmp_path: Path) -> None:
    output = YAMLConfigLoader.write_default(tmp_path / "conf")
    assert output.read_text(encoding="utf-8") == DEFAULT_CONFIG_YAML
    cfg = OracleAgentConfig.model_validate(yaml.safe_load(DEFAULT_CONFIG_YAML))
    assert cfg.oracle.transport == "memory"
    with pytest.raises(FileExistsError):
        YAMLConfigLoader.write_default(tmp_path / "conf")
    YAMLConfigLoader.write_default(tmp_path / "conf", force=True)
