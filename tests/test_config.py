"""Tests for reportgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from reportgen.config import ConfigError, LLMConfig, ReportGenConfig, ServerConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert isinstance(config, ReportGenConfig)
    assert config.root == tmp_path.resolve()
    assert config.search_root is None
    assert config.llm is None
    assert config.server == ServerConfig()


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".reportgen.yml").write_text(
        """
search_root: projects
llm:
  runner: "gemini"
  model: "gemini-2.0-flash"
  temperature: 0.15
  max_tokens: 2048
  request_timeout: 90
server:
  host: 0.0.0.0
  port: 8080
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path, environ={})

    assert config.search_root == tmp_path.resolve() / "projects"
    assert config.llm == LLMConfig(
        runner="gemini",
        model="gemini-2.0-flash",
        temperature=0.15,
        max_tokens=2048,
        request_timeout=90.0,
    )
    assert config.server == ServerConfig(host="0.0.0.0", port=8080)


def test_environment_overrides_file_values(tmp_path: Path) -> None:
    (tmp_path / ".reportgen.yml").write_text("search_root: /srv/code\nserver:\n  port: 8080\n", encoding="utf-8")

    config = load_config(
        tmp_path / "anything.txt",
        environ={"REPORTGEN_SEARCH_ROOT": str(tmp_path / "repos"), "PORT": "9000"},
    )

    assert config.search_root == tmp_path / "repos"
    assert config.server.port == 9000


def test_empty_llm_block_is_ignored(tmp_path: Path) -> None:
    (tmp_path / ".reportgen.yml").write_text("llm:\n  model:\n", encoding="utf-8")

    assert load_config(tmp_path, environ={}).llm is None


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".reportgen.yml").write_text("llm: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".reportgen.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path, environ={})
