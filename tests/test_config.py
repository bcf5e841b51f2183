"""Tests for sigen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from sigen.config import SIGenConfig, load_config
from sigen.exceptions import ConfigError


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, SIGenConfig)
    assert config.root == tmp_path.resolve()
    assert config.proxy_parent_class is None
    assert config.evaluator == "python"
    assert config.context == {}
    assert config.templates_dir is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".sigen.yml"
    config_file.write_text(
        """
proxy_parent_class: "sigen.proxy.SimpleProxy"
evaluator: restricted
templates_dir: "templates"
context:
  debug: true
  roles:
    - admin
    - editor
  limit: 10
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.proxy_parent_class == "sigen.proxy.SimpleProxy"
    assert config.evaluator == "restricted"
    assert config.templates_dir == tmp_path.resolve() / "templates"
    assert config.context == {"debug": True, "roles": ["admin", "editor"], "limit": 10}


def test_load_config_resolves_sibling_file(tmp_path: Path) -> None:
    (tmp_path / ".sigen.yml").write_text("evaluator: restricted\n", encoding="utf-8")

    config = load_config(tmp_path / "service.py")

    assert config.evaluator == "restricted"


def test_load_config_accepts_empty_file(tmp_path: Path) -> None:
    (tmp_path / ".sigen.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).context == {}


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("- just\n- a list\n", "must contain a mapping"),
        ("evaluator: lua\n", "Unknown evaluator 'lua'"),
        ("context: [1, 2]\n", "'context' must be a mapping"),
        ("context: {unclosed\n", "Failed to parse"),
    ],
)
def test_load_config_rejects_invalid_files(tmp_path: Path, content: str, message: str) -> None:
    (tmp_path / ".sigen.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_config(tmp_path)
