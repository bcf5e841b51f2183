"""Configuration loading for sigen (.sigen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .evaluator import EVALUATORS
from .exceptions import ConfigError

CONFIG_FILENAME = ".sigen.yml"


@dataclass
class SIGenConfig:
    """Represents the settings defined in .sigen.yml."""

    root: Path
    proxy_parent_class: Optional[str] = None
    evaluator: str = "python"
    context: Dict[str, Any] = field(default_factory=dict)
    templates_dir: Optional[Path] = None


def load_config(config_path: Path) -> SIGenConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SIGenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    evaluator = _as_str(data.get("evaluator")) or "python"
    if evaluator not in EVALUATORS:
        choices = ", ".join(sorted(EVALUATORS))
        raise ConfigError(f"Unknown evaluator '{evaluator}' (expected one of: {choices})")

    context = data.get("context")
    if context is None:
        context = {}
    if not isinstance(context, dict):
        raise ConfigError("'context' must be a mapping")

    templates_dir_str = _as_str(data.get("templates_dir"))

    return SIGenConfig(
        root=root,
        proxy_parent_class=_as_str(data.get("proxy_parent_class")),
        evaluator=evaluator,
        context={str(key): value for key, value in context.items()},
        templates_dir=root / templates_dir_str if templates_dir_str else None,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


__all__ = ["CONFIG_FILENAME", "SIGenConfig", "load_config"]
