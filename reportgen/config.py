"""Configuration loading for reportgen (.reportgen.yml plus environment)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

CONFIG_FILENAME = ".reportgen.yml"

ENV_SEARCH_ROOT = "REPORTGEN_SEARCH_ROOT"
ENV_PORT = "PORT"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LLMConfig:
    """Text-generation settings from .reportgen.yml."""

    runner: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    request_timeout: Optional[float] = None


@dataclass
class ServerConfig:
    """HTTP service bind settings."""

    host: str = "127.0.0.1"
    port: int = 3001


@dataclass
class ReportGenConfig:
    """Represents the settings defined in .reportgen.yml."""

    root: Path
    search_root: Optional[Path] = None
    llm: Optional[LLMConfig] = None
    server: ServerConfig = field(default_factory=ServerConfig)


def load_config(
    config_path: Path,
    *,
    environ: Mapping[str, str] | None = None,
) -> ReportGenConfig:
    """Load configuration from disk, then apply environment overrides."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    if environ is None:
        load_dotenv()
        environ = os.environ

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    search_root_str = _as_str(data.get("search_root"))
    search_root = _resolve_search_root(root, search_root_str)

    llm_data = _as_dict(data.get("llm"))
    llm = None
    if llm_data:
        llm = LLMConfig(
            runner=_as_str(llm_data.get("runner")),
            model=_as_str(llm_data.get("model")),
            temperature=_as_float(llm_data.get("temperature")),
            max_tokens=_as_int(llm_data.get("max_tokens")),
            base_url=_as_str(llm_data.get("base_url")),
            api_key=_as_str(llm_data.get("api_key")),
            request_timeout=_as_float(llm_data.get("request_timeout")),
        )
        if not any(
            (
                llm.runner,
                llm.model,
                llm.temperature,
                llm.max_tokens,
                llm.base_url,
                llm.api_key,
                llm.request_timeout,
            )
        ):
            llm = None

    server = ServerConfig()
    server_data = _as_dict(data.get("server"))
    if server_data:
        server.host = _as_str(server_data.get("host")) or server.host
        server.port = _as_int(server_data.get("port")) or server.port

    env_root = environ.get(ENV_SEARCH_ROOT)
    if env_root:
        search_root = Path(env_root).expanduser()
    env_port = _as_int(environ.get(ENV_PORT))
    if env_port:
        server.port = env_port

    return ReportGenConfig(root=root, search_root=search_root, llm=llm, server=server)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _resolve_search_root(root: Path, value: str | None) -> Path | None:
    if not value:
        return None
    candidate = Path(value).expanduser()
    if not candidate.is_absolute():
        candidate = root / candidate
    return candidate


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")
    return loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None
