"""Configuration loading for doccorpus (.doccorpus.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".doccorpus.yml"
DEFAULT_SUFFIXES = [".js"]


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ServiceConfig:
    """Bind settings for the read-only query service."""

    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class DocCorpusConfig:
    """Represents the settings defined in .doccorpus.yml."""

    root: Path
    suffixes: List[str] = field(default_factory=lambda: list(DEFAULT_SUFFIXES))
    exclude_paths: List[str] = field(default_factory=list)
    workers: Optional[int] = None
    service: ServiceConfig = field(default_factory=ServiceConfig)


def load_config(config_path: Path) -> DocCorpusConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocCorpusConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    suffixes = [_normalise_suffix(value) for value in _as_str_list(data.get("suffixes"))]
    suffixes = [value for value in suffixes if value]

    workers = _as_int(data.get("workers"))
    if workers is not None and workers < 1:
        workers = None

    service = ServiceConfig()
    service_data = _as_dict(data.get("service"))
    if service_data:
        host = _as_str(service_data.get("host"))
        port = _as_int(service_data.get("port"))
        if host:
            service.host = host
        if port is not None:
            service.port = port

    return DocCorpusConfig(
        root=root,
        suffixes=suffixes or list(DEFAULT_SUFFIXES),
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        workers=workers,
        service=service,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_suffix(value: str) -> str:
    value = value.strip().lower()
    if not value:
        return ""
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "DocCorpusConfig", "ServiceConfig", "load_config"]
