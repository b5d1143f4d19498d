"""Configuration management for the users service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "info"
DEFAULT_MAX_BODY_BYTES = 1 << 20
DEFAULT_SERVICE_NAME = "userapi"

_LOG_LEVELS = {"critical", "error", "warning", "info", "debug"}


def _parse_port(value: object) -> int:
    try:
        port = int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid port: {value!r}") from exc
    if not 0 < port < 65536:
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return port


def _parse_log_level(value: object) -> str:
    level = str(value).strip().lower()
    if level not in _LOG_LEVELS:
        raise ValueError(
            f"Unknown log level {value!r}; expected one of {', '.join(sorted(_LOG_LEVELS))}"
        )
    return level


def _parse_body_limit(value: object) -> int:
    try:
        limit = int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid body size limit: {value!r}") from exc
    if limit <= 0:
        raise ValueError("Body size limit must be a positive number of bytes")
    return limit


@dataclass(frozen=True)
class ServerConfig:
    """Settings used to build and serve the application."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    service_name: str = DEFAULT_SERVICE_NAME

    @staticmethod
    def from_dict(data: Mapping[str, object], base: "ServerConfig | None" = None) -> "ServerConfig":
        """Create a :class:`ServerConfig` from raw dictionary data."""
        config = base or ServerConfig()
        unknown = set(data) - {"host", "port", "log_level", "max_body_bytes", "service_name"}
        if unknown:
            raise ValueError(f"Unknown server configuration fields: {', '.join(sorted(unknown))}")

        changes: Dict[str, object] = {}
        if data.get("host") is not None:
            host = str(data["host"]).strip()
            if not host:
                raise ValueError("Host must not be empty")
            changes["host"] = host
        if data.get("port") is not None:
            changes["port"] = _parse_port(data["port"])
        if data.get("log_level") is not None:
            changes["log_level"] = _parse_log_level(data["log_level"])
        if data.get("max_body_bytes") is not None:
            changes["max_body_bytes"] = _parse_body_limit(data["max_body_bytes"])
        if data.get("service_name") is not None:
            changes["service_name"] = str(data["service_name"]).strip() or DEFAULT_SERVICE_NAME
        return replace(config, **changes)


def load_config_file(config_path: Path, base: ServerConfig | None = None) -> ServerConfig:
    """Load server settings from the ``server`` mapping of a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping")
    server = raw.get("server") or {}
    if not isinstance(server, dict):
        raise ValueError("The 'server' key must contain a mapping")
    return ServerConfig.from_dict(server, base=base)


def apply_environment(config: ServerConfig, environ: Mapping[str, str] | None = None) -> ServerConfig:
    """Override ``config`` with any ``USERAPI_*`` environment variables that are set."""
    env = os.environ if environ is None else environ
    overrides = {
        "host": env.get("USERAPI_HOST"),
        "port": env.get("USERAPI_PORT"),
        "log_level": env.get("USERAPI_LOG_LEVEL"),
        "max_body_bytes": env.get("USERAPI_MAX_BODY_BYTES"),
    }
    return ServerConfig.from_dict(
        {key: value for key, value in overrides.items() if value not in (None, "")},
        base=config,
    )


def resolve_config_path(env_value: Optional[str]) -> Optional[Path]:
    """Resolve the path to the optional configuration file."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    candidate = (Path(__file__).resolve().parent.parent / "config" / "userapi.yaml").resolve(strict=False)
    if candidate.exists():
        return candidate
    return None


def load_config(
    config_path: Optional[Path] = None,
    environ: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Build the effective configuration from defaults, file and environment."""
    env = os.environ if environ is None else environ
    path = config_path or resolve_config_path(env.get("USERAPI_CONFIG"))
    config = ServerConfig()
    if path is not None:
        config = load_config_file(path, base=config)
    return apply_environment(config, env)


__all__ = [
    "ServerConfig",
    "apply_environment",
    "load_config",
    "load_config_file",
    "resolve_config_path",
]
