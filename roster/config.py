"""Configuration management for the roster service."""
from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml

from .database import resolve_database_path

logger = logging.getLogger("roster.config")

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5000
DEFAULT_API_BASE_URL = f"http://localhost:{DEFAULT_PORT}/api"


def _split_origins(value: object) -> Tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        raise ValueError("allowed_origins must be a string or a list of strings")
    origins = tuple(item.strip() for item in items if item.strip())
    return origins or ("*",)


def _parse_port(value: object) -> int:
    try:
        port = int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid port number: {value!r}") from exc
    if not 1 <= port <= 65535:
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return port


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the API, the web interface and the CLI."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    database_path: Path = resolve_database_path(None)
    api_base_url: Optional[str] = None
    session_secret: Optional[str] = None
    allowed_origins: Tuple[str, ...] = ("*",)

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``ROSTER_*`` environment variables."""

        if env is None:
            env = os.environ

        settings = Settings(
            host=env.get("ROSTER_HOST", DEFAULT_HOST).strip() or DEFAULT_HOST,
            port=_parse_port(env.get("PORT", DEFAULT_PORT)),
            database_path=resolve_database_path(env.get("ROSTER_DB_PATH")),
            api_base_url=env.get("ROSTER_API_URL", "").strip() or None,
            session_secret=env.get("ROSTER_SESSION_SECRET") or None,
            allowed_origins=_split_origins(env.get("ROSTER_ALLOWED_ORIGINS", "*")),
        )

        config_path = env.get("ROSTER_CONFIG")
        if config_path:
            settings = settings.merged_with(load_config_file(Path(config_path).expanduser()))
        return settings

    def merged_with(self, data: Dict[str, object]) -> "Settings":
        """Return a copy with the values from a configuration mapping applied."""

        known = {"host", "port", "database", "api_base_url", "session_secret", "allowed_origins"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        updates: Dict[str, object] = {}
        if data.get("host"):
            updates["host"] = str(data["host"]).strip()
        if data.get("port") is not None:
            updates["port"] = _parse_port(data["port"])
        if data.get("database"):
            updates["database_path"] = resolve_database_path(str(data["database"]))
        if data.get("api_base_url"):
            updates["api_base_url"] = str(data["api_base_url"]).strip()
        if data.get("session_secret"):
            updates["session_secret"] = str(data["session_secret"])
        if data.get("allowed_origins") is not None:
            updates["allowed_origins"] = _split_origins(data["allowed_origins"])
        return replace(self, **updates)

    def resolved_api_base_url(self) -> str:
        """Return the API URL the web interface calls.

        Without an explicit URL the API is reached on this process's own port.
        """
        if self.api_base_url:
            return self.api_base_url
        return f"http://localhost:{self.port}/api"

    def resolved_session_secret(self) -> str:
        if self.session_secret:
            return self.session_secret
        logger.warning(
            "ROSTER_SESSION_SECRET is not set; using a random secret. Browser sessions "
            "will not survive a restart."
        )
        return secrets.token_urlsafe(32)


def load_config_file(config_path: Path) -> Dict[str, object]:
    """Load settings overrides from a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")
    return raw


__all__ = ["Settings", "load_config_file", "DEFAULT_API_BASE_URL", "DEFAULT_PORT"]
