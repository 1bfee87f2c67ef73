"""Configuration loader for Holocron.

Loads from holocron.toml with sensible defaults when file is absent.
Configuration is loaded once at startup and passed via dependency injection.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from holocron.exceptions import ConfigError

DEFAULT_BASE_URL = "https://swapi.info/api"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "Holocron/0.1 (+https://swapi.info)"
BASE_URL_ENV = "HOLOCRON_API_BASE_URL"


@dataclass(frozen=True)
class APIConfig:
    """Where and how the films API is reached."""

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class Config:
    """Top-level Holocron configuration."""

    api: APIConfig = field(default_factory=APIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def with_base_url(self, base_url: str) -> Config:
        return replace(self, api=replace(self.api, base_url=base_url.rstrip("/")))


def _parse_timeout(value: object) -> float:
    try:
        timeout = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT_SECONDS
    if timeout <= 0:
        return DEFAULT_TIMEOUT_SECONDS
    return timeout


def _apply_env(config: Config) -> Config:
    override = os.environ.get(BASE_URL_ENV, "").strip()
    if override:
        return config.with_base_url(override)
    return config


def load_config(path: Path | None = None) -> Config:
    """Load configuration from a TOML file.

    If path is None, searches for holocron.toml in current directory then
    ~/.holocron/. Returns default config if no file is found. The
    HOLOCRON_API_BASE_URL environment variable overrides the API base URL.
    """
    if path is None:
        candidates = [
            Path.cwd() / "holocron.toml",
            Path.home() / ".holocron" / "holocron.toml",
        ]
        for candidate in candidates:
            if candidate.exists():
                path = candidate
                break

    if path is None or not path.exists():
        return _apply_env(Config())

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    api_data = raw.get("api", {})
    if not isinstance(api_data, dict):
        raise ConfigError(f"[api] must be a table in {path}")
    api = APIConfig(
        base_url=str(api_data.get("base_url", DEFAULT_BASE_URL)).rstrip("/"),
        timeout_seconds=_parse_timeout(
            api_data.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
        ),
        user_agent=str(api_data.get("user_agent", "")).strip() or DEFAULT_USER_AGENT,
    )

    log_data = raw.get("logging", {})
    if not isinstance(log_data, dict):
        raise ConfigError(f"[logging] must be a table in {path}")
    logging_cfg = LoggingConfig(
        level=str(log_data.get("level", "INFO")).upper(),
    )

    return _apply_env(Config(api=api, logging=logging_cfg))
