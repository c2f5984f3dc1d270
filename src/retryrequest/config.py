"""TOML and environment configuration for retry settings."""

from __future__ import annotations

import logging as py_logging
import os
import sys
from pathlib import Path
from typing import TextIO

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from retryrequest.errors import ConfigError
from retryrequest.logging import LOG_LEVELS, configure_logging
from retryrequest.policy import RetryPolicy
from retryrequest.transport import DEFAULT_TIMEOUT_SECONDS, UrllibTransport

DEFAULT_CONFIG_PATH = Path("~/.config/retryrequest/config.toml")
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_DELAY_SECONDS = 0.5
MAX_ATTEMPTS_LIMIT = 100
ENV_PREFIX = "RETRYREQUEST_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class RetrySettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1, le=MAX_ATTEMPTS_LIMIT)
    delay_seconds: float = Field(default=DEFAULT_DELAY_SECONDS, ge=0)
    retry_500_status: bool = True
    retry_invalid_status: bool = True
    transport_timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}")
        return normalized

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            delay_seconds=self.delay_seconds,
            retry_500_status=self.retry_500_status,
            retry_invalid_status=self.retry_invalid_status,
        )

    def build_transport(self) -> UrllibTransport:
        return UrllibTransport(timeout_seconds=self.transport_timeout_seconds)

    def configure_logging(
        self,
        stream: TextIO | None = None,
        log_file: str | Path | None = None,
    ) -> py_logging.Logger:
        """Route the library logger at ``log_level``."""
        return configure_logging(self.log_level, stream, log_file=log_file)


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH.expanduser()
    return Path(path).expanduser()


def _parse_bool(value: str) -> bool | None:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return None


def _env_overrides() -> dict[str, object]:
    overrides: dict[str, object] = {}

    max_attempts = os.getenv(f"{ENV_PREFIX}MAX_ATTEMPTS", "").strip()
    if max_attempts:
        try:
            overrides["max_attempts"] = int(max_attempts)
        except ValueError:
            pass

    delay_seconds = os.getenv(f"{ENV_PREFIX}DELAY_SECONDS", "").strip()
    if delay_seconds:
        try:
            overrides["delay_seconds"] = float(delay_seconds)
        except ValueError:
            pass

    for key in ("retry_500_status", "retry_invalid_status"):
        flag = _parse_bool(os.getenv(f"{ENV_PREFIX}{key.upper()}", ""))
        if flag is not None:
            overrides[key] = flag

    return overrides


def _sanitize(raw: dict[str, object]) -> RetrySettings:
    """Apply each valid field onto defaults, ignoring invalid ones."""
    cfg = RetrySettings()
    for name in RetrySettings.model_fields:
        if name not in raw:
            continue
        value = raw[name]
        if isinstance(value, bool) and name in {"max_attempts", "delay_seconds", "transport_timeout_seconds"}:
            continue
        try:
            setattr(cfg, name, value)
        except ValidationError:
            continue
    return cfg


def load_settings(path: str | Path | None = None) -> RetrySettings:
    resolved = get_config_path(path)
    raw: dict[str, object] = {}
    if resolved.exists():
        try:
            with resolved.open("rb") as handle:
                loaded = tomllib.load(handle)
        except (tomllib.TOMLDecodeError, OSError):
            loaded = {}
        section = loaded.get("retry", loaded)
        if isinstance(section, dict):
            raw.update(section)
    raw.update(_env_overrides())
    return _sanitize(raw)


def load_settings_strict(path: str | Path) -> RetrySettings:
    """Load settings from ``path``, raising ``ConfigError`` on any problem."""
    resolved = get_config_path(path)
    try:
        with resolved.open("rb") as handle:
            loaded = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Config file could not be read: {resolved}", hint=str(exc)) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Config file is not valid TOML: {resolved}", hint=str(exc)) from exc

    section = loaded.get("retry", loaded)
    if not isinstance(section, dict):
        raise ConfigError(f"Config section [retry] must be a table: {resolved}")
    try:
        return RetrySettings(**section)
    except ValidationError as exc:
        raise ConfigError(f"Config file has invalid values: {resolved}", hint=str(exc)) from exc
