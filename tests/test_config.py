from __future__ import annotations

from pathlib import Path

import pytest

from retryrequest.config import RetrySettings, load_settings, load_settings_strict
from retryrequest.errors import ConfigError
from retryrequest.policy import RetryPolicy
from retryrequest.transport import UrllibTransport

_ENV_KEYS = (
    "RETRYREQUEST_MAX_ATTEMPTS",
    "RETRYREQUEST_DELAY_SECONDS",
    "RETRYREQUEST_RETRY_500_STATUS",
    "RETRYREQUEST_RETRY_INVALID_STATUS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_load_defaults_when_config_missing(tmp_path: Path) -> None:
    cfg = load_settings(tmp_path / "config.toml")

    assert cfg.max_attempts == 3
    assert cfg.delay_seconds == 0.5
    assert cfg.retry_500_status is True
    assert cfg.retry_invalid_status is True
    assert cfg.transport_timeout_seconds == 30.0
    assert cfg.log_level == "INFO"


def test_retry_table_is_loaded(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        "\n".join(
            [
                "[retry]",
                "max_attempts = 5",
                "delay_seconds = 0.25",
                "retry_500_status = false",
                "transport_timeout_seconds = 2.5",
                'log_level = "debug"',
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    cfg = load_settings(path)

    assert cfg.max_attempts == 5
    assert cfg.delay_seconds == 0.25
    assert cfg.retry_500_status is False
    assert cfg.retry_invalid_status is True
    assert cfg.transport_timeout_seconds == 2.5
    assert cfg.log_level == "DEBUG"


def test_top_level_keys_are_accepted(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("max_attempts = 2\n", encoding="utf-8")

    assert load_settings(path).max_attempts == 2


def test_corrupt_toml_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("not = [valid", encoding="utf-8")

    cfg = load_settings(path)

    assert cfg == RetrySettings()


def test_invalid_fields_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        "\n".join(
            [
                "[retry]",
                "max_attempts = 0",
                "delay_seconds = -1",
                'retry_invalid_status = "sometimes"',
                'log_level = "loud"',
                "transport_timeout_seconds = true",
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    assert load_settings(path) == RetrySettings()


def test_env_overrides_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[retry]\nmax_attempts = 5\nretry_500_status = true\n", encoding="utf-8")
    monkeypatch.setenv("RETRYREQUEST_MAX_ATTEMPTS", "7")
    monkeypatch.setenv("RETRYREQUEST_DELAY_SECONDS", "0.01")
    monkeypatch.setenv("RETRYREQUEST_RETRY_500_STATUS", "off")

    cfg = load_settings(path)

    assert cfg.max_attempts == 7
    assert cfg.delay_seconds == 0.01
    assert cfg.retry_500_status is False


def test_unparseable_env_values_are_ignored(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRYREQUEST_MAX_ATTEMPTS", "many")
    monkeypatch.setenv("RETRYREQUEST_RETRY_INVALID_STATUS", "maybe")

    cfg = load_settings(tmp_path / "missing.toml")

    assert cfg.max_attempts == 3
    assert cfg.retry_invalid_status is True


def test_settings_build_policy_and_transport() -> None:
    cfg = RetrySettings(max_attempts=4, delay_seconds=0.1, retry_invalid_status=False, transport_timeout_seconds=3)

    assert cfg.to_policy() == RetryPolicy(max_attempts=4, delay_seconds=0.1, retry_invalid_status=False)
    transport = cfg.build_transport()
    assert isinstance(transport, UrllibTransport)
    assert transport.timeout_seconds == 3


def test_strict_loader_raises_on_invalid_values(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[retry]\nmax_attempts = 0\n", encoding="utf-8")

    with pytest.raises(ConfigError) as exc:
        load_settings_strict(path)

    assert "invalid values" in exc.value.message


def test_strict_loader_raises_on_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings_strict(tmp_path / "missing.toml")


def test_strict_loader_raises_on_corrupt_toml(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("not = [valid", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings_strict(path)


def test_strict_loader_reads_valid_file(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[retry]\nmax_attempts = 9\n", encoding="utf-8")

    assert load_settings_strict(path).max_attempts == 9
