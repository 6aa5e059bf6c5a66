from __future__ import annotations

from pathlib import Path

import pydantic
import pytest

from retry_backoff.backoff import BackoffStrategy
from retry_backoff.config.observability import ObservabilitySettings
from retry_backoff.config.retry import RetrySettings
from retry_backoff.defaults import default_policy, reset_default_policy, resolve_policy, set_default_policy
from retry_backoff.policy import RetryOptions, RetryPolicy


def test_settings_defaults_without_environment() -> None:
    assert RetrySettings().retry_policy == RetryPolicy()


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "4")
    monkeypatch.setenv("RETRY_MIN_BACKOFF_MS", "2")
    monkeypatch.setenv("RETRY_MAX_BACKOFF_MS", "40")
    monkeypatch.setenv("RETRY_BACKOFF_STRATEGY", "multiplicative")
    monkeypatch.setenv("RETRY_BACKOFF_MULTIPLIER", "2.5")
    monkeypatch.setenv("RETRY_BACKOFF_JITTER", "0")

    policy = RetrySettings().retry_policy

    assert policy == RetryPolicy(
        max_attempts=4,
        min_backoff_ms=2,
        max_backoff_ms=40,
        strategy=BackoffStrategy.MULTIPLICATIVE,
        multiplier=2.5,
        jitter=0.0,
    )


def test_settings_accept_disabled_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRY_MIN_BACKOFF_MS", "-1")
    monkeypatch.setenv("RETRY_MAX_BACKOFF_MS", "-1")

    assert RetrySettings().retry_policy.backoff_ms(3) == 0


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("RETRY_MAX_ATTEMPTS", "0"),
        ("RETRY_BACKOFF_MULTIPLIER", "1"),
        ("RETRY_BACKOFF_JITTER", "3"),
        ("RETRY_BACKOFF_STRATEGY", "linear"),
    ],
)
def test_settings_reject_invalid_environment(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(pydantic.ValidationError):
        RetrySettings()


def test_settings_read_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("RETRY_MAX_ATTEMPTS=6\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert RetrySettings().max_attempts == 6


def test_default_policy_is_loaded_once(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "3")
    first = default_policy()

    monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "7")
    assert default_policy() is first
    assert first.max_attempts == 3

    reset_default_policy()
    assert default_policy().max_attempts == 7


def test_set_default_policy_feeds_resolution() -> None:
    set_default_policy(RetryPolicy(max_attempts=2, min_backoff_ms=1, max_backoff_ms=1))

    resolved = resolve_policy(RetryOptions(max_backoff_ms=5))

    assert resolved.max_attempts == 2
    assert resolved.min_backoff_ms == 1
    assert resolved.max_backoff_ms == 5


def test_set_default_policy_rejects_options() -> None:
    with pytest.raises(TypeError):
        set_default_policy(RetryOptions(max_attempts=2))  # type: ignore[arg-type]


def test_observability_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    assert ObservabilitySettings().log_json is False

    monkeypatch.setenv("LOG_JSON", "true")
    assert ObservabilitySettings().log_json is True
