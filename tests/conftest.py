from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from retry_backoff.defaults import reset_default_policy

_RETRY_ENV = (
    "RETRY_MAX_ATTEMPTS",
    "RETRY_MIN_BACKOFF_MS",
    "RETRY_MAX_BACKOFF_MS",
    "RETRY_BACKOFF_STRATEGY",
    "RETRY_BACKOFF_MULTIPLIER",
    "RETRY_BACKOFF_JITTER",
    "LOG_JSON",
    "RETRY_LOG_LEVEL",
    "K_SERVICE",
    "KUBERNETES_SERVICE_HOST",
)


@pytest.fixture(autouse=True)
def reset_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    # Keep a stray .env or exported variables from leaking into defaults.
    monkeypatch.chdir(tmp_path)
    for name in _RETRY_ENV:
        monkeypatch.delenv(name, raising=False)
    reset_default_policy()
    yield
    reset_default_policy()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
