"""Environment-driven defaults for the retry loop."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from retry_backoff.backoff import DEFAULT_JITTER, DEFAULT_MULTIPLIER, BackoffStrategy
from retry_backoff.policy import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_BACKOFF_MS,
    DEFAULT_MIN_BACKOFF_MS,
    RetryPolicy,
)


class RetrySettings(BaseSettings):
    """Process-wide retry/backoff defaults; negative bounds disable backoff."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    max_attempts: int = Field(
        default=DEFAULT_MAX_ATTEMPTS,
        alias="RETRY_MAX_ATTEMPTS",
        ge=1,
    )
    min_backoff_ms: float = Field(
        default=DEFAULT_MIN_BACKOFF_MS,
        alias="RETRY_MIN_BACKOFF_MS",
    )
    max_backoff_ms: float = Field(
        default=DEFAULT_MAX_BACKOFF_MS,
        alias="RETRY_MAX_BACKOFF_MS",
    )
    strategy: BackoffStrategy = Field(
        default=BackoffStrategy.SHIFT,
        alias="RETRY_BACKOFF_STRATEGY",
    )
    multiplier: float = Field(
        default=DEFAULT_MULTIPLIER,
        alias="RETRY_BACKOFF_MULTIPLIER",
        gt=1.0,
    )
    jitter: float = Field(
        default=DEFAULT_JITTER,
        alias="RETRY_BACKOFF_JITTER",
        ge=0.0,
        le=1.0,
    )

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            min_backoff_ms=self.min_backoff_ms,
            max_backoff_ms=self.max_backoff_ms,
            strategy=self.strategy,
            multiplier=self.multiplier,
            jitter=self.jitter,
        )


__all__ = ["RetrySettings"]
