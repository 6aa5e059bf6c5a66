"""Retry policy value objects."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace

from pydantic import BaseModel, ConfigDict, Field

from retry_backoff.backoff import (
    DEFAULT_JITTER,
    DEFAULT_MULTIPLIER,
    BackoffStrategy,
    backoff_ms,
    multiplicative_backoff_ms,
)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_MIN_BACKOFF_MS = 8.0
DEFAULT_MAX_BACKOFF_MS = 512.0


@dataclass(frozen=True)
class RetryPolicy:
    """Fully resolved configuration for a single retry run."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    min_backoff_ms: float = DEFAULT_MIN_BACKOFF_MS
    max_backoff_ms: float = DEFAULT_MAX_BACKOFF_MS
    strategy: BackoffStrategy = BackoffStrategy.SHIFT
    multiplier: float = DEFAULT_MULTIPLIER
    jitter: float = DEFAULT_JITTER

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.multiplier <= 1.0:
            raise ValueError("multiplier must be greater than 1")
        if not 0.0 <= self.jitter <= 1.0:
            raise ValueError("jitter must be within [0, 1]")

    def backoff_ms(self, attempt: int, *, rng: random.Random | None = None) -> float:
        """Delay before ``attempt`` according to the configured strategy."""
        if self.strategy is BackoffStrategy.MULTIPLICATIVE:
            return multiplicative_backoff_ms(
                attempt,
                self.min_backoff_ms,
                self.max_backoff_ms,
                multiplier=self.multiplier,
                jitter=self.jitter,
                rng=rng,
            )
        return backoff_ms(attempt, self.min_backoff_ms, self.max_backoff_ms, rng=rng)

    def merged(self, *overrides: RetryOptions | RetryPolicy) -> RetryPolicy:
        """Apply overrides left to right.

        A ``RetryPolicy`` replaces the accumulated policy wholesale; a
        ``RetryOptions`` only replaces the fields it sets.
        """
        policy = self
        for override in overrides:
            if isinstance(override, RetryPolicy):
                policy = override
                continue
            changes = override.model_dump(exclude_none=True)
            if changes:
                policy = replace(policy, **changes)
        return policy


class RetryOptions(BaseModel):
    """Partial override of a :class:`RetryPolicy`; ``None`` means unset."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int | None = Field(default=None, ge=1)
    min_backoff_ms: float | None = None
    max_backoff_ms: float | None = None
    strategy: BackoffStrategy | None = None
    multiplier: float | None = Field(default=None, gt=1.0)
    jitter: float | None = Field(default=None, ge=0.0, le=1.0)


__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_BACKOFF_MS",
    "DEFAULT_MIN_BACKOFF_MS",
    "RetryOptions",
    "RetryPolicy",
]
