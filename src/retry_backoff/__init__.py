"""Retry a caller-supplied operation with jittered exponential backoff."""

from retry_backoff.backoff import (
    BACKOFF_DISABLED,
    BackoffStrategy,
    backoff_ms,
    multiplicative_backoff_ms,
)
from retry_backoff.cancellation import CancellationToken
from retry_backoff.defaults import default_policy, reset_default_policy, set_default_policy
from retry_backoff.errors import (
    CancellationError,
    DeadlineExceededError,
    OperationCancelledError,
    RetryBudgetExhaustedError,
    RetryError,
)
from retry_backoff.policy import RetryOptions, RetryPolicy
from retry_backoff.retry import do, do_sync

__all__ = [
    "BACKOFF_DISABLED",
    "BackoffStrategy",
    "CancellationError",
    "CancellationToken",
    "DeadlineExceededError",
    "OperationCancelledError",
    "RetryBudgetExhaustedError",
    "RetryError",
    "RetryOptions",
    "RetryPolicy",
    "backoff_ms",
    "default_policy",
    "do",
    "do_sync",
    "multiplicative_backoff_ms",
    "reset_default_policy",
    "set_default_policy",
]
