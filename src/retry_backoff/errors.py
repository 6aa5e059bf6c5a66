"""Exceptions raised by the retry loop and cancellation tokens."""

from __future__ import annotations


class RetryError(Exception):
    """Base class for failures originating in the retry machinery itself."""


class RetryBudgetExhaustedError(RetryError):
    """Raised when an operation keeps asking for retries past ``max_attempts``."""

    def __init__(self, attempts: int, *, last_error: BaseException | None = None) -> None:
        super().__init__(f"exceeded retry limit after {attempts} attempts")
        self.attempts = attempts
        self.last_error = last_error


class CancellationError(RetryError):
    """Base class for the default reasons a cancellation token carries."""


class OperationCancelledError(CancellationError):
    """Raised when a token is cancelled without an explicit reason."""


class DeadlineExceededError(CancellationError, TimeoutError):
    """Raised when a token's deadline passes."""


__all__ = [
    "CancellationError",
    "DeadlineExceededError",
    "OperationCancelledError",
    "RetryBudgetExhaustedError",
    "RetryError",
]
