"""Retry loop driving a caller-supplied operation.

The operation receives the attempt number (starting at 1) and returns a
``(should_retry, error)`` pair::

    async def fetch(attempt: int) -> tuple[bool, Exception | None]:
        try:
            await client.get(url)
        except httpx.TransportError as exc:
            return attempt < 3, exc
        return False, None

    await do(CancellationToken.with_timeout(5), fetch)

The run finishes when the operation reports success or declines to retry, when
the attempt budget is spent, or when the cancellation token fires.
"""

from __future__ import annotations

import inspect
import logging
import random
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from opentelemetry import trace
from opentelemetry.trace import Span

from retry_backoff.cancellation import CancellationToken
from retry_backoff.defaults import resolve_policy
from retry_backoff.errors import RetryBudgetExhaustedError
from retry_backoff.policy import RetryOptions, RetryPolicy

Outcome = tuple[bool, Exception | None]
Operation = Callable[[int], Outcome]
AsyncOperation = Callable[[int], Outcome | Awaitable[Outcome]]

logger = logging.getLogger(__name__)
_NEVER = CancellationToken()


@dataclass
class RetryRun:
    """Attempt bookkeeping for one invocation of :func:`do` or :func:`do_sync`."""

    policy: RetryPolicy
    rng: random.Random | None = None
    attempt: int = 1
    invocations: int = 0
    reasons: list[str] = field(default_factory=list)

    def next_delay(self, outcome: object) -> float | None:
        """Settle one attempt.

        Returns ``None`` once the run succeeded, the delay in seconds before
        the next attempt otherwise. Raises the operation's error when it
        declines to retry, or :class:`RetryBudgetExhaustedError`.
        """
        self.invocations += 1
        should_retry, error = _unpack(outcome)
        if not should_retry or error is None:
            if error is not None:
                raise error
            return None

        self.reasons.append(repr(error))
        self.attempt += 1
        if self.attempt > self.policy.max_attempts:
            raise RetryBudgetExhaustedError(self.policy.max_attempts, last_error=error) from error

        delay_ms = self.policy.backoff_ms(self.attempt, rng=self.rng)
        logger.debug(
            "retry.attempt.retry",
            extra={
                "data": {
                    "attempt": self.attempt,
                    "max_attempts": self.policy.max_attempts,
                    "delay_ms": round(delay_ms, 3),
                    "error": repr(error),
                }
            },
        )
        return delay_ms / 1000


async def do(
    token: CancellationToken | None,
    operation: AsyncOperation,
    *options: RetryOptions | RetryPolicy,
    rng: random.Random | None = None,
) -> None:
    """Run ``operation`` until it succeeds, gives up, runs out of attempts or is cancelled."""

    if token is None:
        token = _NEVER
    run = RetryRun(policy=resolve_policy(*options), rng=rng)
    with _traced_run(run, token):
        while True:
            token.raise_if_cancelled()
            outcome = operation(run.attempt)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            delay = run.next_delay(outcome)
            if delay is None:
                return
            if await token.wait_async(delay):
                token.raise_if_cancelled()


def do_sync(
    token: CancellationToken | None,
    operation: Operation,
    *options: RetryOptions | RetryPolicy,
    rng: random.Random | None = None,
) -> None:
    """Blocking variant of :func:`do` for threaded callers."""

    if token is None:
        token = _NEVER
    run = RetryRun(policy=resolve_policy(*options), rng=rng)
    with _traced_run(run, token):
        while True:
            token.raise_if_cancelled()
            delay = run.next_delay(operation(run.attempt))
            if delay is None:
                return
            if token.wait(delay):
                token.raise_if_cancelled()


def _unpack(outcome: object) -> Outcome:
    if not isinstance(outcome, tuple) or len(outcome) != 2:
        raise TypeError(f"operation must return a (should_retry, error) pair, got {outcome!r}")
    should_retry, error = outcome
    if error is not None and not isinstance(error, Exception):
        raise TypeError(f"operation error must be an Exception or None, got {error!r}")
    return bool(should_retry), error


@contextmanager
def _traced_run(run: RetryRun, token: CancellationToken) -> Iterator[Span]:
    tracer = trace.get_tracer("retry_backoff")
    with tracer.start_as_current_span(
        "retry.do",
        attributes={
            "retry.max_attempts": run.policy.max_attempts,
            "retry.strategy": run.policy.strategy.value,
        },
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        outcome = "success"
        try:
            yield span
        except RetryBudgetExhaustedError:
            outcome = "exhausted"
            raise
        except BaseException as exc:
            outcome = "cancelled" if token.reason is exc else "error"
            raise
        finally:
            span.set_attributes({"retry.attempts": run.invocations, "retry.outcome": outcome})
            _log_outcome(run, outcome)


def _log_outcome(run: RetryRun, outcome: str) -> None:
    data = {
        "outcome": outcome,
        "attempts": run.invocations,
        "max_attempts": run.policy.max_attempts,
        "retry_reasons": tuple(run.reasons),
    }
    if outcome == "success":
        logger.info("retry.complete", extra={"data": data})
    elif outcome == "exhausted":
        logger.info("retry.exhausted", extra={"data": data})
    elif outcome == "cancelled":
        logger.info("retry.cancelled", extra={"data": data})
    else:
        logger.info("retry.failed", extra={"data": data})


__all__ = ["AsyncOperation", "Operation", "RetryRun", "do", "do_sync"]
