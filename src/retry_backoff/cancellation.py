"""Caller-owned cancellation tokens with optional deadlines."""

from __future__ import annotations

import asyncio
import threading
import time

from retry_backoff.errors import DeadlineExceededError, OperationCancelledError


class CancellationToken:
    """Cooperative cancellation signal shared between a caller and retry runs.

    The token may be cancelled from any thread. Waiters blocked in
    :meth:`wait` or :meth:`wait_async` wake up as soon as it fires. A deadline,
    when set, is checked lazily against ``time.monotonic()``.
    """

    def __init__(self, *, deadline: float | None = None) -> None:
        self._deadline = deadline
        self._reason: BaseException | None = None
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future[None]]] = []

    @classmethod
    def with_timeout(cls, seconds: float) -> CancellationToken:
        """Token that cancels itself with :class:`DeadlineExceededError` after ``seconds``."""
        if seconds < 0:
            raise ValueError("timeout must be non-negative")
        return cls(deadline=time.monotonic() + seconds)

    # ------------------------------------------------------------------
    # public API

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._expire_if_due()

    @property
    def reason(self) -> BaseException | None:
        self._expire_if_due()
        return self._reason

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or ``None`` without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self, reason: BaseException | None = None) -> bool:
        """Fire the token. Returns ``False`` when it had already fired."""

        if reason is not None and not isinstance(reason, BaseException):
            raise TypeError("reason must be an exception instance")
        with self._lock:
            if self._reason is not None:
                return False
            self._reason = reason if reason is not None else OperationCancelledError("operation cancelled")
            self._event.set()
            waiters, self._waiters = self._waiters, []
        for loop, waiter in waiters:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_release, waiter)
        return True

    def raise_if_cancelled(self) -> None:
        reason = self.reason
        if reason is not None:
            raise reason.with_traceback(None)

    def wait(self, timeout: float | None = None) -> bool:
        """Block for up to ``timeout`` seconds; return ``True`` if the token fired."""

        if self._expire_if_due():
            return True
        budget, until_deadline = self._bounded(timeout)
        if self._event.wait(budget):
            return True
        if until_deadline:
            self._expire()
            return True
        return self._expire_if_due()

    async def wait_async(self, timeout: float | None = None) -> bool:
        """Async counterpart of :meth:`wait`."""

        if self._expire_if_due():
            return True
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()
        entry = (loop, waiter)
        with self._lock:
            if self._reason is not None:
                return True
            self._waiters.append(entry)
        budget, until_deadline = self._bounded(timeout)
        try:
            await asyncio.wait_for(waiter, budget)
        except asyncio.TimeoutError:
            if until_deadline:
                self._expire()
                return True
            return self._expire_if_due()
        finally:
            with self._lock:
                if entry in self._waiters:
                    self._waiters.remove(entry)
        return True

    # ------------------------------------------------------------------
    # helpers

    def _bounded(self, timeout: float | None) -> tuple[float | None, bool]:
        """Effective wait, and whether the deadline rather than ``timeout`` bounds it."""
        remaining = self.remaining()
        if remaining is None:
            return timeout, False
        if timeout is None or remaining <= timeout:
            return remaining, True
        return timeout, False

    def _expire(self) -> None:
        self.cancel(DeadlineExceededError("deadline exceeded"))

    def _expire_if_due(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._expire()
            return True
        return False

    def __repr__(self) -> str:
        state = "cancelled" if self._event.is_set() else "active"
        return f"CancellationToken(state={state}, deadline={self._deadline!r})"


def _release(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)


__all__ = ["CancellationToken"]
