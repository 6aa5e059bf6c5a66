from __future__ import annotations

import asyncio
import threading
import time

import pytest

from retry_backoff.cancellation import CancellationToken
from retry_backoff.errors import CancellationError, DeadlineExceededError, OperationCancelledError


def test_new_token_is_active() -> None:
    token = CancellationToken()

    assert token.cancelled is False
    assert token.reason is None
    assert token.remaining() is None
    token.raise_if_cancelled()


def test_cancel_sets_default_reason() -> None:
    token = CancellationToken()

    assert token.cancel() is True
    assert token.cancelled is True
    assert isinstance(token.reason, OperationCancelledError)
    assert isinstance(token.reason, CancellationError)


def test_cancel_is_idempotent_and_keeps_first_reason() -> None:
    token = CancellationToken()
    first = RuntimeError("shutdown")

    assert token.cancel(first) is True
    assert token.cancel(ValueError("later")) is False
    assert token.reason is first


def test_raise_if_cancelled_raises_reason_unchanged() -> None:
    token = CancellationToken()
    reason = KeyError("gone")
    token.cancel(reason)

    with pytest.raises(KeyError) as excinfo:
        token.raise_if_cancelled()
    assert excinfo.value is reason


def test_cancel_rejects_non_exception_reason() -> None:
    with pytest.raises(TypeError):
        CancellationToken().cancel("nope")  # type: ignore[arg-type]


def test_deadline_expires_lazily() -> None:
    token = CancellationToken.with_timeout(0)

    assert token.cancelled is True
    assert isinstance(token.reason, DeadlineExceededError)
    assert isinstance(token.reason, TimeoutError)
    assert token.remaining() == 0


def test_negative_timeout_rejected() -> None:
    with pytest.raises(ValueError):
        CancellationToken.with_timeout(-1)


def test_wait_times_out_without_cancellation() -> None:
    token = CancellationToken()

    start = time.monotonic()
    assert token.wait(0.02) is False
    assert time.monotonic() - start >= 0.015


def test_wait_wakes_when_cancelled_from_another_thread() -> None:
    token = CancellationToken()
    timer = threading.Timer(0.02, token.cancel)
    timer.start()

    start = time.monotonic()
    try:
        assert token.wait(5) is True
    finally:
        timer.cancel()
    assert time.monotonic() - start < 1


def test_wait_is_bounded_by_deadline() -> None:
    token = CancellationToken.with_timeout(0.02)

    start = time.monotonic()
    assert token.wait(5) is True
    assert time.monotonic() - start < 1
    assert isinstance(token.reason, DeadlineExceededError)


@pytest.mark.anyio("asyncio")
async def test_wait_async_times_out_without_cancellation() -> None:
    token = CancellationToken()

    assert await token.wait_async(0.01) is False


@pytest.mark.anyio("asyncio")
async def test_wait_async_wakes_on_cancel() -> None:
    token = CancellationToken()
    loop = asyncio.get_running_loop()
    loop.call_later(0.02, token.cancel)

    start = time.monotonic()
    assert await token.wait_async(5) is True
    assert time.monotonic() - start < 1


@pytest.mark.anyio("asyncio")
async def test_wait_async_wakes_on_cancel_from_thread() -> None:
    token = CancellationToken()
    timer = threading.Timer(0.02, token.cancel)
    timer.start()

    start = time.monotonic()
    try:
        assert await token.wait_async(5) is True
    finally:
        timer.cancel()
    assert time.monotonic() - start < 1


@pytest.mark.anyio("asyncio")
async def test_wait_async_returns_immediately_when_already_cancelled() -> None:
    token = CancellationToken()
    token.cancel()

    assert await token.wait_async(5) is True


@pytest.mark.anyio("asyncio")
async def test_wait_async_is_bounded_by_deadline() -> None:
    token = CancellationToken.with_timeout(0.02)

    start = time.monotonic()
    assert await token.wait_async(5) is True
    assert time.monotonic() - start < 1
