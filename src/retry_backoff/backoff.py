"""Backoff interval calculators.

Two policies are provided:

* :func:`backoff_ms` doubles ``min_backoff_ms`` per attempt, caps it at
  ``max_backoff_ms`` and draws a full-jitter delay from ``[0, interval)``.
  This is the default policy of the retry loop.
* :func:`multiplicative_backoff_ms` grows ``min_backoff_ms`` by a fixed
  multiplier and applies symmetric jitter around the capped value.

Durations are milliseconds. A negative bound disables backoff entirely.
"""

from __future__ import annotations

import math
import random
from enum import Enum

BACKOFF_DISABLED: float = -1.0
DEFAULT_MULTIPLIER: float = 1.6
DEFAULT_JITTER: float = 0.2


class BackoffStrategy(str, Enum):
    """Selects which calculator a retry policy uses."""

    SHIFT = "shift"
    MULTIPLICATIVE = "multiplicative"


def _disabled(min_backoff_ms: float, max_backoff_ms: float) -> bool:
    return min_backoff_ms < 0 or max_backoff_ms < 0


def backoff_ms(
    attempt: int,
    min_backoff_ms: float,
    max_backoff_ms: float,
    *,
    rng: random.Random | None = None,
) -> float:
    """Shift-based exponential backoff with full jitter.

    The interval is ``min_backoff_ms * 2**attempt`` clamped to
    ``[min_backoff_ms, max_backoff_ms]``; the returned delay is drawn uniformly
    from ``[0, interval)``. Zero intervals and disabled bounds return ``0``.
    """

    if _disabled(min_backoff_ms, max_backoff_ms):
        return 0.0

    attempt = max(0, attempt)
    floor = min(min_backoff_ms, max_backoff_ms)
    if floor == 0:
        return 0.0

    # Past log2(max / floor) doublings the interval is capped anyway.
    interval = max_backoff_ms
    if attempt <= math.log2(max_backoff_ms / floor):
        try:
            interval = math.ldexp(floor, attempt)
        except OverflowError:
            interval = max_backoff_ms
    if interval < floor:
        interval = floor
    elif interval > max_backoff_ms:
        interval = max_backoff_ms

    draw = (rng or random).random()  # noqa: S311 - non-crypto backoff jitter
    return interval * draw


def multiplicative_backoff_ms(
    attempt: int,
    min_backoff_ms: float,
    max_backoff_ms: float,
    *,
    multiplier: float = DEFAULT_MULTIPLIER,
    jitter: float = DEFAULT_JITTER,
    rng: random.Random | None = None,
) -> float:
    """gRPC-style backoff: grow by ``multiplier``, then jitter by ``±jitter``.

    The first wait (``attempt <= 0``) is ``min_backoff_ms`` exactly. The result
    is clamped to ``[0, max_backoff_ms]``.
    """

    if multiplier <= 1.0:
        raise ValueError("multiplier must be greater than 1")
    if not 0.0 <= jitter <= 1.0:
        raise ValueError("jitter must be within [0, 1]")
    if _disabled(min_backoff_ms, max_backoff_ms):
        return 0.0

    backoff = min(min_backoff_ms, max_backoff_ms)
    if attempt <= 0:
        return float(backoff)

    # Terminates once the cap is reached, so huge attempt values stay cheap.
    remaining = attempt
    while remaining > 0 and 0 < backoff < max_backoff_ms:
        backoff *= multiplier
        remaining -= 1
    backoff = min(backoff, max_backoff_ms)

    backoff *= 1.0 + jitter * (rng or random).uniform(-1.0, 1.0)  # noqa: S311 - non-crypto backoff jitter
    return float(min(max(0.0, backoff), max_backoff_ms))


__all__ = [
    "BACKOFF_DISABLED",
    "DEFAULT_JITTER",
    "DEFAULT_MULTIPLIER",
    "BackoffStrategy",
    "backoff_ms",
    "multiplicative_backoff_ms",
]
