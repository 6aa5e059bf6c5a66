"""Process-wide default retry policy.

The default is loaded lazily from :class:`RetrySettings` on first use. Call
:func:`set_default_policy` during application start-up to replace it; changing
it while retry runs are in flight only affects runs started afterwards.
"""

from __future__ import annotations

import logging
import threading

from retry_backoff.config.retry import RetrySettings
from retry_backoff.policy import RetryOptions, RetryPolicy

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_default: RetryPolicy | None = None


def default_policy() -> RetryPolicy:
    """Return the process-wide default policy, loading it from the environment once."""

    global _default
    with _lock:
        if _default is None:
            _default = RetrySettings().retry_policy
            logger.debug(
                "retry.defaults.loaded",
                extra={"data": {"policy": _default}},
            )
        return _default


def set_default_policy(policy: RetryPolicy) -> None:
    """Replace the process-wide default policy."""

    global _default
    if not isinstance(policy, RetryPolicy):
        raise TypeError("policy must be a RetryPolicy")
    with _lock:
        _default = policy


def reset_default_policy() -> None:
    """Forget the current default so the next lookup reloads the settings."""

    global _default
    with _lock:
        _default = None


def resolve_policy(*overrides: RetryOptions | RetryPolicy) -> RetryPolicy:
    return default_policy().merged(*overrides)


__all__ = ["default_policy", "reset_default_policy", "resolve_policy", "set_default_policy"]
