from retry_backoff.config.observability import ObservabilitySettings
from retry_backoff.config.retry import RetrySettings

__all__ = ["ObservabilitySettings", "RetrySettings"]
