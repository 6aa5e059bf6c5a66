from retry_backoff.observability.logging import (
    ExtrasFormatter,
    TraceContextFilter,
    build_log_config,
    configure_logging,
)

__all__ = ["ExtrasFormatter", "TraceContextFilter", "build_log_config", "configure_logging"]
