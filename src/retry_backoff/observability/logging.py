"""Log rendering for retry events.

Retry events carry their context in ``extra={"data": {...}}``. The formatter
appends that payload to text lines, or renders the whole record as one JSON
object for log collectors that parse structured lines.
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import asdict, is_dataclass
from enum import Enum
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace

from retry_backoff.config.observability import ObservabilitySettings


def _running_under_collector() -> bool:
    # Cloud Run and Kubernetes ingest JSON lines as structured payloads.
    return bool(os.getenv("K_SERVICE") or os.getenv("KUBERNETES_SERVICE_HOST"))


def _json_default(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, BaseException):
        return repr(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    return str(value)


def _encode(value: object) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=_json_default)


class ExtrasFormatter(logging.Formatter):
    """Render the ``data`` payload of retry events, as text or JSON."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        *,
        emit_json: bool | None = None,
    ) -> None:
        super().__init__(fmt, datefmt)
        if emit_json is None:
            emit_json = ObservabilitySettings().log_json or _running_under_collector()
        self.emit_json = emit_json

    def format(self, record: logging.LogRecord) -> str:
        data = record.__dict__.get("data")
        if self.emit_json:
            return _encode(self._payload(record, data))

        formatted = super().format(record)
        if data:
            return f"{formatted} | data={_encode(data)}"
        return formatted

    def _payload(self, record: logging.LogRecord, data: object) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": record.getMessage(),
            "severity": record.levelname,
            "logger": record.name,
            "timestamp": (
                f"{time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created))}"
                f".{int(record.msecs):03d}Z"
            ),
        }
        if data:
            payload["data"] = data
        for key in ("trace_id", "span_id"):
            value = record.__dict__.get(key)
            if value:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return payload


class TraceContextFilter(logging.Filter):
    """Stamp records with the active OpenTelemetry trace and span ids."""

    def filter(self, record: logging.LogRecord) -> bool:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record.__dict__.update(
                trace_id=f"{span_context.trace_id:032x}",
                span_id=f"{span_context.span_id:016x}",
            )
        return True


def build_log_config(settings: ObservabilitySettings | None = None) -> dict[str, Any]:
    """Return a dictConfig-compatible config for the ``retry_backoff`` loggers.

    Settings are read once here; an invalid ``LOG_JSON`` or ``RETRY_LOG_LEVEL``
    fails now rather than on each formatted record.
    """

    settings = settings or ObservabilitySettings()
    level = settings.log_level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "retry": {
                "()": ExtrasFormatter,
                "fmt": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
                "emit_json": settings.log_json or _running_under_collector(),
            }
        },
        "filters": {
            "trace_context": {"()": TraceContextFilter},
        },
        "handlers": {
            "retry_console": {
                "class": "logging.StreamHandler",
                "formatter": "retry",
                "stream": "ext://sys.stdout",
                "filters": ["trace_context"],
            }
        },
        "loggers": {
            "retry_backoff": {
                "level": level,
                "handlers": ["retry_console"],
                "propagate": False,
            },
        },
    }


def configure_logging(settings: ObservabilitySettings | None = None) -> None:
    """Route ``retry_backoff`` events to stdout using :func:`build_log_config`."""
    dictConfig(build_log_config(settings))


__all__ = ["ExtrasFormatter", "TraceContextFilter", "build_log_config", "configure_logging"]
