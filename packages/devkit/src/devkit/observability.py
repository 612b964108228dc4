from __future__ import annotations

import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
PROBE_PATHS = ("/healthz", "/readyz", "/metrics")
# Loggers that log every outbound request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")

_tracer_provider: TracerProvider | None = None
_probe_filter_installed = False


def _strip_path(path: str) -> str:
    path = path.partition("?")[0]
    return path.rstrip("/") or "/"


class ProbeAccessLogFilter(logging.Filter):
    """Drops successful probe hits from uvicorn's access log.

    uvicorn formats access lines from ``(client, method, path, http_version,
    status)``; records in any other shape pass through untouched.
    """

    def __init__(self, ignored_paths: tuple[str, ...] = PROBE_PATHS) -> None:
        super().__init__()
        self._ignored = frozenset(_strip_path(path) for path in ignored_paths)

    def filter(self, record: logging.LogRecord) -> bool:
        args = record.args
        if not isinstance(args, tuple) or len(args) != 5:
            return True
        _client, _method, path, _version, status = args
        if not isinstance(path, str):
            return True
        try:
            succeeded = 200 <= int(status) < 300
        except (TypeError, ValueError):
            return True
        return not (succeeded and _strip_path(path) in self._ignored)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_otel(service_name: str, span_processor: SpanProcessor | None = None) -> TracerProvider:
    """Install the process tracer provider once and return it."""
    global _tracer_provider
    if _tracer_provider is None:
        _tracer_provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
        trace.set_tracer_provider(_tracer_provider)
    if span_processor is not None:
        _tracer_provider.add_span_processor(span_processor)
    return _tracer_provider


def configure_probe_access_log_filter(ignored_paths: tuple[str, ...] = PROBE_PATHS) -> None:
    global _probe_filter_installed
    if _probe_filter_installed:
        return
    logging.getLogger("uvicorn.access").addFilter(ProbeAccessLogFilter(ignored_paths))
    _probe_filter_installed = True
