from __future__ import annotations

from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Protocol

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

_trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="")


def set_trace_id(trace_id: str) -> None:
    _trace_id_ctx.set(trace_id)


def get_trace_id() -> str:
    return _trace_id_ctx.get()


@dataclass(frozen=True)
class RequestMetric:
    method: str
    route: str
    status_code: int
    duration_ms: float
    trace_id: str


class RequestMetricCollector(Protocol):
    def observe(self, metric: RequestMetric) -> None: ...


class InMemoryMetricsCollector(RequestMetricCollector):
    def __init__(self) -> None:
        self._metrics: list[RequestMetric] = []

    def observe(self, metric: RequestMetric) -> None:
        self._metrics.append(metric)

    def snapshot(self) -> list[dict]:
        return [asdict(item) for item in self._metrics]


class PrometheusMetricsCollector(RequestMetricCollector):
    """Request counters plus directory-level gauges on a private registry."""

    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._request_counter = Counter(
            "directory_http_requests_total",
            "Total directory API HTTP requests",
            labelnames=("method", "route", "status_code"),
            registry=self._registry,
        )
        self._latency_histogram = Histogram(
            "directory_http_request_duration_ms",
            "Directory API HTTP request latency in milliseconds",
            labelnames=("method", "route"),
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 3000),
            registry=self._registry,
        )
        self._change_counter = Counter(
            "directory_realtime_changes_total",
            "Change notifications applied to the directory store",
            labelnames=("table", "event_type"),
            registry=self._registry,
        )
        self._records_gauge = Gauge(
            "directory_records",
            "Records currently held in the directory store",
            labelnames=("table",),
            registry=self._registry,
        )

    def observe(self, metric: RequestMetric) -> None:
        status = str(metric.status_code)
        self._request_counter.labels(metric.method, metric.route, status).inc()
        self._latency_histogram.labels(metric.method, metric.route).observe(metric.duration_ms)

    def observe_change(self, table: str, event_type: str) -> None:
        self._change_counter.labels(table, event_type).inc()

    def set_record_count(self, table: str, count: int) -> None:
        self._records_gauge.labels(table).set(count)

    def render(self) -> str:
        return generate_latest(self._registry).decode("utf-8")


class CompositeMetricsCollector(RequestMetricCollector):
    def __init__(self, collectors: list[RequestMetricCollector]) -> None:
        self._collectors = collectors

    def observe(self, metric: RequestMetric) -> None:
        for collector in self._collectors:
            collector.observe(metric)
