import logging

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)


class Metrics:
    def __init__(self, enabled: bool = False) -> None:
        self._configure(enabled)

    def _configure(self, enabled: bool) -> None:
        self.enabled = enabled
        self.registry = CollectorRegistry(auto_describe=True)
        if not enabled:
            self.http_requests = None
            self.http_5xx = None
            self.http_latency = None
            self.quote_estimates = None
            self.quote_requests = None
            self.sms_notifications = None
            return

        self.http_requests = Counter(
            "http_requests_total",
            "HTTP requests by method, route template, and status class.",
            ["method", "path", "status_class"],
            registry=self.registry,
        )
        self.http_5xx = Counter(
            "http_5xx_total",
            "HTTP 5xx responses by method and route template.",
            ["method", "path"],
            registry=self.registry,
        )
        self.http_latency = Histogram(
            "http_request_latency_seconds",
            "HTTP request latency in seconds.",
            ["method", "path", "status_class"],
            buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
            registry=self.registry,
        )
        self.quote_estimates = Counter(
            "quote_estimates_total",
            "Quote range calculations by outcome.",
            ["outcome"],
            registry=self.registry,
        )
        self.quote_requests = Counter(
            "quote_requests_total",
            "Quote requests stored by project type and zone.",
            ["project_type", "zone"],
            registry=self.registry,
        )
        self.sms_notifications = Counter(
            "sms_notifications_total",
            "Admin SMS notifications by status.",
            ["status"],
            registry=self.registry,
        )

    def record_http_request(self, method: str, path: str, status_code: int) -> None:
        if not self.enabled or self.http_requests is None:
            return
        status_class = f"{status_code // 100}xx" if status_code else "unknown"
        self.http_requests.labels(method=method, path=path, status_class=status_class).inc()

    def record_http_5xx(self, method: str, path: str) -> None:
        if not self.enabled or self.http_5xx is None:
            return
        self.http_5xx.labels(method=method, path=path).inc()

    def record_http_latency(self, method: str, path: str, status_code: int, duration_seconds: float) -> None:
        if not self.enabled or self.http_latency is None:
            return
        status_class = f"{status_code // 100}xx" if status_code else "unknown"
        duration_seconds = max(0.0, float(duration_seconds))
        self.http_latency.labels(method=method, path=path, status_class=status_class).observe(
            duration_seconds
        )

    def record_quote_estimate(self, valid: bool) -> None:
        if not self.enabled or self.quote_estimates is None:
            return
        self.quote_estimates.labels(outcome="valid" if valid else "invalid").inc()

    def record_quote_request(self, project_type: str, zone: str) -> None:
        if not self.enabled or self.quote_requests is None:
            return
        self.quote_requests.labels(project_type=project_type or "unknown", zone=zone or "unknown").inc()

    def record_sms_notification(self, status: str) -> None:
        if not self.enabled or self.sms_notifications is None:
            return
        self.sms_notifications.labels(status=status or "unknown").inc()

    def render(self) -> tuple[bytes, str]:
        if not self.enabled:
            return b"metrics_disabled 1\n", "text/plain; version=0.0.4"
        try:
            return generate_latest(self.registry), CONTENT_TYPE_LATEST
        except Exception:  # noqa: BLE001
            logger.exception("metrics_render_failed")
            return b"metrics_render_failed 1\n", "text/plain; version=0.0.4"


metrics = Metrics(enabled=False)


def configure_metrics(enabled: bool) -> Metrics:
    metrics._configure(enabled)
    return metrics
