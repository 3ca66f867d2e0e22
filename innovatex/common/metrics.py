"""Prometheus metric definitions for the payment proxy."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)
payment_order_requests_total = Counter(
    "payment_order_requests_total",
    "Create-order requests forwarded to the gateway",
    ["service"],
)
payment_order_success_total = Counter(
    "payment_order_success_total",
    "Orders the gateway accepted",
    ["service"],
)
payment_order_failure_total = Counter(
    "payment_order_failure_total",
    "Create-order requests that failed",
    ["service", "reason"],
)
gateway_latency_seconds = Histogram(
    "gateway_latency_seconds",
    "Latency of the outbound create-order call",
    ["service"],
)
rate_limited_total = Counter("rate_limited_total", "Requests rejected by the rate limiter", ["service"])
idempotent_replays_total = Counter(
    "idempotent_replays_total",
    "Create-order responses served from the idempotency cache",
    ["service"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
