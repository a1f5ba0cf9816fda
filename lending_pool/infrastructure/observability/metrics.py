"""Prometheus metrics for monitoring pool operations, payouts, and webhook performance"""

from prometheus_client import Counter, Histogram

# Operation metrics
operation_counter = Counter(
    "lending_pool_operation_total",
    "Pool operations attempted",
    ["operation", "outcome"],  # outcome: ok | <error code>
)

amount_counter = Counter(
    "lending_pool_amount_total",
    "Base units moved by successful operations",
    ["operation"],
)

# Payout metrics
transfer_failure_counter = Counter(
    "payout_failures_total",
    "Payout transfers that did not settle",
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Event webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_operation(operation: str, outcome: str, amount: int = 0) -> None:
    """Record the outcome of one engine operation"""
    operation_counter.labels(operation=operation, outcome=outcome).inc()
    if outcome == "ok" and amount > 0:
        amount_counter.labels(operation=operation).inc(amount)
