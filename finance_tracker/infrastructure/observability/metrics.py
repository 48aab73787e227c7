"""Prometheus metrics for sync outcomes and transaction API performance"""

from prometheus_client import Counter, Histogram, Gauge

# Store operation metrics
sync_operation_counter = Counter(
    "finance_sync_operations_total",
    "Store operations by outcome",
    ["operation", "outcome"],  # fetch|create|update|delete, ok|invalid|not_found|rejected|stale
)

# Transaction API metrics
transport_latency_histogram = Histogram(
    "finance_transport_latency_seconds",
    "Transaction API response time",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

transport_failure_counter = Counter(
    "finance_transport_failures_total",
    "Failed transaction API calls",
    ["operation"],
)

# Snapshot size
snapshot_transactions_gauge = Gauge(
    "finance_snapshot_transactions",
    "Transactions held in the current snapshot",
    ["type"],  # income | expense
)


def record_operation(operation: str, outcome: str) -> None:
    sync_operation_counter.labels(operation=operation, outcome=outcome).inc()


def record_snapshot(income_count: int, expense_count: int) -> None:
    """Track snapshot size after a successful fetch"""
    snapshot_transactions_gauge.labels(type="income").set(income_count)
    snapshot_transactions_gauge.labels(type="expense").set(expense_count)
