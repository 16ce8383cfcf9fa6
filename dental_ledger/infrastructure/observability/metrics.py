"""Prometheus metrics for ledger activity, concurrency conflicts and webhook performance"""

from prometheus_client import Counter, Histogram, Gauge

# Ledger metrics
plans_generated_counter = Counter(
    "dental_plans_generated_total",
    "Installment plans generated",
    ["kind"],  # installment | renegotiation | ortho_contract
)

installments_generated_counter = Counter(
    "dental_installments_generated_total",
    "Installments written by generated plans",
)

settlement_counter = Counter(
    "dental_settlements_total",
    "Payments recorded against receivables/payables",
    ["ledger", "outcome"],  # receivable | payable ; paid | partial
)

concurrency_conflict_counter = Counter(
    "dental_concurrency_conflicts_total",
    "Conditional updates that matched no rows",
)

overdue_items_gauge = Gauge(
    "dental_overdue_items",
    "Open items past their due date at last check",
    ["ledger"],
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "audit_webhook_latency_seconds",
    "Audit webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "audit_webhook_failures_total",
    "Failed audit webhook deliveries",
)

rate_limited_counter = Counter(
    "rate_limited_requests_total",
    "Requests rejected by the rate limiter",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_plan(kind: str, installment_count: int) -> None:
    """Record a generated plan and the rows it produced"""
    plans_generated_counter.labels(kind=kind).inc()
    installments_generated_counter.inc(installment_count)


def record_settlement(ledger: str, status: str) -> None:
    outcome = "paid" if status == "paid" else "partial"
    settlement_counter.labels(ledger=ledger, outcome=outcome).inc()
