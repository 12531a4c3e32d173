"""Prometheus metrics for monitoring originations, repayments and rejected operations"""

from prometheus_client import Counter, Histogram

# Origination metrics
loans_created_counter = Counter(
    "loan_engine_loans_created_total",
    "Total loans originated",
    ["currency", "terms"],
)

# Repayment metrics
repayments_counter = Counter(
    "loan_engine_repayments_total",
    "Total repayments applied",
    ["loan_status"],  # due | repaid after the repayment
)

repayment_amount_histogram = Histogram(
    "loan_engine_repayment_amount",
    "Received repayment amounts in minor units",
    buckets=[100, 500, 1_000, 5_000, 10_000, 50_000, 100_000, 1_000_000],
)

rejected_operations_counter = Counter(
    "loan_engine_rejected_operations_total",
    "Loan operations rejected by validation",
    ["operation", "reason"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_loan_created(currency_code: str, terms: int) -> None:
    loans_created_counter.labels(currency=currency_code, terms=str(terms)).inc()


def record_repayment(received_amount: int, loan_status: str) -> None:
    """Record repayment count by resulting loan status and the received amount distribution"""
    repayments_counter.labels(loan_status=loan_status).inc()
    repayment_amount_histogram.observe(received_amount)


def record_rejection(operation: str, error: Exception) -> None:
    rejected_operations_counter.labels(operation=operation, reason=type(error).__name__).inc()
