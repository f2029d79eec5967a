"""Prometheus metrics for monitoring analysis outcomes and payment discrepancies"""

from typing import Iterable

from prometheus_client import Counter, Histogram

from payment_analyzer.domain.models import DayCalculation, ValidationResult

# Analysis metrics
analysis_counter = Counter(
    "payment_analysis_total",
    "Total payment analyses processed",
    ["outcome"],  # saved | rejected | preview
)

validation_issue_counter = Counter(
    "payment_validation_issues_total",
    "Validation findings raised on analyses",
    ["severity"],  # warning | error
)

day_status_counter = Counter(
    "payment_day_status_total",
    "Calculated days by payment status",
    ["status"],  # balanced | overpaid | underpaid
)

difference_histogram = Histogram(
    "payment_analysis_difference_abs",
    "Absolute paid-vs-expected difference per analysis (GBP)",
    buckets=[0, 5, 10, 25, 50, 100, 250, 500, 1000],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_analysis(outcome: str, days: Iterable[DayCalculation], validation: ValidationResult) -> None:
    """Record analysis metrics for tracking under/over-payment trends"""
    analysis_counter.labels(outcome=outcome).inc()

    if validation.warnings:
        validation_issue_counter.labels(severity="warning").inc(len(validation.warnings))
    if validation.errors:
        validation_issue_counter.labels(severity="error").inc(len(validation.errors))

    difference = 0.0
    for day in days:
        day_status_counter.labels(status=day.status).inc()
        difference += float(day.difference)

    difference_histogram.observe(abs(difference))
