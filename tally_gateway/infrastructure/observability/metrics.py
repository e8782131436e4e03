"""Prometheus metrics for ROI outcomes, cadence data quality, and request latency"""

from typing import Optional
from prometheus_client import Counter, Histogram

# ROI metrics
roi_analysis_counter = Counter(
    "tally_roi_analysis_total",
    "Subscription ROI analyses computed",
    ["roi_status"],  # pending | positive | negative | neutral
)

break_even_bucket_counter = Counter(
    "tally_break_even_bucket",
    "Break-even durations by bucket",
    ["bucket"],  # none, 0-3m, 3-12m, 12m+
)

# Data quality
unknown_cadence_counter = Counter(
    "tally_unknown_cadence_total",
    "Subscriptions whose recurrence fell back to monthly",
)

duplicate_group_counter = Counter(
    "tally_duplicate_groups_total",
    "Duplicate-service groups reported",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_roi_analysis(roi_status: str, break_even_months: Optional[float]) -> None:
    """Record ROI outcome and break-even distribution"""
    roi_analysis_counter.labels(roi_status=roi_status).inc()

    if break_even_months is None:
        bucket = "none"
    elif break_even_months <= 3:
        bucket = "0-3m"
    elif break_even_months <= 12:
        bucket = "3-12m"
    else:
        bucket = "12m+"

    break_even_bucket_counter.labels(bucket=bucket).inc()
