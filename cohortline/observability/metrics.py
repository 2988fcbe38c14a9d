"""Prometheus metrics for Cohortline.

Classification outcomes, store write failures and per-consumer polling
activity.
"""

from prometheus_client import Counter, Histogram

# Classification metrics
CUSTOMERS_CLASSIFIED = Counter(
    "cohortline_customers_classified_total",
    "Customer snapshots run through the rule set",
    labelnames=["source"],
)

MEMBERSHIPS_WRITTEN = Counter(
    "cohortline_memberships_written_total",
    "Membership facts written (including idempotent re-writes)",
    labelnames=["cohort_type"],
)

MEMBERSHIP_WRITE_FAILURES = Counter(
    "cohortline_membership_write_failures_total",
    "Membership writes that failed or were rejected",
    labelnames=["cohort_type"],
)

RULE_EVALUATION_ERRORS = Counter(
    "cohortline_rule_evaluation_errors_total",
    "Rule evaluations that raised",
    labelnames=["rule"],
)

# Ingestion metrics
QUEUE_MESSAGES = Counter(
    "cohortline_queue_messages_total",
    "Queue messages handled, by outcome",
    labelnames=["outcome"],
)

STREAM_RECORDS = Counter(
    "cohortline_stream_records_total",
    "Change-stream records handled, by change kind",
    labelnames=["change_kind"],
)

SCAN_ITEMS_SKIPPED = Counter(
    "cohortline_scan_items_skipped_total",
    "Customers skipped by the scan consumer's dedup window",
)

POLL_ERRORS = Counter(
    "cohortline_poll_errors_total",
    "Poll cycles that ended in an error",
    labelnames=["consumer", "error_type"],
)

POLL_CYCLE_DURATION = Histogram(
    "cohortline_poll_cycle_duration_seconds",
    "Duration of one poll cycle",
    labelnames=["consumer"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)
