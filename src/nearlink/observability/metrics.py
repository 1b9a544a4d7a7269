"""Prometheus metrics for NEARLINK.

Metrics:
- nearlink_node_requests_total: Counter of node requests by method and outcome
- nearlink_node_request_duration_seconds: Histogram of node round-trip time
- nearlink_transactions_submitted_total: Counter of signed submissions
- nearlink_key_store_operations_total: Counter of key store reads and writes
"""

from prometheus_client import Counter, Histogram

# Counters
NODE_REQUESTS = Counter(
    "nearlink_node_requests_total",
    "Total number of requests sent to the node",
    ["method", "outcome"],
)

TRANSACTIONS_SUBMITTED = Counter(
    "nearlink_transactions_submitted_total",
    "Total signed transaction submissions",
    ["method", "outcome"],
)

KEY_STORE_OPERATIONS = Counter(
    "nearlink_key_store_operations_total",
    "Total key store operations",
    ["backend", "operation", "outcome"],
)

# Histograms
NODE_REQUEST_DURATION = Histogram(
    "nearlink_node_request_duration_seconds",
    "Node request round-trip duration",
    ["method"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)
