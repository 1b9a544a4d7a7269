"""Observability module for NEARLINK."""

from .logging import clear_request_id, configure_logging, get_logger, set_request_id
from .metrics import (
    KEY_STORE_OPERATIONS,
    NODE_REQUEST_DURATION,
    NODE_REQUESTS,
    TRANSACTIONS_SUBMITTED,
)

__all__ = [
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "set_request_id",
    # Metrics
    "KEY_STORE_OPERATIONS",
    "NODE_REQUEST_DURATION",
    "NODE_REQUESTS",
    "TRANSACTIONS_SUBMITTED",
]
