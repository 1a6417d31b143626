"""
Utility modules for the review notifier.
"""

from review_notifier.utils.logging import (
    get_logger,
    setup_logging,
    log_webhook_event,
    log_destination_transition,
    log_api_call,
    log_error_with_context,
)
from review_notifier.utils.resilience import retry_with_backoff

__all__ = [
    "get_logger",
    "setup_logging",
    "log_webhook_event",
    "log_destination_transition",
    "log_api_call",
    "log_error_with_context",
    "retry_with_backoff",
]
