"""Logging, retry and audit helpers."""
from .audit_log import ChangeRecord, ChangeTracker, get_recent_changes, setup_audit_logging
from .connection import RETRYABLE_EXCEPTIONS, retrying, with_retry
from .logging_config import perf_logger, setup_logging, timed, timed_section

__all__ = [
    "ChangeRecord",
    "ChangeTracker",
    "get_recent_changes",
    "setup_audit_logging",
    "RETRYABLE_EXCEPTIONS",
    "retrying",
    "with_retry",
    "perf_logger",
    "setup_logging",
    "timed",
    "timed_section",
]
