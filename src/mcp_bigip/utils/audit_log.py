"""Audit logging for lifecycle changes.

Every create/update/delete pushed to an appliance is written as one JSON line
to a dedicated audit log, together with the state before and after the call.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

audit_logger = logging.getLogger("ltmcraft.audit")


def default_audit_file() -> str:
    return os.path.join(os.path.expanduser("~/.ltmcraft"), "audit.log")


def setup_audit_logging(log_dir: Optional[str] = None) -> None:
    """Configure audit logging to file.

    Args:
        log_dir: Directory for audit logs. Defaults to ~/.ltmcraft/
    """
    if log_dir is None:
        log_dir = os.path.expanduser("~/.ltmcraft")

    Path(log_dir).mkdir(parents=True, exist_ok=True)

    audit_logger.setLevel(logging.INFO)
    audit_logger.handlers.clear()

    handler = RotatingFileHandler(
        os.path.join(log_dir, "audit.log"),
        maxBytes=10 * 1024 * 1024,
        backupCount=10,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)
    audit_logger.propagate = False


@dataclass
class ChangeRecord:
    """Record of one lifecycle change."""
    timestamp: str
    appliance: str
    operation: str  # create, update, delete, import
    resource_type: str
    resource_id: str
    success: bool
    before_state: Optional[dict] = None
    after_state: Optional[dict] = None
    error: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=None, default=str)

    @classmethod
    def from_json(cls, json_str: str) -> "ChangeRecord":
        return cls(**json.loads(json_str))


class ChangeTracker:
    """Log lifecycle changes for one appliance."""

    def __init__(self, appliance: str):
        self.appliance = appliance

    def log_change(
        self,
        operation: str,
        resource_type: str,
        resource_id: str,
        success: bool,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None,
        error: Optional[str] = None,
    ) -> ChangeRecord:
        record = ChangeRecord(
            timestamp=datetime.now(timezone.utc).isoformat(),
            appliance=self.appliance,
            operation=operation,
            resource_type=resource_type,
            resource_id=resource_id,
            success=success,
            before_state=before_state,
            after_state=after_state,
            error=error,
        )
        audit_logger.info(record.to_json())
        return record


def get_recent_changes(
    log_file: Optional[str] = None,
    appliance: Optional[str] = None,
    resource_type: Optional[str] = None,
    limit: int = 100,
) -> list[ChangeRecord]:
    """Read recent changes from the audit log, most recent first."""
    if log_file is None:
        log_file = default_audit_file()

    if not os.path.exists(log_file):
        return []

    found = []
    with open(log_file, "r") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = ChangeRecord.from_json(line)
            except (json.JSONDecodeError, TypeError):
                continue  # Skip malformed lines

            if appliance and record.appliance != appliance:
                continue
            if resource_type and record.resource_type != resource_type:
                continue
            found.append(record)

    return list(reversed(found[-limit:]))
