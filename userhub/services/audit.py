"""Best-effort audit trail for mutating admin actions. Never raises into the caller."""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from userhub.models.base import utcnow

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("userhub.audit")

REDACTED = "***"
SENSITIVE_FIELDS = frozenset({"password", "password_hash"})


@dataclass
class AuditEntry:
    performed_by: str
    action: str
    target_account_id: str
    changes: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=utcnow)

    def to_json(self) -> str:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return json.dumps(data, sort_keys=True, default=str)


def redact_changes(changes: dict[str, Any] | None) -> dict[str, Any] | None:
    """Copy of changes with secret values replaced."""
    if not changes:
        return None
    return {k: (REDACTED if k in SENSITIVE_FIELDS else v) for k, v in changes.items()}


class AuditRecorder:
    """
    Appends audit records to the userhub.audit logger and, when path is set,
    to a text file (one JSON object per line).

    record() is meant to run as a background task; any failure is logged
    here and swallowed so the audited mutation is never affected.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else None

    def record(
        self,
        performed_by: str,
        action: str,
        target_account_id: str,
        changes: dict[str, Any] | None = None,
    ) -> None:
        try:
            entry = AuditEntry(
                performed_by=performed_by,
                action=action,
                target_account_id=target_account_id,
                changes=redact_changes(changes),
            )
            self._write(entry)
        except Exception:
            logger.exception(
                "Audit record failed",
                extra={"action": action, "target_account_id": target_account_id},
            )

    def _write(self, entry: AuditEntry) -> None:
        audit_logger.info(
            "[AUDIT] %s -> %s -> %s",
            entry.performed_by,
            entry.action,
            entry.target_account_id,
        )
        if entry.changes:
            audit_logger.debug("Changes: %s", json.dumps(entry.changes, default=str))
        if self.path is not None:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(entry.to_json() + "\n")
