"""
Adapter: Audit log repository.

Implements the AuditLog port against the audit_logs table.

Each entry gets a deterministic id derived from its action, resource and
content, so recording the same committed change twice stores it once.
"""

import hashlib
import json
import logging
from datetime import datetime, timezone
from uuid import NAMESPACE_URL, uuid5

from sqlalchemy import insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from app.domain.copytrade.entities import AuditEntry
from app.domain.copytrade.ports import AuditLog
from app.infrastructure.copytrade.tables import audit_logs

logger = logging.getLogger(__name__)

AUDIT_NAMESPACE = uuid5(NAMESPACE_URL, "copytrade-backoffice/audit")


def audit_entry_id(entry: AuditEntry) -> str:
    """Return the idempotency id for an audit entry."""
    fingerprint = hashlib.sha256(
        json.dumps(
            {"changes": entry.changes, "metadata": entry.metadata},
            sort_keys=True,
            default=str,
        ).encode("utf-8")
    ).hexdigest()
    return str(uuid5(AUDIT_NAMESPACE, f"{entry.action}:{entry.resource_id}:{fingerprint}"))


def _jsonable(value):
    if value is None:
        return None
    return json.loads(json.dumps(value, default=str))


class AuditLogRepositoryAdapter(AuditLog):
    """Persists audit entries, each in its own short transaction."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def record(self, entry: AuditEntry) -> None:
        """Persist an audit entry, skipping it if already recorded."""
        entry_id = audit_entry_id(entry)
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    insert(audit_logs).values(
                        id=entry_id,
                        action=entry.action,
                        resource_type=entry.resource_type,
                        resource_id=entry.resource_id,
                        resource_name=entry.resource_name,
                        actor_id=entry.actor_id,
                        description=entry.description,
                        changes=_jsonable(entry.changes),
                        details=_jsonable(entry.metadata),
                        created_at=datetime.now(timezone.utc),
                    )
                )
        except IntegrityError:
            logger.debug("Duplicate audit entry skipped: %s", entry_id)
            return

        logger.info("Audit log created: %s - %s", entry.action, entry.description)
