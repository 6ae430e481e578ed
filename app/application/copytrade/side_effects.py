"""
Post-commit side effects for copytrade purchases.

Builds audit entries and notifications for committed purchase writes and
hands them to the AuditLog and Notifier ports. Runs after the response
transaction has committed; a failing side effect is logged and never
affects the already-committed write.
"""

import logging
from typing import Callable

from app.application.copytrade.dtos import PurchaseOutcome
from app.domain.copytrade.entities import AuditEntry, Notification, Purchase
from app.domain.copytrade.ports import AuditLog, Notifier

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "copytrade_purchase"


class PurchaseSideEffects:
    """Emits audit records and notifications for purchase writes.

    Args:
        audit_log: Audit trail port.
        notifier: Notification port.
        audit_enabled: When False, audit entries are skipped.
    """

    def __init__(
        self, audit_log: AuditLog, notifier: Notifier, audit_enabled: bool = True
    ) -> None:
        self._audit_log = audit_log
        self._notifier = notifier
        self._audit_enabled = audit_enabled

    def purchase_created(
        self, outcome: PurchaseOutcome, actor_id: str, on_behalf: bool = False
    ) -> None:
        """Record a new purchase and notify admins about it."""
        purchase = outcome.purchase
        who = f"Admin {actor_id}" if on_behalf else f"User {actor_id}"
        self._record(
            AuditEntry(
                action="copytrade_purchase_created",
                resource_type=RESOURCE_TYPE,
                resource_id=purchase.id,
                resource_name=purchase.trade_title,
                actor_id=actor_id,
                description=(
                    f"{who} created copytrade purchase: {purchase.trade_title} - "
                    f"{purchase.initial_investment}"
                ),
                metadata={"user_id": purchase.user_id, "on_behalf": on_behalf},
            )
        )
        self._notify(
            Notification(
                action="copytrade_purchase",
                user_id=purchase.user_id,
                description=(
                    f"User {purchase.user_id} just purchased "
                    f"{purchase.trade_title} copytrading plan"
                ),
                metadata={
                    "amount": purchase.initial_investment,
                    "plan_name": purchase.trade_title,
                    "reference_id": purchase.id,
                    "admin_created": on_behalf,
                },
            )
        )
        if outcome.approved:
            self.purchase_approved(outcome, actor_id)

    def purchase_approved(self, outcome: PurchaseOutcome, actor_id: str) -> None:
        """Record an approval with its deductions and notify the owner."""
        purchase = outcome.purchase
        deductions = [
            {"entry_id": d.entry_id, "amount_deducted": str(d.amount_deducted)}
            for d in outcome.deductions or []
        ]
        self._record(
            AuditEntry(
                action="copytrade_purchase_approved",
                resource_type=RESOURCE_TYPE,
                resource_id=purchase.id,
                resource_name=purchase.trade_title,
                actor_id=actor_id,
                description=(
                    f"Admin {actor_id} approved copytrade purchase: "
                    f"{purchase.trade_title} - {purchase.initial_investment}"
                ),
                changes={
                    "before": {"trade_status": "pending"},
                    "after": {
                        "trade_status": purchase.trade_status.value,
                        "new_account_balance": str(outcome.new_account_balance),
                    },
                },
                metadata={"deductions": deductions},
            )
        )
        self._notify(
            Notification(
                action="copytrade_purchase_approved",
                user_id=purchase.user_id,
                description=f"Your {purchase.trade_title} copytrading plan is now active",
                metadata={
                    "amount": purchase.initial_investment,
                    "plan_name": purchase.trade_title,
                    "reference_id": purchase.id,
                },
            )
        )

    def purchase_updated(self, outcome: PurchaseOutcome, actor_id: str) -> None:
        """Record an admin update, and the approval if the update caused one."""
        purchase = outcome.purchase
        before = outcome.before.snapshot() if outcome.before else None
        self._record(
            AuditEntry(
                action="copytrade_purchase_updated",
                resource_type=RESOURCE_TYPE,
                resource_id=purchase.id,
                resource_name=purchase.trade_title,
                actor_id=actor_id,
                description=f"Updated copytrade purchase: {purchase.trade_title}",
                changes={"before": before, "after": purchase.snapshot()},
            )
        )
        if outcome.approved:
            self.purchase_approved(outcome, actor_id)

    def purchase_deleted(self, purchase: Purchase, actor_id: str) -> None:
        """Record the removal of a purchase with its last known state."""
        self._record(
            AuditEntry(
                action="copytrade_purchase_deleted",
                resource_type=RESOURCE_TYPE,
                resource_id=purchase.id,
                resource_name=purchase.trade_title,
                actor_id=actor_id,
                description=f"Deleted copytrade purchase: {purchase.trade_title}",
                metadata={"deleted_data": purchase.snapshot()},
            )
        )

    def _record(self, entry: AuditEntry) -> None:
        if not self._audit_enabled:
            return
        self._guard("audit", entry.action, lambda: self._audit_log.record(entry))

    def _notify(self, notification: Notification) -> None:
        self._guard(
            "notification",
            notification.action,
            lambda: self._notifier.notify(notification),
        )

    @staticmethod
    def _guard(channel: str, action: str, call: Callable[[], None]) -> None:
        try:
            call()
        except Exception:
            logger.exception("Failed to emit %s for %s", channel, action)
