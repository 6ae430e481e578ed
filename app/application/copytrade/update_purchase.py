"""
Use case: Admin updates a copytrade purchase.

Input: UpdatePurchaseCommand
Output: PurchaseOutcome (with deductions when the update approved the purchase)
Side effects: None here. Audit and notification are scheduled by the caller.
Failure cases: PurchaseNotFoundError, InvalidStatusTransitionError,
ImmutableFieldError, BelowMinimumInvestmentError, and every approval failure.

Status is guarded before anything reaches the workflow engine: an active
purchase can never move to another status. Field changes are written
first, then the status change; an approval therefore deducts the
investment as it stands after this update.
"""

import logging

from app.application.copytrade.dtos import PurchaseOutcome, UpdatePurchaseCommand
from app.domain.copytrade.entities import PurchaseStatus
from app.domain.copytrade.errors import (
    BelowMinimumInvestmentError,
    InvalidStatusTransitionError,
    PurchaseNotFoundError,
)
from app.domain.copytrade.ports import UnitOfWork
from app.domain.copytrade.status_policy import (
    ensure_fields_mutable,
    ensure_status_transition,
    with_profit_loss,
)
from app.domain.copytrade.workflow import PurchaseWorkflowEngine

logger = logging.getLogger(__name__)


def _parse_status(value: str, current: PurchaseStatus) -> PurchaseStatus:
    try:
        return PurchaseStatus(value)
    except ValueError:
        raise InvalidStatusTransitionError(current=current.value, requested=value) from None


class UpdatePurchaseUseCase:
    """Applies an admin update, approving the purchase when requested."""

    def __init__(self, uow: UnitOfWork, engine: PurchaseWorkflowEngine) -> None:
        self._uow = uow
        self._engine = engine

    def execute(self, command: UpdatePurchaseCommand) -> PurchaseOutcome:
        """Run the update use case."""
        logger.info(
            "Updating copytrade purchase %s by %s: status=%s fields=%s",
            command.purchase_id,
            command.admin_id,
            command.trade_status,
            sorted(command.changes),
        )

        with self._uow.begin() as tx:
            before = tx.purchases.get(command.purchase_id, for_update=True)
            if before is None:
                raise PurchaseNotFoundError(command.purchase_id)

            requested = None
            if command.trade_status is not None:
                requested = _parse_status(command.trade_status, before.trade_status)
                ensure_status_transition(before.trade_status, requested)

            purchase = before
            if command.changes:
                ensure_fields_mutable(before, command.changes)
                new_investment = command.changes.get("initial_investment")
                if new_investment is not None and new_investment < before.trade_min:
                    raise BelowMinimumInvestmentError(
                        minimum=before.trade_min, provided=new_investment
                    )
                changes = with_profit_loss(before, command.changes)
                purchase = tx.purchases.update_fields(before.id, changes)

            if requested is None or requested is before.trade_status:
                return PurchaseOutcome(purchase=purchase, before=before)

            if requested is PurchaseStatus.ACTIVE:
                result = self._engine.approve_purchase(tx, purchase, command.admin_id)
                return PurchaseOutcome(
                    purchase=result.purchase,
                    deductions=result.deductions,
                    new_account_balance=result.new_account_balance,
                    before=before,
                )

            purchase = tx.purchases.set_status(purchase.id, requested)
            logger.info(
                "Copytrade purchase %s moved %s -> %s",
                purchase.id,
                before.trade_status.value,
                requested.value,
            )
            return PurchaseOutcome(purchase=purchase, before=before)
