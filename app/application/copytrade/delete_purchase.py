"""
Use case: Admin deletes a copytrade purchase.

Input: purchase id
Output: the deleted Purchase as it was before removal
Side effects: None here. The audit entry is scheduled by the caller.
Failure cases: PurchaseNotFoundError.

Deletion removes the record only. Portfolio entries and the account
balance are not refunded, even for an active purchase.
"""

import logging

from app.domain.copytrade.entities import Purchase
from app.domain.copytrade.errors import PurchaseNotFoundError
from app.domain.copytrade.ports import UnitOfWork

logger = logging.getLogger(__name__)


class DeletePurchaseUseCase:
    """Removes a purchase record."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def execute(self, purchase_id: str) -> Purchase:
        with self._uow.begin() as tx:
            purchase = tx.purchases.get(purchase_id, for_update=True)
            if purchase is None:
                raise PurchaseNotFoundError(purchase_id)
            tx.purchases.delete(purchase_id)

        if purchase.is_active:
            logger.warning(
                "Deleted active purchase %s; %s stays deducted from user %s",
                purchase.id,
                purchase.initial_investment,
                purchase.user_id,
            )
        else:
            logger.info("Deleted copytrade purchase %s", purchase.id)
        return purchase
