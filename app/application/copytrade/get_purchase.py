"""
Use case: Fetch a single copytrade purchase.

Input: purchase id
Output: Purchase
Side effects: None.
Failure cases: PurchaseNotFoundError.
"""

from app.domain.copytrade.entities import Purchase
from app.domain.copytrade.errors import PurchaseNotFoundError
from app.domain.copytrade.ports import UnitOfWork


class GetPurchaseUseCase:
    """Reads a purchase by id."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def execute(self, purchase_id: str) -> Purchase:
        with self._uow.begin() as tx:
            purchase = tx.purchases.get(purchase_id)
        if purchase is None:
            raise PurchaseNotFoundError(purchase_id)
        return purchase
