"""
Adapter: Copytrade purchase persistence.

Implements the PurchaseRepository port against copytrade_purchases.
Every mutation is a single explicit UPDATE/INSERT/DELETE on the
caller's connection; nothing is committed here.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection

from app.domain.copytrade.entities import (
    ApprovalMetadata,
    NewPurchase,
    Purchase,
    PurchaseStatus,
)
from app.domain.copytrade.errors import (
    ConcurrentModificationError,
    PurchaseNotFoundError,
)
from app.domain.copytrade.ports import PurchaseRepository
from app.infrastructure.copytrade.tables import copytrade_purchases

logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = frozenset(
    {
        "initial_investment",
        "trade_current_value",
        "trade_profit_loss",
        "trade_win_rate",
        "trade_approval_date",
        "trade_end_date",
    }
)


def _row_to_purchase(row) -> Purchase:
    return Purchase(
        id=row["id"],
        user_id=row["user_id"],
        option_id=row["option_id"],
        trade_title=row["trade_title"],
        trade_min=row["trade_min"],
        trade_max=row["trade_max"],
        trade_risk=row["trade_risk"],
        trade_roi_min=row["trade_roi_min"],
        trade_roi_max=row["trade_roi_max"],
        trade_duration=row["trade_duration"],
        initial_investment=row["initial_investment"],
        trade_current_value=row["trade_current_value"],
        trade_profit_loss=row["trade_profit_loss"],
        trade_win_rate=row["trade_win_rate"],
        trade_status=PurchaseStatus(row["trade_status"]),
        approved_by=row["approved_by"],
        trade_approval_date=row["trade_approval_date"],
        trade_end_date=row["trade_end_date"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PurchaseRepositoryAdapter(PurchaseRepository):
    """SQL implementation of the purchase repository."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def add(self, new_purchase: NewPurchase) -> Purchase:
        option = new_purchase.option
        now = datetime.now(timezone.utc)
        purchase_id = str(uuid4())
        self._conn.execute(
            insert(copytrade_purchases).values(
                id=purchase_id,
                user_id=new_purchase.user_id,
                option_id=option.id,
                trade_title=option.trade_title,
                trade_min=option.trade_min,
                trade_max=option.trade_max,
                trade_risk=option.trade_risk,
                trade_roi_min=option.trade_roi_min,
                trade_roi_max=option.trade_roi_max,
                trade_duration=option.trade_duration,
                initial_investment=new_purchase.initial_investment,
                trade_current_value=new_purchase.trade_current_value,
                trade_profit_loss=new_purchase.trade_profit_loss,
                trade_win_rate=new_purchase.trade_win_rate,
                trade_status=PurchaseStatus.PENDING.value,
                trade_approval_date=new_purchase.trade_approval_date,
                trade_end_date=new_purchase.trade_end_date,
                created_at=now,
                updated_at=now,
            )
        )
        return self._require(purchase_id)

    def get(self, purchase_id: str, for_update: bool = False) -> Optional[Purchase]:
        stmt = select(copytrade_purchases).where(copytrade_purchases.c.id == purchase_id)
        if for_update:
            stmt = stmt.with_for_update()
        row = self._conn.execute(stmt).mappings().first()
        return _row_to_purchase(row) if row is not None else None

    def set_status(
        self,
        purchase_id: str,
        status: PurchaseStatus,
        metadata: Optional[ApprovalMetadata] = None,
    ) -> Purchase:
        values: dict[str, Any] = {
            "trade_status": status.value,
            "updated_at": datetime.now(timezone.utc),
        }
        if metadata is not None:
            values["approved_by"] = metadata.approved_by
            values["trade_approval_date"] = metadata.approved_at
            if metadata.trade_end_date is not None:
                values["trade_end_date"] = metadata.trade_end_date

        # Active rows are never rewritten, whatever the caller checked
        result = self._conn.execute(
            update(copytrade_purchases)
            .where(
                copytrade_purchases.c.id == purchase_id,
                copytrade_purchases.c.trade_status != PurchaseStatus.ACTIVE.value,
            )
            .values(**values)
        )
        if result.rowcount != 1:
            self._require(purchase_id)
            raise ConcurrentModificationError("copytrade_purchase", purchase_id)

        logger.debug("Purchase %s status set to %s", purchase_id, status.value)
        return self._require(purchase_id)

    def update_fields(self, purchase_id: str, changes: dict[str, Any]) -> Purchase:
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Not updatable purchase fields: {sorted(unknown)}")
        if not changes:
            return self._require(purchase_id)

        result = self._conn.execute(
            update(copytrade_purchases)
            .where(copytrade_purchases.c.id == purchase_id)
            .values(**changes, updated_at=datetime.now(timezone.utc))
        )
        if result.rowcount != 1:
            raise PurchaseNotFoundError(purchase_id)
        return self._require(purchase_id)

    def delete(self, purchase_id: str) -> None:
        result = self._conn.execute(
            delete(copytrade_purchases).where(copytrade_purchases.c.id == purchase_id)
        )
        if result.rowcount != 1:
            raise PurchaseNotFoundError(purchase_id)

    def _require(self, purchase_id: str) -> Purchase:
        purchase = self.get(purchase_id)
        if purchase is None:
            raise PurchaseNotFoundError(purchase_id)
        return purchase
