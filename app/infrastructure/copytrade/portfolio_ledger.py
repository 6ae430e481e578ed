"""
Adapter: Portfolio ledger.

Implements the PortfolioLedger port against portfolio_entries and
users.account_balance.

Rows are read FOR UPDATE so that concurrent approvals for the same user
serialize on PostgreSQL. New entry values are computed in Decimal and
written only if the row still carries the version that was read, so an
entry changed by another transaction is detected instead of overwritten.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.engine import Connection

from app.domain.copytrade.entities import PortfolioEntry
from app.domain.copytrade.errors import ConcurrentModificationError, UserNotFoundError
from app.domain.copytrade.ports import PortfolioLedger
from app.infrastructure.copytrade.tables import portfolio_entries, users

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _row_to_entry(row) -> PortfolioEntry:
    return PortfolioEntry(
        id=row["id"],
        user_id=row["user_id"],
        token_name=row["token_name"],
        value=row["value"],
        version=row["version"],
    )


class PortfolioLedgerAdapter(PortfolioLedger):
    """SQL implementation of the two funding pools."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def list_entries(self, user_id: str) -> list[PortfolioEntry]:
        rows = self._conn.execute(
            select(portfolio_entries)
            .where(portfolio_entries.c.user_id == user_id)
            .order_by(portfolio_entries.c.id)
            .with_for_update()
        ).mappings().all()
        return [_row_to_entry(r) for r in rows]

    def deduct_from_entry(self, entry: PortfolioEntry, amount: Decimal) -> PortfolioEntry:
        new_value = entry.value - amount
        if new_value < ZERO:
            logger.warning(
                "Deduction exceeds entry value: entry=%s value=%s amount=%s",
                entry.id,
                entry.value,
                amount,
            )
            raise ConcurrentModificationError("portfolio_entry", str(entry.id))

        # Arithmetic stays in Decimal; SQLite would do it in float
        result = self._conn.execute(
            update(portfolio_entries)
            .where(
                portfolio_entries.c.id == entry.id,
                portfolio_entries.c.version == entry.version,
            )
            .values(
                value=new_value,
                version=entry.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
        )
        if result.rowcount != 1:
            logger.warning(
                "Guarded deduction missed: entry=%s version=%s amount=%s",
                entry.id,
                entry.version,
                amount,
            )
            raise ConcurrentModificationError("portfolio_entry", str(entry.id))

        logger.debug("Deducted %s from portfolio entry %s", amount, entry.id)
        return replace(entry, value=new_value, version=entry.version + 1)

    def get_account_balance(self, user_id: str) -> Decimal:
        balance = self._conn.execute(
            select(users.c.account_balance)
            .where(users.c.id == user_id)
            .with_for_update()
        ).scalar_one_or_none()
        if balance is None:
            raise UserNotFoundError(user_id)
        return balance

    def debit_account_balance(self, user_id: str, amount: Decimal) -> Decimal:
        previous = self.get_account_balance(user_id)
        # Pools are checked independently, so the balance may already be lower
        new_balance = max(previous - amount, ZERO)
        self._conn.execute(
            update(users)
            .where(users.c.id == user_id)
            .values(account_balance=new_balance)
        )
        logger.info(
            "Account balance debited: user=%s previous=%s new=%s",
            user_id,
            previous,
            new_balance,
        )
        return new_balance
