"""
Adapters: User and copytrade option lookups.

Implement the UserRepository and OptionRepository ports against the
users and copytrade_options tables, on the caller's connection.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from app.domain.copytrade.entities import Account, CopytradeOption, UserRole
from app.domain.copytrade.ports import OptionRepository, UserRepository
from app.infrastructure.copytrade.tables import copytrade_options, users


class UserRepositoryAdapter(UserRepository):
    """Reads platform accounts inside an open transaction."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, user_id: str) -> Optional[Account]:
        row = self._conn.execute(
            select(users).where(users.c.id == user_id)
        ).mappings().first()
        if row is None:
            return None
        return Account(
            id=row["id"],
            email=row["email"],
            role=UserRole(row["role"]),
            account_balance=row["account_balance"],
        )


class OptionRepositoryAdapter(OptionRepository):
    """Reads copytrade options inside an open transaction."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, option_id: str) -> Optional[CopytradeOption]:
        row = self._conn.execute(
            select(copytrade_options).where(copytrade_options.c.id == option_id)
        ).mappings().first()
        if row is None:
            return None
        return CopytradeOption(
            id=row["id"],
            trade_title=row["trade_title"],
            trade_min=row["trade_min"],
            trade_max=row["trade_max"],
            trade_risk=row["trade_risk"],
            trade_roi_min=row["trade_roi_min"],
            trade_roi_max=row["trade_roi_max"],
            trade_duration=row["trade_duration"],
        )
