"""
Shared pytest fixtures.

Every test that touches the database gets a fresh in-memory SQLite
engine with the copytrade schema, plus a small helper to seed users,
options and portfolio entries and to read balances and audit rows back.
"""

from decimal import Decimal
from typing import Iterator

import pytest
from sqlalchemy import func, insert, select
from sqlalchemy.engine import Engine

from app.infrastructure.copytrade.tables import (
    audit_logs,
    copytrade_options,
    copytrade_purchases,
    portfolio_entries,
    users,
)
from app.infrastructure.copytrade.unit_of_work import SqlAlchemyUnitOfWork
from app.infrastructure.database import build_engine, create_schema


class Seeder:
    """Writes fixture rows directly through SQLAlchemy Core."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def user(
        self,
        user_id: str = "user-1",
        balance: str = "1000",
        role: str = "user",
    ) -> str:
        with self.engine.begin() as conn:
            conn.execute(
                insert(users).values(
                    id=user_id,
                    email=f"{user_id}@example.com",
                    role=role,
                    account_balance=Decimal(balance),
                )
            )
        return user_id

    def option(
        self,
        option_id: str = "opt-1",
        trade_min: str = "100",
        trade_max: str = "10000",
        duration: int = 30,
    ) -> str:
        with self.engine.begin() as conn:
            conn.execute(
                insert(copytrade_options).values(
                    id=option_id,
                    trade_title="Alpha Growth",
                    trade_min=Decimal(trade_min),
                    trade_max=Decimal(trade_max),
                    trade_risk="medium",
                    trade_roi_min=Decimal("5"),
                    trade_roi_max=Decimal("15"),
                    trade_duration=duration,
                )
            )
        return option_id

    def entries(self, user_id: str, *values: str) -> list[int]:
        ids = []
        with self.engine.begin() as conn:
            for i, value in enumerate(values):
                result = conn.execute(
                    insert(portfolio_entries).values(
                        user_id=user_id,
                        token_name=f"TOKEN{i}",
                        value=Decimal(value),
                    )
                )
                ids.append(result.inserted_primary_key[0])
        return ids

    def balance(self, user_id: str) -> Decimal:
        with self.engine.connect() as conn:
            return conn.execute(
                select(users.c.account_balance).where(users.c.id == user_id)
            ).scalar_one()

    def purchase_count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(
                select(func.count()).select_from(copytrade_purchases)
            ).scalar_one()

    def entry_values(self, user_id: str) -> list[Decimal]:
        with self.engine.connect() as conn:
            return list(
                conn.execute(
                    select(portfolio_entries.c.value)
                    .where(portfolio_entries.c.user_id == user_id)
                    .order_by(portfolio_entries.c.id)
                ).scalars()
            )

    def audit_rows(self, resource_id: str) -> list[dict]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(audit_logs)
                .where(audit_logs.c.resource_id == resource_id)
                .order_by(audit_logs.c.created_at)
            ).mappings().all()
        return [dict(r) for r in rows]


@pytest.fixture
def engine() -> Iterator[Engine]:
    eng = build_engine("sqlite://")
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def uow(engine: Engine) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(engine)


@pytest.fixture
def seed(engine: Engine) -> Seeder:
    return Seeder(engine)
