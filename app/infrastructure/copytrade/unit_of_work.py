"""
Adapter: SQLAlchemy unit of work.

Opens one database transaction and exposes the copytrade repositories
bound to its connection. Commits on normal exit, rolls back on any
exception, and always returns the connection to the pool.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.engine import Connection, Engine

from app.domain.copytrade.ports import Transaction, UnitOfWork
from app.infrastructure.copytrade.account_repository import (
    OptionRepositoryAdapter,
    UserRepositoryAdapter,
)
from app.infrastructure.copytrade.portfolio_ledger import PortfolioLedgerAdapter
from app.infrastructure.copytrade.purchase_repository import PurchaseRepositoryAdapter

logger = logging.getLogger(__name__)


class SqlAlchemyTransaction(Transaction):
    """Repositories sharing one open connection."""

    def __init__(self, conn: Connection) -> None:
        self.connection = conn
        self.users = UserRepositoryAdapter(conn)
        self.options = OptionRepositoryAdapter(conn)
        self.ledger = PortfolioLedgerAdapter(conn)
        self.purchases = PurchaseRepositoryAdapter(conn)


class SqlAlchemyUnitOfWork(UnitOfWork):
    """Unit of work backed by Engine.begin()."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @contextmanager
    def begin(self) -> Iterator[Transaction]:
        try:
            with self._engine.begin() as conn:
                yield SqlAlchemyTransaction(conn)
        except Exception as exc:
            logger.info("Transaction rolled back: %s", type(exc).__name__)
            raise
