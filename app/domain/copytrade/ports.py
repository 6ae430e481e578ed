"""
Port interfaces (ABCs) for the copytrade bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Any, Optional

from app.domain.copytrade.entities import (
    Account,
    ApprovalMetadata,
    AuditEntry,
    CopytradeOption,
    NewPurchase,
    Notification,
    PortfolioEntry,
    Purchase,
    PurchaseStatus,
)


class UserRepository(ABC):
    """Port for resolving platform accounts."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[Account]:
        """Return the account for user_id, or None if it does not exist."""
        raise NotImplementedError


class OptionRepository(ABC):
    """Port for resolving copytrade options."""

    @abstractmethod
    def get(self, option_id: str) -> Optional[CopytradeOption]:
        """Return the option for option_id, or None if it does not exist."""
        raise NotImplementedError


class PortfolioLedger(ABC):
    """Port for the two funding pools of a user.

    The account balance gates purchase creation. Portfolio entries are
    consumed when a purchase is approved.
    """

    @abstractmethod
    def list_entries(self, user_id: str) -> list[PortfolioEntry]:
        """Return the user's portfolio entries in insertion order.

        Implementations must lock the returned rows for the rest of the
        enclosing transaction.
        """
        raise NotImplementedError

    @abstractmethod
    def deduct_from_entry(self, entry: PortfolioEntry, amount: Decimal) -> PortfolioEntry:
        """Subtract amount from an entry as read by list_entries.

        Returns the updated entry.

        Raises:
            ConcurrentModificationError: If the entry changed since it was read
                or does not hold amount.
        """
        raise NotImplementedError

    @abstractmethod
    def get_account_balance(self, user_id: str) -> Decimal:
        """Return the user's current account balance."""
        raise NotImplementedError

    @abstractmethod
    def debit_account_balance(self, user_id: str, amount: Decimal) -> Decimal:
        """Subtract amount from the account balance and return the new balance."""
        raise NotImplementedError


class PurchaseRepository(ABC):
    """Port for persisting copytrade purchases."""

    @abstractmethod
    def add(self, new_purchase: NewPurchase) -> Purchase:
        """Insert a pending purchase and return the stored record."""
        raise NotImplementedError

    @abstractmethod
    def get(self, purchase_id: str, for_update: bool = False) -> Optional[Purchase]:
        """Return a purchase by id, optionally locking its row."""
        raise NotImplementedError

    @abstractmethod
    def set_status(
        self,
        purchase_id: str,
        status: PurchaseStatus,
        metadata: Optional[ApprovalMetadata] = None,
    ) -> Purchase:
        """Change the status of a purchase, recording approval metadata if given."""
        raise NotImplementedError

    @abstractmethod
    def update_fields(self, purchase_id: str, changes: dict[str, Any]) -> Purchase:
        """Write non-status field changes and return the updated purchase."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, purchase_id: str) -> None:
        """Remove a purchase record. Ledger effects are left untouched."""
        raise NotImplementedError


class Transaction(ABC):
    """Repositories bound to one open database transaction."""

    users: UserRepository
    options: OptionRepository
    ledger: PortfolioLedger
    purchases: PurchaseRepository


class UnitOfWork(ABC):
    """Capability to open a transaction.

    The transaction commits when the block exits normally and rolls back
    when it exits with an exception.
    """

    @abstractmethod
    def begin(self) -> AbstractContextManager[Transaction]:
        raise NotImplementedError


class Notifier(ABC):
    """Port for user/admin notifications. Called after commit."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        raise NotImplementedError


class AuditLog(ABC):
    """Port for the audit trail. Called after commit."""

    @abstractmethod
    def record(self, entry: AuditEntry) -> None:
        raise NotImplementedError
