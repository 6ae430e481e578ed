"""
Domain entities for the copytrade bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class PurchaseStatus(Enum):
    """Lifecycle state of a copytrade purchase."""

    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"


class UserRole(Enum):
    """Role of a platform account."""

    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Account:
    """A platform user as seen by the purchase workflow.

    The account balance is the funding pool checked when a purchase is
    created. It is independent of the portfolio entries consumed on approval.
    """

    id: str
    email: str
    role: UserRole
    account_balance: Decimal

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


@dataclass(frozen=True)
class CopytradeOption:
    """A copytrade offering users can invest in."""

    id: str
    trade_title: str
    trade_min: Decimal
    trade_max: Decimal
    trade_risk: str
    trade_roi_min: Decimal
    trade_roi_max: Decimal
    trade_duration: int  # days

    @property
    def minimum_investment(self) -> Decimal:
        return self.trade_min


@dataclass(frozen=True)
class PortfolioEntry:
    """One balance-bearing record in a user's approval-time funding pool."""

    id: int
    user_id: str
    token_name: str
    value: Decimal
    version: int = 0


@dataclass(frozen=True)
class Purchase:
    """A user's stake in a copytrade option.

    Option terms (min/max, risk, ROI range, duration) are snapshotted at
    creation so later edits to the option do not rewrite existing stakes.
    """

    id: str
    user_id: str
    option_id: str
    trade_title: str
    trade_min: Decimal
    trade_max: Decimal
    trade_risk: str
    trade_roi_min: Decimal
    trade_roi_max: Decimal
    trade_duration: int
    initial_investment: Decimal
    trade_current_value: Decimal
    trade_profit_loss: Decimal
    trade_status: PurchaseStatus
    trade_win_rate: Optional[Decimal] = None
    approved_by: Optional[str] = None
    trade_approval_date: Optional[datetime] = None
    trade_end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.trade_status is PurchaseStatus.PENDING

    @property
    def is_active(self) -> bool:
        return self.trade_status is PurchaseStatus.ACTIVE

    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-friendly view used for audit before/after records."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "option_id": self.option_id,
            "trade_title": self.trade_title,
            "initial_investment": str(self.initial_investment),
            "trade_current_value": str(self.trade_current_value),
            "trade_profit_loss": str(self.trade_profit_loss),
            "trade_win_rate": (
                str(self.trade_win_rate) if self.trade_win_rate is not None else None
            ),
            "trade_status": self.trade_status.value,
            "approved_by": self.approved_by,
            "trade_approval_date": (
                self.trade_approval_date.isoformat() if self.trade_approval_date else None
            ),
            "trade_end_date": (
                self.trade_end_date.isoformat() if self.trade_end_date else None
            ),
        }


@dataclass(frozen=True)
class NewPurchase:
    """Values for a purchase row that has not been persisted yet."""

    user_id: str
    option: CopytradeOption
    initial_investment: Decimal
    trade_current_value: Decimal
    trade_profit_loss: Decimal
    trade_win_rate: Optional[Decimal] = None
    trade_approval_date: Optional[datetime] = None
    trade_end_date: Optional[datetime] = None


@dataclass(frozen=True)
class ApprovalMetadata:
    """Who approved a purchase and when the stake starts and ends."""

    approved_by: str
    approved_at: datetime
    trade_end_date: Optional[datetime] = None


@dataclass(frozen=True)
class Deduction:
    """Amount taken from a single portfolio entry during approval."""

    entry_id: int
    amount_deducted: Decimal


@dataclass(frozen=True)
class ApprovalResult:
    """Outcome of approving a purchase."""

    purchase: Purchase
    deductions: list[Deduction]
    new_account_balance: Decimal

    @property
    def total_deducted(self) -> Decimal:
        return sum((d.amount_deducted for d in self.deductions), Decimal("0"))


@dataclass(frozen=True)
class AuditEntry:
    """An audit log record emitted after a committed state change."""

    action: str
    resource_type: str
    description: str
    actor_id: Optional[str] = None
    resource_id: Optional[str] = None
    resource_name: Optional[str] = None
    changes: Optional[dict[str, Any]] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Notification:
    """A user/admin notification emitted after a committed state change."""

    action: str
    user_id: str
    metadata: dict[str, Any] = field(default_factory=dict)
    description: Optional[str] = None
