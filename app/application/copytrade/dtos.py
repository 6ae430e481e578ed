"""
Data Transfer Objects for the copytrade application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from app.domain.copytrade.entities import Deduction, Purchase


@dataclass(frozen=True)
class CreatePurchaseCommand:
    """Input DTO for a user buying into a copytrade option.

    Attributes:
        user_id: Owner of the new purchase.
        option_id: Copytrade option being bought.
        initial_investment: Amount invested.
        trade_current_value: Optional starting value (defaults to the investment).
        trade_profit_loss: Optional starting profit/loss.
        trade_win_rate: Optional win rate.
        trade_approval_date: Optional pre-set approval date.
        trade_end_date: Optional pre-set end date.
    """

    user_id: str
    option_id: str
    initial_investment: Decimal
    trade_current_value: Optional[Decimal] = None
    trade_profit_loss: Optional[Decimal] = None
    trade_win_rate: Optional[Decimal] = None
    trade_approval_date: Optional[datetime] = None
    trade_end_date: Optional[datetime] = None


@dataclass(frozen=True)
class CreatePurchaseForUserCommand:
    """Input DTO for an admin creating a purchase on behalf of a user.

    Attributes:
        admin_id: Admin performing the action.
        purchase: The purchase values, with the target user as owner.
        auto_approve: Approve the new purchase in the same transaction.
    """

    admin_id: str
    purchase: CreatePurchaseCommand
    auto_approve: bool = False


@dataclass(frozen=True)
class UpdatePurchaseCommand:
    """Input DTO for an admin update.

    Attributes:
        purchase_id: Purchase to update.
        admin_id: Admin performing the update.
        trade_status: Requested status, if the update changes it.
        changes: Non-status field values to write.
    """

    purchase_id: str
    admin_id: str
    trade_status: Optional[str] = None
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PurchaseOutcome:
    """Output DTO for any purchase write.

    deductions and new_account_balance are set only when the write
    approved the purchase. before is the state prior to an update.
    """

    purchase: Purchase
    deductions: Optional[list[Deduction]] = None
    new_account_balance: Optional[Decimal] = None
    before: Optional[Purchase] = None

    @property
    def approved(self) -> bool:
        return self.deductions is not None
