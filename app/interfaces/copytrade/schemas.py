"""
Pydantic schemas for copytrade API request/response validation.

These schemas enforce input validation and define the API contract.
Amounts are Decimals and must be strictly positive where money moves.
No business logic belongs here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.application.copytrade.dtos import PurchaseOutcome
from app.domain.copytrade.entities import Purchase

WIN_RATE_MIN = 0
WIN_RATE_MAX = 100


class CreatePurchaseRequest(BaseModel):
    """Request schema for a user buying into a copytrade option.

    Attributes:
        option_id: Copytrade option being bought.
        initial_investment: Amount invested, strictly positive.
        trade_current_value: Starting value; defaults to the investment.
        trade_profit_loss: Starting profit/loss; defaults to value minus investment.
        trade_win_rate: Optional win rate percentage (0-100).
    """

    model_config = ConfigDict(extra="forbid")

    option_id: str = Field(..., min_length=1, max_length=64)
    initial_investment: Decimal = Field(..., gt=0)
    trade_current_value: Optional[Decimal] = Field(default=None, ge=0)
    trade_profit_loss: Optional[Decimal] = None
    trade_win_rate: Optional[Decimal] = Field(
        default=None, ge=WIN_RATE_MIN, le=WIN_RATE_MAX
    )
    trade_approval_date: Optional[datetime] = None
    trade_end_date: Optional[datetime] = None


class AdminCreatePurchaseRequest(CreatePurchaseRequest):
    """Request schema for an admin creating a purchase for a user.

    Attributes:
        user_id: Target user who will own the purchase.
        auto_approve: Approve immediately, deducting the user's portfolio.
    """

    user_id: str = Field(..., min_length=1, max_length=64)
    auto_approve: bool = False


class UpdatePurchaseRequest(BaseModel):
    """Request schema for an admin update.

    Only the fields sent are changed. trade_status is kept as a plain
    string so an unknown value is reported as an invalid transition.
    """

    model_config = ConfigDict(extra="forbid")

    trade_status: Optional[str] = Field(default=None, min_length=1, max_length=32)
    initial_investment: Optional[Decimal] = Field(default=None, gt=0)
    trade_current_value: Optional[Decimal] = Field(default=None, ge=0)
    trade_profit_loss: Optional[Decimal] = None
    trade_win_rate: Optional[Decimal] = Field(
        default=None, ge=WIN_RATE_MIN, le=WIN_RATE_MAX
    )
    trade_approval_date: Optional[datetime] = None
    trade_end_date: Optional[datetime] = None

    def field_changes(self) -> dict[str, Any]:
        """Return the non-status fields the client actually sent."""
        return self.model_dump(
            exclude_unset=True, exclude_none=True, exclude={"trade_status"}
        )


class PurchaseItem(BaseModel):
    """A copytrade purchase in API responses."""

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
    trade_win_rate: Optional[Decimal] = None
    trade_status: str
    approved_by: Optional[str] = None
    trade_approval_date: Optional[datetime] = None
    trade_end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, purchase: Purchase) -> "PurchaseItem":
        return cls(
            id=purchase.id,
            user_id=purchase.user_id,
            option_id=purchase.option_id,
            trade_title=purchase.trade_title,
            trade_min=purchase.trade_min,
            trade_max=purchase.trade_max,
            trade_risk=purchase.trade_risk,
            trade_roi_min=purchase.trade_roi_min,
            trade_roi_max=purchase.trade_roi_max,
            trade_duration=purchase.trade_duration,
            initial_investment=purchase.initial_investment,
            trade_current_value=purchase.trade_current_value,
            trade_profit_loss=purchase.trade_profit_loss,
            trade_win_rate=purchase.trade_win_rate,
            trade_status=purchase.trade_status.value,
            approved_by=purchase.approved_by,
            trade_approval_date=purchase.trade_approval_date,
            trade_end_date=purchase.trade_end_date,
            created_at=purchase.created_at,
            updated_at=purchase.updated_at,
        )


class DeductionItem(BaseModel):
    """Amount taken from one portfolio entry on approval."""

    entry_id: int
    amount_deducted: Decimal


class PurchaseResponse(BaseModel):
    """Response envelope for every purchase endpoint.

    deductions and new_account_balance are present only when the
    request approved the purchase.
    """

    purchase: PurchaseItem
    deductions: Optional[list[DeductionItem]] = None
    new_account_balance: Optional[Decimal] = None

    @classmethod
    def from_outcome(cls, outcome: PurchaseOutcome) -> "PurchaseResponse":
        deductions = None
        if outcome.deductions is not None:
            deductions = [
                DeductionItem(entry_id=d.entry_id, amount_deducted=d.amount_deducted)
                for d in outcome.deductions
            ]
        return cls(
            purchase=PurchaseItem.from_entity(outcome.purchase),
            deductions=deductions,
            new_account_balance=outcome.new_account_balance,
        )


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: Optional[str] = None
    data: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    version: str
    database: str
