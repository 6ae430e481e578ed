"""
Domain rules for purchase status transitions and field mutability.

Active is terminal: once a purchase is active its status never changes
again and only its performance figures may be edited.
"""

from decimal import Decimal
from typing import Any

from app.domain.copytrade.entities import Purchase, PurchaseStatus
from app.domain.copytrade.errors import (
    ImmutableFieldError,
    InvalidStatusTransitionError,
)

ALLOWED_TRANSITIONS: dict[PurchaseStatus, frozenset[PurchaseStatus]] = {
    PurchaseStatus.PENDING: frozenset({PurchaseStatus.ACTIVE, PurchaseStatus.REJECTED}),
    PurchaseStatus.REJECTED: frozenset({PurchaseStatus.PENDING}),
    PurchaseStatus.ACTIVE: frozenset(),
}

PERFORMANCE_FIELDS = frozenset({"trade_current_value", "trade_profit_loss", "trade_win_rate"})

MUTABLE_FIELDS: dict[PurchaseStatus, frozenset[str]] = {
    PurchaseStatus.ACTIVE: PERFORMANCE_FIELDS,
    PurchaseStatus.PENDING: PERFORMANCE_FIELDS
    | {"initial_investment", "trade_approval_date", "trade_end_date"},
    PurchaseStatus.REJECTED: PERFORMANCE_FIELDS
    | {"initial_investment", "trade_approval_date", "trade_end_date"},
}


def ensure_status_transition(current: PurchaseStatus, requested: PurchaseStatus) -> None:
    """Raise InvalidStatusTransitionError unless current -> requested is allowed.

    Requesting the status a purchase already has is always accepted.
    """
    if current is requested:
        return
    if requested not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(current=current.value, requested=requested.value)


def ensure_fields_mutable(purchase: Purchase, changes: dict[str, Any]) -> None:
    """Raise ImmutableFieldError for the first field the status freezes."""
    allowed = MUTABLE_FIELDS[purchase.trade_status]
    for name in sorted(changes):
        if name not in allowed:
            raise ImmutableFieldError(field_name=name, status=purchase.trade_status.value)


def with_profit_loss(purchase: Purchase, changes: dict[str, Any]) -> dict[str, Any]:
    """Return changes with trade_profit_loss filled in when it is implied.

    When the current value or the investment changes and no explicit
    profit/loss is given, profit/loss = current value - initial investment.
    """
    if "trade_profit_loss" in changes:
        return changes
    if "trade_current_value" not in changes and "initial_investment" not in changes:
        return changes

    current: Decimal = changes.get("trade_current_value", purchase.trade_current_value)
    invested: Decimal = changes.get("initial_investment", purchase.initial_investment)
    return {**changes, "trade_profit_loss": current - invested}
