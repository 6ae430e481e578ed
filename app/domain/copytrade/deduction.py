"""
Domain service: Portfolio deduction planning.

Decides how an approved investment is taken out of a user's portfolio
entries. Pure business logic. No IO.

Entries are consumed strictly in the order given: the first entry is
drained up to its full value before the next one is touched.
"""

from decimal import Decimal

from app.domain.copytrade.entities import Deduction, PortfolioEntry
from app.domain.copytrade.errors import InsufficientPortfolioValueError

ZERO = Decimal("0")


def total_value(entries: list[PortfolioEntry]) -> Decimal:
    """Return the summed value of a list of portfolio entries."""
    return sum((e.value for e in entries), ZERO)


def plan_deductions(entries: list[PortfolioEntry], amount: Decimal) -> list[Deduction]:
    """Allocate amount across entries in order.

    Args:
        entries: Portfolio entries in consumption order.
        amount: Total amount to deduct. Must be positive.

    Returns:
        One Deduction per entry touched. Amounts sum exactly to amount.

    Raises:
        InsufficientPortfolioValueError: If the entries cannot cover amount.
    """
    available = total_value(entries)
    if available < amount:
        raise InsufficientPortfolioValueError(required=amount, available=available)

    remaining = amount
    deductions: list[Deduction] = []
    for entry in entries:
        if remaining <= ZERO:
            break
        if entry.value <= ZERO:
            continue
        take = min(entry.value, remaining)
        deductions.append(Deduction(entry_id=entry.id, amount_deducted=take))
        remaining -= take

    return deductions
