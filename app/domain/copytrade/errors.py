"""
Domain-specific errors for the copytrade bounded context.

All errors raised from the domain layer must be defined here.
Each error carries an ErrorKind tag and a structured data payload.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""

from decimal import Decimal
from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Tag identifying each copytrade failure."""

    OPTION_NOT_FOUND = "OptionNotFound"
    BELOW_MINIMUM_INVESTMENT = "BelowMinimumInvestment"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    NO_PORTFOLIO_ENTRIES = "NoPortfolioEntries"
    INSUFFICIENT_PORTFOLIO_VALUE = "InsufficientPortfolioValue"
    INVALID_STATUS_TRANSITION = "InvalidStatusTransition"
    TARGET_IS_ADMIN = "TargetIsAdmin"
    USER_NOT_FOUND = "UserNotFound"
    PURCHASE_NOT_FOUND = "PurchaseNotFound"
    IMMUTABLE_FIELD = "ImmutableField"
    CONCURRENT_MODIFICATION = "ConcurrentModification"


class CopytradeDomainError(Exception):
    """Base error for all copytrade domain errors."""

    kind: ErrorKind

    def __init__(self, message: str, data: dict[str, Any] | None = None) -> None:
        self.message = message
        self.data = data or {}
        super().__init__(self.message)


class OptionNotFoundError(CopytradeDomainError):
    """Raised when a copytrade option id cannot be resolved."""

    kind = ErrorKind.OPTION_NOT_FOUND

    def __init__(self, option_id: str) -> None:
        super().__init__(
            f"Copytrade option not found: {option_id}", {"option_id": option_id}
        )
        self.option_id = option_id


class BelowMinimumInvestmentError(CopytradeDomainError):
    """Raised when an investment is below the option's minimum."""

    kind = ErrorKind.BELOW_MINIMUM_INVESTMENT

    def __init__(self, minimum: Decimal, provided: Decimal) -> None:
        super().__init__(
            f"Investment below minimum: minimum {minimum}, provided {provided}",
            {"minimum": minimum, "provided": provided},
        )
        self.minimum = minimum
        self.provided = provided


class InsufficientFundsError(CopytradeDomainError):
    """Raised when the account balance cannot cover a new purchase."""

    kind = ErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            f"Insufficient funds: required {required}, available {available}",
            {"required": required, "available": available},
        )
        self.required = required
        self.available = available


class NoPortfolioEntriesError(CopytradeDomainError):
    """Raised when approving a purchase for a user with an empty portfolio."""

    kind = ErrorKind.NO_PORTFOLIO_ENTRIES

    def __init__(self, user_id: str) -> None:
        super().__init__(f"No portfolio entries for user: {user_id}", {"user_id": user_id})
        self.user_id = user_id


class InsufficientPortfolioValueError(CopytradeDomainError):
    """Raised when portfolio entries do not cover the investment."""

    kind = ErrorKind.INSUFFICIENT_PORTFOLIO_VALUE

    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            f"Insufficient portfolio value: required {required}, available {available}",
            {"required": required, "available": available},
        )
        self.required = required
        self.available = available


class InvalidStatusTransitionError(CopytradeDomainError):
    """Raised when a purchase status change is not allowed."""

    kind = ErrorKind.INVALID_STATUS_TRANSITION

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            f"Cannot change purchase status from {current} to {requested}",
            {"current": current, "requested": requested},
        )
        self.current = current
        self.requested = requested


class TargetIsAdminError(CopytradeDomainError):
    """Raised when an admin tries to create a purchase for another admin."""

    kind = ErrorKind.TARGET_IS_ADMIN

    def __init__(self, user_id: str) -> None:
        super().__init__(
            "Cannot create copytrade purchases for admin users", {"user_id": user_id}
        )
        self.user_id = user_id


class UserNotFoundError(CopytradeDomainError):
    """Raised when a user id cannot be resolved."""

    kind = ErrorKind.USER_NOT_FOUND

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}", {"user_id": user_id})
        self.user_id = user_id


class PurchaseNotFoundError(CopytradeDomainError):
    """Raised when a purchase id cannot be resolved."""

    kind = ErrorKind.PURCHASE_NOT_FOUND

    def __init__(self, purchase_id: str) -> None:
        super().__init__(
            f"Copytrade purchase not found: {purchase_id}", {"purchase_id": purchase_id}
        )
        self.purchase_id = purchase_id


class ImmutableFieldError(CopytradeDomainError):
    """Raised when an update touches a field frozen by the purchase status."""

    kind = ErrorKind.IMMUTABLE_FIELD

    def __init__(self, field_name: str, status: str) -> None:
        super().__init__(
            f"Field {field_name} cannot change while purchase is {status}",
            {"field": field_name, "status": status},
        )
        self.field_name = field_name
        self.status = status


class ConcurrentModificationError(CopytradeDomainError):
    """Raised when a guarded write finds the row changed underneath it."""

    kind = ErrorKind.CONCURRENT_MODIFICATION

    def __init__(self, resource: str, resource_id: str) -> None:
        super().__init__(
            f"{resource} {resource_id} was modified concurrently",
            {"resource": resource, "resource_id": resource_id},
        )
        self.resource = resource
        self.resource_id = resource_id
