"""
Domain service: Copytrade purchase workflow.

Implements the two-phase purchase protocol:

    create   -> validates the option minimum and the account balance,
                stores a pending purchase. No money moves.
    approve  -> drains portfolio entries in order, activates the purchase
                and debits the account balance.

The engine never opens, commits or rolls back a transaction. Callers pass
in an open Transaction and own its outcome, which lets several steps
(create + approve) share one atomic unit.
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Optional

from app.domain.copytrade.deduction import plan_deductions
from app.domain.copytrade.entities import (
    ApprovalMetadata,
    ApprovalResult,
    NewPurchase,
    Purchase,
    PurchaseStatus,
)
from app.domain.copytrade.errors import (
    BelowMinimumInvestmentError,
    InsufficientFundsError,
    InvalidStatusTransitionError,
    NoPortfolioEntriesError,
    OptionNotFoundError,
    UserNotFoundError,
)
from app.domain.copytrade.ports import Transaction

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PurchaseWorkflowEngine:
    """Orchestrates purchase creation and approval inside a transaction."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock

    def create_purchase(
        self,
        tx: Transaction,
        user_id: str,
        option_id: str,
        initial_investment: Decimal,
        trade_current_value: Optional[Decimal] = None,
        trade_profit_loss: Optional[Decimal] = None,
        trade_win_rate: Optional[Decimal] = None,
        trade_approval_date: Optional[datetime] = None,
        trade_end_date: Optional[datetime] = None,
    ) -> Purchase:
        """Store a pending purchase after validating it.

        Checks run in a fixed order and the first failure wins.

        Raises:
            OptionNotFoundError: If option_id does not resolve.
            BelowMinimumInvestmentError: If the investment is under the option minimum.
            UserNotFoundError: If user_id does not resolve.
            InsufficientFundsError: If the account balance is below the investment.
        """
        option = tx.options.get(option_id)
        if option is None:
            raise OptionNotFoundError(option_id)

        minimum = option.minimum_investment
        if initial_investment < minimum:
            raise BelowMinimumInvestmentError(minimum=minimum, provided=initial_investment)

        if tx.users.get(user_id) is None:
            raise UserNotFoundError(user_id)

        balance = tx.ledger.get_account_balance(user_id)
        if balance < initial_investment:
            raise InsufficientFundsError(required=initial_investment, available=balance)

        current_value = (
            trade_current_value if trade_current_value is not None else initial_investment
        )
        profit_loss = (
            trade_profit_loss
            if trade_profit_loss is not None
            else current_value - initial_investment
        )

        purchase = tx.purchases.add(
            NewPurchase(
                user_id=user_id,
                option=option,
                initial_investment=initial_investment,
                trade_current_value=current_value,
                trade_profit_loss=profit_loss,
                trade_win_rate=trade_win_rate,
                trade_approval_date=trade_approval_date,
                trade_end_date=trade_end_date,
            )
        )

        logger.info(
            "Copytrade purchase created (pending approval): id=%s user=%s option=%s amount=%s",
            purchase.id,
            user_id,
            option_id,
            initial_investment,
        )
        return purchase

    def approve_purchase(
        self, tx: Transaction, purchase: Purchase, approved_by: str
    ) -> ApprovalResult:
        """Activate a pending purchase and fund it from the portfolio.

        Raises:
            InvalidStatusTransitionError: If the purchase is not pending.
            NoPortfolioEntriesError: If the owner has no portfolio entries.
            InsufficientPortfolioValueError: If entries do not cover the investment.
            ConcurrentModificationError: If an entry changed under the deduction.
        """
        if not purchase.is_pending:
            raise InvalidStatusTransitionError(
                current=purchase.trade_status.value,
                requested=PurchaseStatus.ACTIVE.value,
            )

        amount = purchase.initial_investment
        entries = tx.ledger.list_entries(purchase.user_id)
        if not entries:
            raise NoPortfolioEntriesError(purchase.user_id)

        deductions = plan_deductions(entries, amount)
        by_id = {entry.id: entry for entry in entries}
        for deduction in deductions:
            tx.ledger.deduct_from_entry(by_id[deduction.entry_id], deduction.amount_deducted)

        approved_at = self._clock()
        end_date = purchase.trade_end_date or approved_at + timedelta(
            days=purchase.trade_duration
        )
        activated = tx.purchases.set_status(
            purchase.id,
            PurchaseStatus.ACTIVE,
            ApprovalMetadata(
                approved_by=approved_by,
                approved_at=approved_at,
                trade_end_date=end_date,
            ),
        )
        new_balance = tx.ledger.debit_account_balance(purchase.user_id, amount)

        logger.info(
            "Copytrade purchase approved: id=%s user=%s amount=%s entries=%d by=%s",
            purchase.id,
            purchase.user_id,
            amount,
            len(deductions),
            approved_by,
        )
        return ApprovalResult(
            purchase=activated,
            deductions=deductions,
            new_account_balance=new_balance,
        )
