"""
Use case: Create a copytrade purchase for the calling user.

Input: CreatePurchaseCommand
Output: PurchaseOutcome (pending purchase)
Side effects: None here. Audit and notification are scheduled by the caller.
Failure cases: OptionNotFoundError, BelowMinimumInvestmentError,
UserNotFoundError, InsufficientFundsError.
"""

import logging

from app.application.copytrade.dtos import CreatePurchaseCommand, PurchaseOutcome
from app.domain.copytrade.ports import UnitOfWork
from app.domain.copytrade.workflow import PurchaseWorkflowEngine

logger = logging.getLogger(__name__)


class CreatePurchaseUseCase:
    """Stores a pending purchase inside one transaction."""

    def __init__(self, uow: UnitOfWork, engine: PurchaseWorkflowEngine) -> None:
        self._uow = uow
        self._engine = engine

    def execute(self, command: CreatePurchaseCommand) -> PurchaseOutcome:
        """Run the create-purchase use case."""
        logger.info(
            "Creating copytrade purchase: user=%s option=%s amount=%s",
            command.user_id,
            command.option_id,
            command.initial_investment,
        )
        with self._uow.begin() as tx:
            purchase = self._engine.create_purchase(
                tx,
                user_id=command.user_id,
                option_id=command.option_id,
                initial_investment=command.initial_investment,
                trade_current_value=command.trade_current_value,
                trade_profit_loss=command.trade_profit_loss,
                trade_win_rate=command.trade_win_rate,
                trade_approval_date=command.trade_approval_date,
                trade_end_date=command.trade_end_date,
            )
        return PurchaseOutcome(purchase=purchase)
