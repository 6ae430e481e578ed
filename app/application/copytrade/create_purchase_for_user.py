"""
Use case: Admin creates a purchase on behalf of a user.

Input: CreatePurchaseForUserCommand
Output: PurchaseOutcome (pending, or active with deductions when auto-approved)
Side effects: None here. Audit and notification are scheduled by the caller.
Failure cases: UserNotFoundError, TargetIsAdminError, plus every failure
of create and approve. Any failure leaves nothing persisted.
"""

import logging

from app.application.copytrade.dtos import CreatePurchaseForUserCommand, PurchaseOutcome
from app.domain.copytrade.errors import TargetIsAdminError, UserNotFoundError
from app.domain.copytrade.ports import UnitOfWork
from app.domain.copytrade.workflow import PurchaseWorkflowEngine

logger = logging.getLogger(__name__)


class CreatePurchaseForUserUseCase:
    """Creates, and optionally approves, a purchase in a single transaction."""

    def __init__(self, uow: UnitOfWork, engine: PurchaseWorkflowEngine) -> None:
        self._uow = uow
        self._engine = engine

    def execute(self, command: CreatePurchaseForUserCommand) -> PurchaseOutcome:
        """Run the admin create use case.

        Raises:
            UserNotFoundError: If the target user does not exist.
            TargetIsAdminError: If the target user is an admin.
        """
        target_id = command.purchase.user_id
        logger.info(
            "Admin %s creating copytrade purchase for user %s (auto_approve=%s)",
            command.admin_id,
            target_id,
            command.auto_approve,
        )

        with self._uow.begin() as tx:
            target = tx.users.get(target_id)
            if target is None:
                raise UserNotFoundError(target_id)
            if target.is_admin:
                logger.warning(
                    "Admin %s attempted to create a purchase for admin %s",
                    command.admin_id,
                    target_id,
                )
                raise TargetIsAdminError(target_id)

            p = command.purchase
            purchase = self._engine.create_purchase(
                tx,
                user_id=p.user_id,
                option_id=p.option_id,
                initial_investment=p.initial_investment,
                trade_current_value=p.trade_current_value,
                trade_profit_loss=p.trade_profit_loss,
                trade_win_rate=p.trade_win_rate,
                trade_approval_date=p.trade_approval_date,
                trade_end_date=p.trade_end_date,
            )
            if not command.auto_approve:
                return PurchaseOutcome(purchase=purchase)

            result = self._engine.approve_purchase(tx, purchase, command.admin_id)

        return PurchaseOutcome(
            purchase=result.purchase,
            deductions=result.deductions,
            new_account_balance=result.new_account_balance,
        )
