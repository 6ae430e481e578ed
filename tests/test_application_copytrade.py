"""
Tests for the copytrade application layer (use cases).

Use cases run against the real SQLAlchemy adapters on an in-memory
SQLite database, so each test checks both the returned outcome and
what was (or was not) committed.
"""

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterator

import pytest
from sqlalchemy import update

from app.application.copytrade.create_purchase import CreatePurchaseUseCase
from app.application.copytrade.create_purchase_for_user import (
    CreatePurchaseForUserUseCase,
)
from app.application.copytrade.delete_purchase import DeletePurchaseUseCase
from app.application.copytrade.dtos import (
    CreatePurchaseCommand,
    CreatePurchaseForUserCommand,
    PurchaseOutcome,
    UpdatePurchaseCommand,
)
from app.application.copytrade.get_purchase import GetPurchaseUseCase
from app.application.copytrade.side_effects import PurchaseSideEffects
from app.application.copytrade.update_purchase import UpdatePurchaseUseCase
from app.domain.copytrade.entities import (
    AuditEntry,
    Deduction,
    Notification,
    PurchaseStatus,
)
from app.domain.copytrade.errors import (
    BelowMinimumInvestmentError,
    ConcurrentModificationError,
    ImmutableFieldError,
    InsufficientFundsError,
    InsufficientPortfolioValueError,
    InvalidStatusTransitionError,
    NoPortfolioEntriesError,
    OptionNotFoundError,
    PurchaseNotFoundError,
    TargetIsAdminError,
    UserNotFoundError,
)
from app.domain.copytrade.ports import AuditLog, Notifier, Transaction
from app.domain.copytrade.workflow import PurchaseWorkflowEngine
from app.infrastructure.copytrade.portfolio_ledger import PortfolioLedgerAdapter
from app.infrastructure.copytrade.tables import portfolio_entries, users
from app.infrastructure.copytrade.unit_of_work import SqlAlchemyUnitOfWork

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None)


class DrainingLedger(PortfolioLedgerAdapter):
    """Ledger that lets another writer empty an entry before the second deduction."""

    def __init__(self, conn) -> None:
        super().__init__(conn)
        self.calls = 0

    def deduct_from_entry(self, entry, amount):
        self.calls += 1
        if self.calls == 2:
            self._conn.execute(
                update(portfolio_entries)
                .where(portfolio_entries.c.id == entry.id)
                .values(value=Decimal("0"), version=portfolio_entries.c.version + 1)
            )
        return super().deduct_from_entry(entry, amount)


class DrainingUnitOfWork(SqlAlchemyUnitOfWork):
    @contextmanager
    def begin(self) -> Iterator[Transaction]:
        with super().begin() as tx:
            tx.ledger = DrainingLedger(tx.connection)
            yield tx


@pytest.fixture
def workflow() -> PurchaseWorkflowEngine:
    return PurchaseWorkflowEngine(clock=lambda: FIXED_NOW)


@pytest.fixture
def create_uc(uow, workflow) -> CreatePurchaseUseCase:
    return CreatePurchaseUseCase(uow=uow, engine=workflow)


@pytest.fixture
def update_uc(uow, workflow) -> UpdatePurchaseUseCase:
    return UpdatePurchaseUseCase(uow=uow, engine=workflow)


@pytest.fixture
def admin_create_uc(uow, workflow) -> CreatePurchaseForUserUseCase:
    return CreatePurchaseForUserUseCase(uow=uow, engine=workflow)


def _buy(use_case: CreatePurchaseUseCase, amount: str, user_id: str = "user-1",
         option_id: str = "opt-1") -> PurchaseOutcome:
    return use_case.execute(
        CreatePurchaseCommand(
            user_id=user_id, option_id=option_id, initial_investment=Decimal(amount)
        )
    )


def _approve(use_case: UpdatePurchaseUseCase, purchase_id: str) -> PurchaseOutcome:
    return use_case.execute(
        UpdatePurchaseCommand(
            purchase_id=purchase_id, admin_id="admin-1", trade_status="active"
        )
    )


class TestCreatePurchaseUseCase:
    """Tests for the CreatePurchaseUseCase."""

    def test_creates_pending_without_moving_funds(self, seed, create_uc) -> None:
        seed.user(balance="1000")
        seed.option()
        seed.entries("user-1", "200", "300")

        outcome = _buy(create_uc, "500")

        purchase = outcome.purchase
        assert purchase.trade_status is PurchaseStatus.PENDING
        assert purchase.initial_investment == Decimal("500")
        assert purchase.trade_current_value == Decimal("500")
        assert purchase.trade_profit_loss == Decimal("0")
        assert purchase.trade_title == "Alpha Growth"
        assert purchase.approved_by is None
        assert not outcome.approved
        assert seed.balance("user-1") == Decimal("1000")
        assert seed.entry_values("user-1") == [Decimal("200"), Decimal("300")]

    def test_unknown_option(self, seed, create_uc) -> None:
        seed.user()
        with pytest.raises(OptionNotFoundError):
            _buy(create_uc, "500", option_id="missing")

    def test_minimum_checked_before_user(self, seed, create_uc) -> None:
        """The option minimum is enforced even for an unknown user."""
        seed.option(trade_min="100")
        with pytest.raises(BelowMinimumInvestmentError) as exc_info:
            _buy(create_uc, "50", user_id="nobody")
        assert exc_info.value.data["minimum"] == Decimal("100")
        assert exc_info.value.data["provided"] == Decimal("50")

    def test_unknown_user(self, seed, create_uc) -> None:
        seed.option()
        with pytest.raises(UserNotFoundError):
            _buy(create_uc, "500", user_id="nobody")

    def test_balance_must_cover_investment(self, seed, create_uc) -> None:
        seed.user(balance="100")
        seed.option()
        with pytest.raises(InsufficientFundsError) as exc_info:
            _buy(create_uc, "500")
        assert exc_info.value.data["available"] == Decimal("100")
        assert seed.purchase_count() == 0

    def test_explicit_current_value_sets_profit_loss(self, seed, create_uc) -> None:
        seed.user()
        seed.option()
        outcome = create_uc.execute(
            CreatePurchaseCommand(
                user_id="user-1",
                option_id="opt-1",
                initial_investment=Decimal("500"),
                trade_current_value=Decimal("540"),
            )
        )
        assert outcome.purchase.trade_profit_loss == Decimal("40")


class TestApproval:
    """Tests for approving a purchase through an admin update."""

    def test_end_to_end_create_then_approve(self, seed, create_uc, update_uc) -> None:
        seed.user(balance="1000")
        seed.option(duration=30)
        entry_ids = seed.entries("user-1", "200", "300")
        created = _buy(create_uc, "500")

        outcome = _approve(update_uc, created.purchase.id)

        assert outcome.approved
        assert outcome.purchase.trade_status is PurchaseStatus.ACTIVE
        assert outcome.purchase.approved_by == "admin-1"
        assert outcome.deductions == [
            Deduction(entry_id=entry_ids[0], amount_deducted=Decimal("200")),
            Deduction(entry_id=entry_ids[1], amount_deducted=Decimal("300")),
        ]
        assert outcome.new_account_balance == Decimal("500")
        assert seed.balance("user-1") == Decimal("500")
        assert seed.entry_values("user-1") == [Decimal("0"), Decimal("0")]
        assert _naive(outcome.purchase.trade_approval_date) == _naive(FIXED_NOW)
        assert _naive(outcome.purchase.trade_end_date) == _naive(
            FIXED_NOW + timedelta(days=30)
        )

    def test_partial_drain_keeps_order(self, seed, create_uc, update_uc) -> None:
        seed.user(balance="1000")
        seed.option(trade_min="10")
        seed.entries("user-1", "30", "50")
        created = _buy(create_uc, "40")

        _approve(update_uc, created.purchase.id)

        assert seed.entry_values("user-1") == [Decimal("0"), Decimal("40")]

    def test_shortfall_rolls_everything_back(self, seed, uow, create_uc, update_uc) -> None:
        seed.user(balance="1000")
        seed.option()
        seed.entries("user-1", "150", "250")
        created = _buy(create_uc, "500")

        with pytest.raises(InsufficientPortfolioValueError) as exc_info:
            _approve(update_uc, created.purchase.id)

        assert exc_info.value.data == {
            "required": Decimal("500"),
            "available": Decimal("400"),
        }
        assert seed.entry_values("user-1") == [Decimal("150"), Decimal("250")]
        assert seed.balance("user-1") == Decimal("1000")
        still = GetPurchaseUseCase(uow).execute(created.purchase.id)
        assert still.trade_status is PurchaseStatus.PENDING

    def test_mid_drain_conflict_rolls_back_earlier_deductions(
        self, seed, uow, engine, create_uc, workflow
    ) -> None:
        """A conflict on the second entry undoes the write to the first."""
        seed.user(balance="1000")
        seed.option()
        seed.entries("user-1", "200", "300")
        created = _buy(create_uc, "500")
        update_uc = UpdatePurchaseUseCase(uow=DrainingUnitOfWork(engine), engine=workflow)

        with pytest.raises(ConcurrentModificationError):
            _approve(update_uc, created.purchase.id)

        assert seed.entry_values("user-1") == [Decimal("200"), Decimal("300")]
        assert seed.balance("user-1") == Decimal("1000")
        still = GetPurchaseUseCase(uow).execute(created.purchase.id)
        assert still.trade_status is PurchaseStatus.PENDING
        assert still.approved_by is None

    def test_second_approval_cannot_reuse_drained_entries(
        self, seed, uow, create_uc, update_uc
    ) -> None:
        seed.user(balance="1000")
        seed.option()
        seed.entries("user-1", "200", "300")
        first = _buy(create_uc, "300")
        second = _buy(create_uc, "300")
        _approve(update_uc, first.purchase.id)

        with pytest.raises(InsufficientPortfolioValueError) as exc_info:
            _approve(update_uc, second.purchase.id)

        assert exc_info.value.data == {
            "required": Decimal("300"),
            "available": Decimal("200"),
        }
        assert seed.entry_values("user-1") == [Decimal("0"), Decimal("200")]
        assert seed.balance("user-1") == Decimal("700")
        still = GetPurchaseUseCase(uow).execute(second.purchase.id)
        assert still.trade_status is PurchaseStatus.PENDING

    def test_fractional_amounts_across_approvals(self, seed, uow, create_uc, update_uc) -> None:
        seed.user(balance="1")
        seed.option(trade_min="0.01")
        seed.entries("user-1", "0.3")
        first = _buy(create_uc, "0.1")
        _approve(update_uc, first.purchase.id)
        assert seed.entry_values("user-1") == [Decimal("0.2")]

        second = _buy(create_uc, "0.2")
        outcome = _approve(update_uc, second.purchase.id)

        assert outcome.purchase.trade_status is PurchaseStatus.ACTIVE
        assert outcome.deductions[0].amount_deducted == Decimal("0.2")
        assert seed.entry_values("user-1") == [Decimal("0")]
        assert seed.balance("user-1") == Decimal("0.7")

    def test_engine_refuses_non_pending_purchase(
        self, seed, uow, create_uc, update_uc, workflow
    ) -> None:
        seed.user()
        seed.option()
        seed.entries("user-1", "1000")
        created = _buy(create_uc, "500")
        _approve(update_uc, created.purchase.id)

        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            with uow.begin() as tx:
                active = tx.purchases.get(created.purchase.id)
                workflow.approve_purchase(tx, active, "admin-2")

        assert exc_info.value.data == {"current": "active", "requested": "active"}
        assert seed.entry_values("user-1") == [Decimal("500")]

    def test_no_entries(self, seed, create_uc, update_uc) -> None:
        seed.user()
        seed.option()
        created = _buy(create_uc, "500")
        with pytest.raises(NoPortfolioEntriesError):
            _approve(update_uc, created.purchase.id)

    def test_balance_clamped_at_zero(self, seed, create_uc, update_uc, engine) -> None:
        """Approval never drives the account balance negative."""
        seed.user(balance="1000")
        seed.option()
        seed.entries("user-1", "800")
        created = _buy(create_uc, "600")
        with engine.begin() as conn:
            conn.execute(update(users).values(account_balance=Decimal("100")))

        outcome = _approve(update_uc, created.purchase.id)

        assert outcome.new_account_balance == Decimal("0")
        assert seed.entry_values("user-1") == [Decimal("200")]


class TestUpdatePurchaseUseCase:
    """Tests for status and field rules on update."""

    @pytest.fixture
    def active_id(self, seed, create_uc, update_uc) -> str:
        seed.user()
        seed.option()
        seed.entries("user-1", "1000")
        created = _buy(create_uc, "500")
        _approve(update_uc, created.purchase.id)
        return created.purchase.id

    @pytest.mark.parametrize("status", ["pending", "rejected"])
    def test_active_is_terminal(self, update_uc, active_id, status) -> None:
        with pytest.raises(InvalidStatusTransitionError):
            update_uc.execute(
                UpdatePurchaseCommand(
                    purchase_id=active_id, admin_id="admin-1", trade_status=status
                )
            )

    def test_second_approval_does_not_deduct_again(self, seed, update_uc, active_id) -> None:
        outcome = _approve(update_uc, active_id)
        assert not outcome.approved
        assert seed.entry_values("user-1") == [Decimal("500")]

    def test_unknown_status_string(self, update_uc, active_id) -> None:
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            update_uc.execute(
                UpdatePurchaseCommand(
                    purchase_id=active_id, admin_id="admin-1", trade_status="archived"
                )
            )
        assert exc_info.value.data["requested"] == "archived"

    def test_active_investment_is_frozen(self, update_uc, active_id) -> None:
        with pytest.raises(ImmutableFieldError):
            update_uc.execute(
                UpdatePurchaseCommand(
                    purchase_id=active_id,
                    admin_id="admin-1",
                    changes={"initial_investment": Decimal("900")},
                )
            )

    def test_active_performance_update(self, update_uc, active_id) -> None:
        outcome = update_uc.execute(
            UpdatePurchaseCommand(
                purchase_id=active_id,
                admin_id="admin-1",
                changes={"trade_current_value": Decimal("575")},
            )
        )
        assert outcome.purchase.trade_profit_loss == Decimal("75")
        assert outcome.before.trade_current_value == Decimal("500")
        assert outcome.purchase.trade_status is PurchaseStatus.ACTIVE

    def test_reject_and_reopen(self, seed, create_uc, update_uc) -> None:
        seed.user()
        seed.option()
        created = _buy(create_uc, "500")
        pid = created.purchase.id

        rejected = update_uc.execute(
            UpdatePurchaseCommand(purchase_id=pid, admin_id="a", trade_status="rejected")
        )
        assert rejected.purchase.trade_status is PurchaseStatus.REJECTED

        with pytest.raises(InvalidStatusTransitionError):
            _approve(update_uc, pid)

        reopened = update_uc.execute(
            UpdatePurchaseCommand(purchase_id=pid, admin_id="a", trade_status="pending")
        )
        assert reopened.purchase.trade_status is PurchaseStatus.PENDING

    def test_pending_investment_below_minimum(self, seed, create_uc, update_uc) -> None:
        seed.user()
        seed.option(trade_min="100")
        created = _buy(create_uc, "500")
        with pytest.raises(BelowMinimumInvestmentError):
            update_uc.execute(
                UpdatePurchaseCommand(
                    purchase_id=created.purchase.id,
                    admin_id="a",
                    changes={"initial_investment": Decimal("20")},
                )
            )

    def test_approval_uses_updated_investment(self, seed, create_uc, update_uc) -> None:
        """Field changes land before the status change in the same update."""
        seed.user()
        seed.option()
        seed.entries("user-1", "1000")
        created = _buy(create_uc, "500")

        outcome = update_uc.execute(
            UpdatePurchaseCommand(
                purchase_id=created.purchase.id,
                admin_id="a",
                trade_status="active",
                changes={"initial_investment": Decimal("300")},
            )
        )

        assert outcome.deductions[0].amount_deducted == Decimal("300")
        assert seed.entry_values("user-1") == [Decimal("700")]

    def test_missing_purchase(self, update_uc) -> None:
        with pytest.raises(PurchaseNotFoundError):
            _approve(update_uc, "does-not-exist")


class TestCreatePurchaseForUserUseCase:
    """Tests for admin-on-behalf creation."""

    def _command(self, user_id: str, auto_approve: bool) -> CreatePurchaseForUserCommand:
        return CreatePurchaseForUserCommand(
            admin_id="admin-1",
            purchase=CreatePurchaseCommand(
                user_id=user_id, option_id="opt-1", initial_investment=Decimal("500")
            ),
            auto_approve=auto_approve,
        )

    def test_target_admin_refused(self, seed, admin_create_uc) -> None:
        seed.user("admin-2", role="admin")
        seed.option()
        seed.entries("admin-2", "1000")
        with pytest.raises(TargetIsAdminError):
            admin_create_uc.execute(self._command("admin-2", auto_approve=True))
        assert seed.purchase_count() == 0
        assert seed.entry_values("admin-2") == [Decimal("1000")]

    def test_unknown_target(self, seed, admin_create_uc) -> None:
        seed.option()
        with pytest.raises(UserNotFoundError):
            admin_create_uc.execute(self._command("ghost", auto_approve=False))

    def test_without_auto_approve(self, seed, admin_create_uc) -> None:
        seed.user()
        seed.option()
        outcome = admin_create_uc.execute(self._command("user-1", auto_approve=False))
        assert outcome.purchase.trade_status is PurchaseStatus.PENDING
        assert outcome.deductions is None

    def test_auto_approve(self, seed, admin_create_uc) -> None:
        seed.user(balance="1000")
        seed.option()
        seed.entries("user-1", "200", "300")
        outcome = admin_create_uc.execute(self._command("user-1", auto_approve=True))
        assert outcome.purchase.trade_status is PurchaseStatus.ACTIVE
        assert outcome.purchase.approved_by == "admin-1"
        assert outcome.new_account_balance == Decimal("500")
        assert seed.entry_values("user-1") == [Decimal("0"), Decimal("0")]

    def test_failed_auto_approve_leaves_nothing(self, seed, admin_create_uc) -> None:
        """Create and approve share one transaction."""
        seed.user(balance="1000")
        seed.option()
        with pytest.raises(NoPortfolioEntriesError):
            admin_create_uc.execute(self._command("user-1", auto_approve=True))
        assert seed.purchase_count() == 0


class TestDeleteAndGet:
    """Tests for DeletePurchaseUseCase and GetPurchaseUseCase."""

    def test_delete_active_does_not_refund(self, seed, uow, create_uc, update_uc) -> None:
        seed.user(balance="1000")
        seed.option()
        seed.entries("user-1", "200", "300")
        created = _buy(create_uc, "500")
        _approve(update_uc, created.purchase.id)

        deleted = DeletePurchaseUseCase(uow).execute(created.purchase.id)

        assert deleted.trade_status is PurchaseStatus.ACTIVE
        assert seed.purchase_count() == 0
        assert seed.entry_values("user-1") == [Decimal("0"), Decimal("0")]
        assert seed.balance("user-1") == Decimal("500")

    def test_delete_missing(self, uow) -> None:
        with pytest.raises(PurchaseNotFoundError):
            DeletePurchaseUseCase(uow).execute("nope")

    def test_get_missing(self, uow) -> None:
        with pytest.raises(PurchaseNotFoundError):
            GetPurchaseUseCase(uow).execute("nope")


class _RecordingAudit(AuditLog):
    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []

    def record(self, entry: AuditEntry) -> None:
        self.entries.append(entry)


class _RecordingNotifier(Notifier):
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[Notification] = []
        self._fail = fail

    def notify(self, notification: Notification) -> None:
        if self._fail:
            raise RuntimeError("webhook down")
        self.sent.append(notification)


class TestPurchaseSideEffects:
    """Tests for post-commit audit and notification emission."""

    def _outcomes(self, seed, admin_create_uc):
        seed.user(balance="1000")
        seed.option()
        seed.entries("user-1", "1000")
        return admin_create_uc.execute(
            CreatePurchaseForUserCommand(
                admin_id="admin-1",
                purchase=CreatePurchaseCommand(
                    user_id="user-1", option_id="opt-1", initial_investment=Decimal("500")
                ),
                auto_approve=True,
            )
        )

    def test_auto_approved_creation_emits_both(self, seed, admin_create_uc) -> None:
        audit, notifier = _RecordingAudit(), _RecordingNotifier()
        outcome = self._outcomes(seed, admin_create_uc)

        PurchaseSideEffects(audit, notifier).purchase_created(
            outcome, "admin-1", on_behalf=True
        )

        assert [e.action for e in audit.entries] == [
            "copytrade_purchase_created",
            "copytrade_purchase_approved",
        ]
        assert [n.action for n in notifier.sent] == [
            "copytrade_purchase",
            "copytrade_purchase_approved",
        ]
        created = notifier.sent[0]
        assert created.metadata["reference_id"] == outcome.purchase.id
        assert created.metadata["plan_name"] == "Alpha Growth"
        approved = audit.entries[1]
        assert approved.metadata["deductions"][0]["amount_deducted"].startswith("500")

    def test_failures_are_swallowed(self, seed, admin_create_uc) -> None:
        audit = _RecordingAudit()
        outcome = self._outcomes(seed, admin_create_uc)

        PurchaseSideEffects(audit, _RecordingNotifier(fail=True)).purchase_created(
            outcome, "admin-1"
        )

        assert len(audit.entries) == 2

    def test_audit_can_be_disabled(self, seed, admin_create_uc) -> None:
        audit, notifier = _RecordingAudit(), _RecordingNotifier()
        outcome = self._outcomes(seed, admin_create_uc)

        PurchaseSideEffects(audit, notifier, audit_enabled=False).purchase_deleted(
            outcome.purchase, "admin-1"
        )

        assert audit.entries == []
