"""
Dependency injection for the copytrade bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the copytrade context.

The engine and the notifier are process-wide singletons; everything
else is cheap and built per request. Tests swap the database by
overriding get_engine.
"""

from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.engine import Engine

from app.application.copytrade.create_purchase import CreatePurchaseUseCase
from app.application.copytrade.create_purchase_for_user import (
    CreatePurchaseForUserUseCase,
)
from app.application.copytrade.delete_purchase import DeletePurchaseUseCase
from app.application.copytrade.get_purchase import GetPurchaseUseCase
from app.application.copytrade.side_effects import PurchaseSideEffects
from app.application.copytrade.update_purchase import UpdatePurchaseUseCase
from app.core.config import settings
from app.domain.copytrade.ports import Notifier, UnitOfWork
from app.domain.copytrade.workflow import PurchaseWorkflowEngine
from app.infrastructure.copytrade.audit_log_repository import AuditLogRepositoryAdapter
from app.infrastructure.copytrade.unit_of_work import SqlAlchemyUnitOfWork
from app.infrastructure.copytrade.webhook_notifier import WebhookNotifier
from app.infrastructure.database import build_engine


@lru_cache
def get_engine() -> Engine:
    """Build the SQLAlchemy engine once from application settings."""
    return build_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


@lru_cache
def get_notifier() -> Notifier:
    """Build the webhook notifier once from application settings."""
    return WebhookNotifier(
        webhook_urls=settings.get_webhook_urls(),
        timeout=settings.notification_timeout_seconds,
    )


def get_unit_of_work(engine: Engine = Depends(get_engine)) -> UnitOfWork:
    return SqlAlchemyUnitOfWork(engine)


def get_workflow_engine() -> PurchaseWorkflowEngine:
    return PurchaseWorkflowEngine()


def get_side_effects(
    engine: Engine = Depends(get_engine),
    notifier: Notifier = Depends(get_notifier),
) -> PurchaseSideEffects:
    """Build the post-commit audit/notification emitter."""
    return PurchaseSideEffects(
        audit_log=AuditLogRepositoryAdapter(engine),
        notifier=notifier,
        audit_enabled=settings.audit_log_enabled,
    )


def get_current_user_id(
    user_id: str = Header(..., alias=settings.user_header, min_length=1),
) -> str:
    """Return the caller id forwarded by the auth gateway."""
    return user_id


def get_current_admin_id(
    admin_id: str = Header(..., alias=settings.admin_header, min_length=1),
) -> str:
    """Return the admin id forwarded by the auth gateway."""
    return admin_id


def get_create_purchase_use_case(
    uow: UnitOfWork = Depends(get_unit_of_work),
    engine: PurchaseWorkflowEngine = Depends(get_workflow_engine),
) -> CreatePurchaseUseCase:
    """Build CreatePurchaseUseCase with its infrastructure dependencies."""
    return CreatePurchaseUseCase(uow=uow, engine=engine)


def get_create_purchase_for_user_use_case(
    uow: UnitOfWork = Depends(get_unit_of_work),
    engine: PurchaseWorkflowEngine = Depends(get_workflow_engine),
) -> CreatePurchaseForUserUseCase:
    """Build CreatePurchaseForUserUseCase with its infrastructure dependencies."""
    return CreatePurchaseForUserUseCase(uow=uow, engine=engine)


def get_update_purchase_use_case(
    uow: UnitOfWork = Depends(get_unit_of_work),
    engine: PurchaseWorkflowEngine = Depends(get_workflow_engine),
) -> UpdatePurchaseUseCase:
    """Build UpdatePurchaseUseCase with its infrastructure dependencies."""
    return UpdatePurchaseUseCase(uow=uow, engine=engine)


def get_delete_purchase_use_case(
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> DeletePurchaseUseCase:
    return DeletePurchaseUseCase(uow=uow)


def get_get_purchase_use_case(
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> GetPurchaseUseCase:
    return GetPurchaseUseCase(uow=uow)
