"""
FastAPI router for the copytrade bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.

Audit entries and notifications are scheduled as background tasks, so
they run only after the use case has committed and the response is built.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status

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
from app.interfaces.copytrade.dependencies import (
    get_create_purchase_for_user_use_case,
    get_create_purchase_use_case,
    get_current_admin_id,
    get_current_user_id,
    get_delete_purchase_use_case,
    get_get_purchase_use_case,
    get_side_effects,
    get_update_purchase_use_case,
)
from app.interfaces.copytrade.schemas import (
    AdminCreatePurchaseRequest,
    CreatePurchaseRequest,
    ErrorResponse,
    PurchaseResponse,
    UpdatePurchaseRequest,
)
from app.shared.security.rate_limiting import WRITE_RATE_LIMIT, limiter

router = APIRouter(prefix="/purchases", tags=["copytrade"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def _to_command(payload: CreatePurchaseRequest, user_id: str) -> CreatePurchaseCommand:
    return CreatePurchaseCommand(
        user_id=user_id,
        option_id=payload.option_id,
        initial_investment=payload.initial_investment,
        trade_current_value=payload.trade_current_value,
        trade_profit_loss=payload.trade_profit_loss,
        trade_win_rate=payload.trade_win_rate,
        trade_approval_date=payload.trade_approval_date,
        trade_end_date=payload.trade_end_date,
    )


@router.post(
    "",
    response_model=PurchaseResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Buy a copytrade option",
    description=(
        "Create a pending purchase for the calling user. Checks the option "
        "minimum and the account balance; no funds move until approval."
    ),
)
@limiter.limit(WRITE_RATE_LIMIT)
def create_purchase(
    request: Request,
    payload: CreatePurchaseRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    use_case: CreatePurchaseUseCase = Depends(get_create_purchase_use_case),
    side_effects: PurchaseSideEffects = Depends(get_side_effects),
) -> PurchaseResponse:
    """Create a pending copytrade purchase for the caller."""
    outcome = use_case.execute(_to_command(payload, user_id))
    background_tasks.add_task(side_effects.purchase_created, outcome, user_id)
    return PurchaseResponse.from_outcome(outcome)


@router.post(
    "/admin",
    response_model=PurchaseResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create a purchase on behalf of a user",
    description=(
        "Admin-only. Creates a purchase for a non-admin user and, when "
        "auto_approve is set, approves it in the same transaction."
    ),
)
@limiter.limit(WRITE_RATE_LIMIT)
def create_purchase_for_user(
    request: Request,
    payload: AdminCreatePurchaseRequest,
    background_tasks: BackgroundTasks,
    admin_id: str = Depends(get_current_admin_id),
    use_case: CreatePurchaseForUserUseCase = Depends(
        get_create_purchase_for_user_use_case
    ),
    side_effects: PurchaseSideEffects = Depends(get_side_effects),
) -> PurchaseResponse:
    """Create, and optionally approve, a purchase for another user."""
    command = CreatePurchaseForUserCommand(
        admin_id=admin_id,
        purchase=_to_command(payload, payload.user_id),
        auto_approve=payload.auto_approve,
    )
    outcome = use_case.execute(command)
    background_tasks.add_task(
        side_effects.purchase_created, outcome, admin_id, on_behalf=True
    )
    return PurchaseResponse.from_outcome(outcome)


@router.get(
    "/{purchase_id}",
    response_model=PurchaseResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
    summary="Get a copytrade purchase",
)
def get_purchase(
    purchase_id: str,
    use_case: GetPurchaseUseCase = Depends(get_get_purchase_use_case),
) -> PurchaseResponse:
    """Return one purchase by id."""
    return PurchaseResponse.from_outcome(PurchaseOutcome(purchase=use_case.execute(purchase_id)))


@router.put(
    "/{purchase_id}",
    response_model=PurchaseResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Update a copytrade purchase",
    description=(
        "Admin-only. Setting trade_status to 'active' on a pending purchase "
        "approves it and deducts the investment from the user's portfolio."
    ),
)
@limiter.limit(WRITE_RATE_LIMIT)
def update_purchase(
    request: Request,
    purchase_id: str,
    payload: UpdatePurchaseRequest,
    background_tasks: BackgroundTasks,
    admin_id: str = Depends(get_current_admin_id),
    use_case: UpdatePurchaseUseCase = Depends(get_update_purchase_use_case),
    side_effects: PurchaseSideEffects = Depends(get_side_effects),
) -> PurchaseResponse:
    """Apply an admin update to a purchase."""
    command = UpdatePurchaseCommand(
        purchase_id=purchase_id,
        admin_id=admin_id,
        trade_status=payload.trade_status,
        changes=payload.field_changes(),
    )
    outcome = use_case.execute(command)
    background_tasks.add_task(side_effects.purchase_updated, outcome, admin_id)
    return PurchaseResponse.from_outcome(outcome)


@router.delete(
    "/{purchase_id}",
    response_model=PurchaseResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a copytrade purchase",
    description=(
        "Admin-only. Removes the record at any status. Funds already "
        "deducted for an active purchase are not refunded."
    ),
)
@limiter.limit(WRITE_RATE_LIMIT)
def delete_purchase(
    request: Request,
    purchase_id: str,
    background_tasks: BackgroundTasks,
    admin_id: str = Depends(get_current_admin_id),
    use_case: DeletePurchaseUseCase = Depends(get_delete_purchase_use_case),
    side_effects: PurchaseSideEffects = Depends(get_side_effects),
) -> PurchaseResponse:
    """Delete a purchase and return its last state."""
    purchase = use_case.execute(purchase_id)
    background_tasks.add_task(side_effects.purchase_deleted, purchase, admin_id)
    return PurchaseResponse.from_outcome(PurchaseOutcome(purchase=purchase))
