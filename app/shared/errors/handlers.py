"""
Centralized error handlers for FastAPI.

Maps copytrade domain errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses share one body: {"error", "detail", "data"}.
"""

import logging
from decimal import Decimal
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.copytrade.errors import CopytradeDomainError, ErrorKind

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_403 = 403
HTTP_404 = 404
HTTP_409 = 409
HTTP_500 = 500

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.OPTION_NOT_FOUND: HTTP_404,
    ErrorKind.BELOW_MINIMUM_INVESTMENT: HTTP_400,
    ErrorKind.INSUFFICIENT_FUNDS: HTTP_400,
    ErrorKind.NO_PORTFOLIO_ENTRIES: HTTP_400,
    ErrorKind.INSUFFICIENT_PORTFOLIO_VALUE: HTTP_400,
    ErrorKind.INVALID_STATUS_TRANSITION: HTTP_400,
    ErrorKind.TARGET_IS_ADMIN: HTTP_403,
    ErrorKind.USER_NOT_FOUND: HTTP_404,
    ErrorKind.PURCHASE_NOT_FOUND: HTTP_404,
    ErrorKind.IMMUTABLE_FIELD: HTTP_400,
    ErrorKind.CONCURRENT_MODIFICATION: HTTP_409,
}


def _jsonable(data: dict[str, Any]) -> dict[str, Any]:
    """Render Decimal amounts as JSON numbers."""
    return {k: float(v) if isinstance(v, Decimal) else v for k, v in data.items()}


def error_response(
    status_code: int,
    error: str,
    detail: str | None = None,
    data: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, Any] = {"error": error}
    if detail:
        body["detail"] = detail
    if data:
        body["data"] = _jsonable(data)
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(CopytradeDomainError)
    async def handle_copytrade_domain(
        _request: Request, exc: CopytradeDomainError
    ) -> JSONResponse:
        """Translate a tagged domain error into its HTTP status and payload."""
        status_code = STATUS_BY_KIND.get(exc.kind, HTTP_500)
        if status_code == HTTP_500:
            logger.error("Unmapped copytrade error: %s", exc.message)
            return error_response(HTTP_500, "Internal server error")
        logger.warning("%s: %s", exc.kind.value, exc.message)
        return error_response(status_code, exc.kind.value, exc.message, exc.data)

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return error_response(HTTP_500, "Internal server error")
