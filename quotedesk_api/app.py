"""
FastAPI application for the quotation backend contract.

``create_app(desk)`` mounts the routes over an already-built Desk and maps
the kernel's typed errors to HTTP status codes by category.  Every error
body is ``{"error": {"code": ..., "message": ...}}``.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quotedesk_api.routes import router
from quotedesk_config import get_settings
from quotedesk_kernel import __version__
from quotedesk_kernel.exceptions import (
    AuthError,
    NotFoundError,
    QuotationKernelError,
    TransientFailureError,
    UnauthorizedError,
    ValidationError,
    WorkflowError,
)
from quotedesk_kernel.logging_config import get_logger
from quotedesk_services.bootstrap import Desk, build_desk

logger = get_logger("api")

# Most specific first; the first matching category wins.
STATUS_BY_ERROR: tuple[tuple[type[QuotationKernelError], int], ...] = (
    (NotFoundError, 404),
    (ValidationError, 422),
    (UnauthorizedError, 403),
    (WorkflowError, 409),
    (TransientFailureError, 503),
    (AuthError, 401),
)


def status_for(exc: QuotationKernelError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def kernel_error_handler(request: Request, exc: QuotationKernelError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "request_failed",
        extra={
            "path": request.url.path,
            "status_code": status_code,
            "exc_code": exc.code,
        },
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": exc.code, "message": str(exc)}},
    )


def create_app(desk: Desk | None = None) -> FastAPI:
    """Build the app; without ``desk`` one is built from ``get_settings()``."""
    app = FastAPI(title="QuoteDesk", version=__version__)
    app.state.desk = desk if desk is not None else build_desk(get_settings())
    app.add_exception_handler(QuotationKernelError, kernel_error_handler)
    app.include_router(router)
    return app
