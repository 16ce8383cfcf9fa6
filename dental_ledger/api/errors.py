"""Mapping of domain exceptions to HTTP responses"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dental_ledger.api.dependencies import get_request_id
from dental_ledger.domain.exceptions import (
    ConcurrentModification,
    DomainException,
    EntityNotFound,
    PersistenceFailure,
    ValidationFailure,
)
from dental_ledger.infrastructure.observability.metrics import concurrency_conflict_counter

logger = logging.getLogger(__name__)

# Most specific first
STATUS_BY_EXCEPTION = (
    (ValidationFailure, 422),
    (EntityNotFound, 404),
    (ConcurrentModification, 409),
    (PersistenceFailure, 503),
)


def status_for(exc: DomainException) -> int:
    for exc_type, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = status_for(exc)
    extra = {"request_id": get_request_id(request), "error_type": type(exc).__name__}

    if isinstance(exc, ConcurrentModification):
        concurrency_conflict_counter.inc()

    if status_code >= 500:
        logger.error(f"Ledger failure: {exc}", extra=extra)
    else:
        logger.warning(f"Request rejected: {exc}", extra=extra)

    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unexpected error: {exc}",
        extra={"request_id": get_request_id(request), "error_type": type(exc).__name__},
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)
