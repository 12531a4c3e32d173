"""Translation of domain errors into HTTP responses"""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse

from loan_engine.domain.exceptions import (
    AlreadyRepaidError,
    CurrencyMismatchError,
    DomainException,
    InvalidArgumentError,
    LoanAccessDeniedError,
    LoanNotFoundError,
    NothingOutstandingError,
)
from loan_engine.infrastructure.observability.metrics import record_rejection

STATUS_BY_ERROR = {
    InvalidArgumentError: 422,
    CurrencyMismatchError: 422,
    AlreadyRepaidError: 409,
    NothingOutstandingError: 409,
    LoanNotFoundError: 404,
    LoanAccessDeniedError: 403,
}


async def domain_exception_handler(request: Request, error: DomainException) -> JSONResponse:
    """Map a domain error to its HTTP status, recording the rejection against the route"""
    route = request.scope.get("route")
    operation = getattr(route, "name", request.url.path)
    request_id = getattr(request.state, "request_id", "unknown")

    record_rejection(operation, error)
    logging.warning(
        f"{operation} rejected: {error}",
        extra={"request_id": request_id, "error": type(error).__name__},
    )
    return JSONResponse(status_code=STATUS_BY_ERROR.get(type(error), 400), content={"detail": str(error)})
