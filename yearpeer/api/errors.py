"""Translate planner errors into HTTP responses."""
from __future__ import annotations

import logging
from typing import Dict, Type

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from yearpeer.api.schemas.errors import ErrorDetail, ErrorResponse
from yearpeer.services.results import (
    AuthorizationError,
    DateOrderError,
    FieldError,
    NotFoundError,
    OverlapError,
    PersistenceError,
    PlannerError,
    QuotaExceededError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: Dict[Type[PlannerError], int] = {
    FieldError: 422,
    DateOrderError: 422,
    OverlapError: status.HTTP_409_CONFLICT,
    QuotaExceededError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AuthorizationError: status.HTTP_401_UNAUTHORIZED,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(error: PlannerError) -> int:
    for error_type in type(error).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return status.HTTP_400_BAD_REQUEST


def error_response(error: PlannerError, request: Request) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None) or ""
    body = ErrorResponse(error=ErrorDetail(**error.to_payload()), request_id=request_id)
    return JSONResponse(status_code=status_for(error), content=body.model_dump(exclude_none=True))


async def planner_error_handler(request: Request, exc: PlannerError) -> JSONResponse:
    return error_response(exc, request)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first schema problem in the same envelope the rules use."""
    first = exc.errors()[0] if exc.errors() else {}
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location) or "body"
    logger.info("Request rejected by schema: %s (%s)", field, first.get("msg"))
    return error_response(FieldError(field, first.get("msg") or "Invalid data"), request)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PlannerError, planner_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
