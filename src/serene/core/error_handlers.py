import logging
from typing import Any, Sequence

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from serene.core.errors import ServiceError

logger = logging.getLogger(__name__)


def format_validation_errors(errors: Sequence[Any]) -> str:
    """Render pydantic errors as one readable line, naming field and rule."""
    parts = []
    for error in errors:
        loc = [str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path")]
        msg = error.get("msg", "Invalid value")
        if loc:
            parts.append(f'{msg} at "{".".join(loc)}"')
        else:
            parts.append(msg)
    return "Validation error: " + "; ".join(parts)


def _errors_payload(errors: Sequence[Any]) -> list[dict]:
    return [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in errors
    ]


async def service_exception_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle domain errors raised by the guard, stores and services."""
    if exc.status_code >= 500:
        logger.error(f"Service error on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle malformed request bodies, queries and path parameters."""
    errors = exc.errors()
    logger.info(f"Request validation error: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": format_validation_errors(errors), "errors": _errors_payload(errors)},
    )


async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors raised outside request parsing."""
    errors = exc.errors()
    logger.info(f"Validation error: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": format_validation_errors(errors), "errors": _errors_payload(errors)},
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy database errors."""
    logger.error(f"Database error: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Database error occurred"},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions."""
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "An unexpected error occurred"},
    )
