"""
Exception handlers for the FastAPI application.

This module registers exception handlers that convert application and
integration exceptions to HTTP responses with consistent formatting.
"""

import logging
import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import (
    ErrorCode,
    StravaAPIError,
    StravaAuthError,
    StravaRateLimitError,
    TriPacerError,
)
from ..integrations.base import AuthenticationError, IntegrationError, RateLimitError


logger = logging.getLogger("tri_pacer.api")


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    details: Dict[str, Any] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    if details:
        content["error"]["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def integration_error_to_api_error(exc: IntegrationError) -> TriPacerError:
    """Translate an integration failure into the matching API error."""
    if isinstance(exc, AuthenticationError):
        return StravaAuthError(str(exc))
    if isinstance(exc, RateLimitError):
        return StravaRateLimitError(exc.retry_after)
    return StravaAPIError(str(exc), details={"provider_code": exc.code} if exc.code else None)


async def tri_pacer_error_handler(
    request: Request,
    exc: TriPacerError,
) -> JSONResponse:
    """Handle all TriPacerError exceptions."""
    return create_error_response(
        status_code=exc.status_code,
        code=exc.code.value,
        message=exc.message,
        details=exc.details if exc.details else None,
    )


async def integration_error_handler(
    request: Request,
    exc: IntegrationError,
) -> JSONResponse:
    """Handle integration errors that escaped a route."""
    logger.warning(f"Integration error from {exc.provider or 'provider'}: {exc}")
    return await tri_pacer_error_handler(request, integration_error_to_api_error(exc))


async def pydantic_validation_error_handler(
    request: Request,
    exc: PydanticValidationError | RequestValidationError,
) -> JSONResponse:
    """Handle Pydantic and request validation errors."""
    errors = []
    for error in exc.errors():
        loc = ".".join(str(x) for x in error["loc"])
        errors.append({
            "field": loc,
            "message": error["msg"],
            "type": error["type"],
        })

    return create_error_response(
        status_code=422,
        code=ErrorCode.VALIDATION_ERROR.value,
        message="Request validation failed",
        details={"errors": errors},
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {exc}\n{traceback.format_exc()}"
    )

    return create_error_response(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR.value,
        message="An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(TriPacerError, tri_pacer_error_handler)
    app.add_exception_handler(IntegrationError, integration_error_handler)

    app.add_exception_handler(RequestValidationError, pydantic_validation_error_handler)
    app.add_exception_handler(PydanticValidationError, pydantic_validation_error_handler)

    # Must stay last: catches every remaining Exception type
    app.add_exception_handler(Exception, generic_exception_handler)
