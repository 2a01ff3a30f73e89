"""
Field-level error handling

Request validation errors and service-level field errors share one response
shape so that clients can turn them into a form error map:

    400 {"errors": [{"field": "email", "message": "Email already in use"}]}
"""
import logging
from typing import Any, Iterable

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

_VALUE_ERROR_PREFIX = "Value error, "


class FieldValidationError(Exception):
    """Raised by services when a single input field is rejected."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


def serialize_validation_errors(errors: Iterable[dict[str, Any]]) -> list[dict[str, str]]:
    """
    Map pydantic error dicts to {"field", "message"} pairs. The field is the
    last element of the error location (the JSON / form key).
    """
    serialized = []
    for error in errors:
        loc = error.get("loc") or ()
        field = str(loc[-1]) if loc else "unknown"
        message = str(error.get("msg", ""))
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        serialized.append({"field": field, "message": message})
    return serialized


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = serialize_validation_errors(exc.errors())
    for error in errors:
        logger.warning(f"Validation failed on {request.url.path}: {error['field']} - {error['message']}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": errors},
    )


async def field_validation_exception_handler(request: Request, exc: FieldValidationError):
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": [{"field": exc.field, "message": exc.message}]},
    )


async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )
