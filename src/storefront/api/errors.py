"""Maps engine errors onto HTTP responses.

Validation and availability errors carry their own actionable message.
System errors get a generic message and are reported to monitoring; nothing
internal leaks into the response body.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import (
    InsufficientStock,
    ProductUnavailable,
    StoreTimeout,
    StoreUnavailable,
    Unauthorized,
    classify,
)
from storefront.monitoring import report_failure

logger = structlog.get_logger(__name__)

GENERIC_MESSAGE = "Something went wrong, please retry."


def _first_message(messages) -> str:
    if isinstance(messages, dict):
        for value in messages.values():
            if isinstance(value, list | tuple) and value:
                return str(value[0])
            if value:
                return str(value)
    return str(messages) if messages else "Invalid request"


def _body(exc, message, details=None) -> dict:
    return {"error": type(exc).__name__, "message": message, "details": details}


async def _validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
    messages = getattr(exc, "messages", None)
    return JSONResponse(status_code=400, content=_body(exc, _first_message(messages), messages))


async def _availability_error(_request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=409, content=_body(exc, str(exc), getattr(exc, "messages", None)))


async def _not_found(_request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=_body(exc, "Not found"))


async def _unauthorized(_request: Request, exc: Unauthorized) -> JSONResponse:
    return JSONResponse(status_code=403, content=_body(exc, str(exc)))


async def _store_failure(request: Request, exc: Exception) -> JSONResponse:
    report_failure(exc, component="api", operation=request.url.path, method=request.method)
    return JSONResponse(
        status_code=503,
        content=_body(exc, GENERIC_MESSAGE, {"retryable": True}),
        headers={"Retry-After": "1"},
    )


async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "api.unhandled_error",
        path=request.url.path,
        kind=classify(exc).value,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    report_failure(exc, component="api", operation=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"error": "InternalError", "message": GENERIC_MESSAGE, "details": None})


def register_error_handlers(app: FastAPI) -> None:
    """Install the storefront error mapping on ``app``."""
    register_exception_handlers(app)

    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ProductUnavailable, _availability_error)
    app.add_exception_handler(InsufficientStock, _availability_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(Unauthorized, _unauthorized)
    app.add_exception_handler(StoreTimeout, _store_failure)
    app.add_exception_handler(StoreUnavailable, _store_failure)
    app.add_exception_handler(Exception, _unexpected)
