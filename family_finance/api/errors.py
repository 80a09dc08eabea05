"""
Exception handlers that turn service errors into HTTP responses.

Every error body has the same shape:

    {"error": {"code": ..., "message": ..., "details": ...}}

details is omitted when there are none, and always for 500s.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from family_finance.exceptions import FinanceError, ValidationError

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    401: "UNAUTHORIZED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


async def finance_error_handler(request: Request, exc: FinanceError) -> JSONResponse:
    route = f"{request.method} {request.url.path}"
    if exc.status_code >= 500:
        # The cause was already logged with its traceback by the service
        logger.error("%s -> %s %s", route, exc.status_code, exc.code)
    else:
        logger.warning("%s -> %s %s: %s", route, exc.status_code, exc.code, exc.message)

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.to_dict()},
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Schema failures use the same VALIDATION_ERROR shape as service rules."""
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    error = ValidationError("Invalid request data", details=details)
    return await finance_error_handler(request, error)


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in the same envelope."""
    code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": code, "message": str(exc.detail)}},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FinanceError, finance_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
