"""
Exception handlers rendering every failure as {"success": false, "error", "code"}.
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from eventhive.core.exceptions import EventHiveError
from eventhive.core.logging import get_logger

logger = get_logger(__name__)


def error_body(message: str, code: str, **extra) -> dict:
    return {"success": False, "error": message, "code": code, **extra}


async def eventhive_error_handler(request: Request, exc: EventHiveError) -> JSONResponse:
    logger.info("request_rejected", code=exc.code, status_code=exc.status_code, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.code),
        headers=exc.headers,
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), "http_error"),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body("Invalid request", "validation", details=jsonable_encoder(exc.errors())),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", "internal"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EventHiveError, eventhive_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
