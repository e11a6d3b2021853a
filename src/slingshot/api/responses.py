"""Uniform response envelope and exception handlers."""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from slingshot.errors import SlingshotError

logger = logging.getLogger(__name__)


def success(data: Any = None) -> dict[str, Any]:
    """Wrap ``data`` in the success envelope."""
    return {"success": True, "data": data}


def failure(error: str, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        body["details"] = details
    return body


async def slingshot_error_handler(request: Request, exc: SlingshotError) -> JSONResponse:
    logger.warning(
        f"{request.method} {request.url.path} -> {exc.status_code} "
        f"{exc.error_code}: {exc.message}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(failure(exc.message, exc.details)),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=failure(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # ctx may hold exception instances, which are not JSON serializable
    details = [
        {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=failure("Invalid request", details))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=failure("Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{success: false, error, details?}``."""
    app.add_exception_handler(SlingshotError, slingshot_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
