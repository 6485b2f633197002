from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
import logging

from .exceptions import SixkulException

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Terjadi kesalahan pada server. Silakan coba lagi."


def error_body(message: str, errors=None) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


async def sixkul_exception_handler(request: Request, exc: SixkulException):
    """Handle domain exceptions"""
    if exc.status_code >= 500:
        logger.error(f"Error: {exc.detail} - Path: {request.url.path}")
    else:
        logger.warning(f"{exc.__class__.__name__}: {exc.detail} - Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail, exc.errors),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Permintaan tidak valid."
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc), "message": error.get("msg", "")})
    logger.warning(f"Validation failed: {errors} - Path: {request.url.path}")
    return JSONResponse(
        status_code=400,
        content=error_body("Data yang dikirim tidak valid.", errors),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unexpected error: {str(exc)} - Path: {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body(SERVER_ERROR_MESSAGE),
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(SixkulException, sixkul_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
