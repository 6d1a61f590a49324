"""Centralized exception handlers for the FastAPI application.

Every failure leaves the API in the same envelope as a success:

    {"statusCode": 401, "success": false, "message": "...", "data": null, "timestamp": "..."}

Usage:
    from api.exception_handlers import setup_exception_handlers

    app = FastAPI()
    setup_exception_handlers(app)
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ApiResponse
from auth.dependencies import authorize_unrouted_request, basic_credentials
from auth.errors import AuthError, INTERNAL_ERROR_MESSAGE

logger = logging.getLogger(__name__)

VALIDATION_FAILED_MESSAGE = "Validation failed"

# Statuses Starlette raises when no route handles the request
UNROUTED_STATUSES = (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED)


def _create_error_response(status_code: int, message: str, data=None, headers=None) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.error(status_code, message, data).to_content(),
        headers=headers,
    )


def _auth_error_response(request: Request, exc: AuthError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}")
    else:
        logger.info(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}"
        )
    return _create_error_response(exc.status_code, exc.message, headers=exc.headers)


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    """Flatten every validation error into {field, message} pairs"""
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({
            "field": ".".join(location),
            "message": error.get("msg", "Invalid value"),
        })
    return errors


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI application."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        return _auth_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _create_error_response(
            status.HTTP_400_BAD_REQUEST,
            VALIDATION_FAILED_MESSAGE,
            data=_field_errors(exc),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in UNROUTED_STATUSES:
            # No route dependency ran, so the access policy has not been applied yet
            credentials = await basic_credentials(request)
            try:
                await run_in_threadpool(authorize_unrouted_request, request, credentials)
            except AuthError as e:
                return _auth_error_response(request, e)

        return _create_error_response(
            exc.status_code,
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all: log the real error, return only a generic message."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return _create_error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            INTERNAL_ERROR_MESSAGE,
        )
