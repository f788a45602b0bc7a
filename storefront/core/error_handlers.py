# storefront/core/error_handlers.py

from fastapi import FastAPI, Request, HTTPException, status
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
import logging
import traceback
import uuid
from typing import Any, Dict, List

from .exceptions import (
    StorefrontError,
    CartQuantityError,
    LoginRequiredError,
    ErrorCode
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An internal server error occurred. Please try again later."

# Infrastructure failures are never shown to the user in detail
STATUS_CODE_MAP = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.CSRF_TOKEN_INVALID: 403,
    ErrorCode.AUTHENTICATION_REQUIRED: 401,
    ErrorCode.CART_LINE_NOT_FOUND: 400,
    ErrorCode.MAX_QUANTITY_REACHED: 400,
    ErrorCode.MIN_QUANTITY_REACHED: 400,
    ErrorCode.PRODUCT_SOLD_OUT: 400,
    ErrorCode.EMPTY_CART: 400,
    ErrorCode.REVIEW_TARGET_NOT_FOUND: 404,
    ErrorCode.PAYMENT_NOT_COMPLETED: 400,
    ErrorCode.PAYMENT_PROVIDER_ERROR: 500,
    ErrorCode.STORAGE_ERROR: 500,
    ErrorCode.INTERNAL_SERVER_ERROR: 500,
    ErrorCode.RATE_LIMIT_EXCEEDED: 429,
}


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Flatten pydantic error dicts into one entry per field."""
    formatted = []
    for error in errors:
        loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path", "form")]
        formatted.append({
            "field": " -> ".join(loc),
            "message": error["msg"],
            "type": error["type"],
        })
    return formatted


def setup_error_handlers(app: FastAPI):
    """Set up global error handlers for the FastAPI application."""

    @app.exception_handler(LoginRequiredError)
    async def login_required_handler(request: Request, exc: LoginRequiredError):
        return RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)

    @app.exception_handler(CartQuantityError)
    async def cart_quantity_error_handler(request: Request, exc: CartQuantityError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.user_message})

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        """Handle custom storefront errors."""
        status_code = STATUS_CODE_MAP.get(exc.code, 400)

        logger.error(
            f"Storefront Error: {exc.code.value}",
            extra={
                "error_code": exc.code.value,
                "user_message": exc.user_message,
                "technical_details": exc.technical_details,
                "context": exc.context,
                "request_url": str(request.url),
                "request_method": request.method,
            }
        )

        if status_code >= 500:
            return JSONResponse(
                status_code=status_code,
                content={"error": {"code": exc.code.value, "message": GENERIC_ERROR_MESSAGE}}
            )

        return JSONResponse(status_code=status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with better formatting."""
        errors = format_validation_errors(exc.errors())

        logger.warning(
            "Validation error",
            extra={
                "validation_errors": errors,
                "request_url": str(request.url),
                "request_method": request.method
            }
        )

        return JSONResponse(
            status_code=422,
            content={
                "error": {
                    "code": ErrorCode.VALIDATION_ERROR.value,
                    "message": "Request validation failed",
                    "details": errors
                }
            }
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle standard HTTP exceptions with consistent format."""
        logger.warning(
            f"HTTP Exception: {exc.status_code}",
            extra={
                "status_code": exc.status_code,
                "detail": exc.detail,
                "request_url": str(request.url),
                "request_method": request.method
            }
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": f"HTTP_{exc.status_code}",
                    "message": exc.detail,
                    "status_code": exc.status_code
                }
            }
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={
                "error": {
                    "code": ErrorCode.RATE_LIMIT_EXCEEDED.value,
                    "message": "Too many requests. Please try again later."
                }
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions with proper logging."""
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
            extra={
                "exception_type": type(exc).__name__,
                "request_url": str(request.url),
                "request_method": request.method,
                "traceback": traceback.format_exc()
            }
        )

        # Don't expose internal details
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.INTERNAL_SERVER_ERROR.value,
                    "message": GENERIC_ERROR_MESSAGE
                }
            }
        )


# Middleware for request ID tracking
async def add_request_id_middleware(request: Request, call_next):
    """Add request ID for better error tracking."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response
