# storefront/core/exceptions.py

from enum import Enum
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    # Request errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CSRF_TOKEN_INVALID = "CSRF_TOKEN_INVALID"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"

    # Cart / checkout business rules
    CART_LINE_NOT_FOUND = "CART_LINE_NOT_FOUND"
    MAX_QUANTITY_REACHED = "MAX_QUANTITY_REACHED"
    MIN_QUANTITY_REACHED = "MIN_QUANTITY_REACHED"
    PRODUCT_SOLD_OUT = "PRODUCT_SOLD_OUT"
    EMPTY_CART = "EMPTY_CART"

    # Orders and reviews
    REVIEW_TARGET_NOT_FOUND = "REVIEW_TARGET_NOT_FOUND"
    PAYMENT_NOT_COMPLETED = "PAYMENT_NOT_COMPLETED"

    # External collaborators
    PAYMENT_PROVIDER_ERROR = "PAYMENT_PROVIDER_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"

    # System errors
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"


class StorefrontError(Exception):
    """Base exception for all storefront application errors."""

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        technical_details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.user_message = user_message
        self.technical_details = technical_details
        self.context = context or {}

        logger.warning(
            f"Storefront Error: {code.value}",
            extra={
                "error_code": code.value,
                "user_message": user_message,
                "technical_details": technical_details,
                "context": self.context,
            }
        )

        super().__init__(self.user_message)

    def to_response(self) -> Dict[str, Any]:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.user_message,
                "context": self.context
            }
        }


class CartQuantityError(StorefrontError):
    """
    Business-rule violation raised by the quantity adjustment endpoints.
    Rendered as a bare ``{"message": ...}`` body.
    """

    def __init__(self, code: ErrorCode, user_message: str, status_code: int = 400):
        self.status_code = status_code
        super().__init__(code, user_message)


class LoginRequiredError(StorefrontError):
    """Raised by the authentication gate; answered with a redirect to the login page."""

    def __init__(self, path: str = ""):
        super().__init__(
            code=ErrorCode.AUTHENTICATION_REQUIRED,
            user_message="Please log in to continue.",
            context={"path": path}
        )


class CsrfError(StorefrontError):
    def __init__(self):
        super().__init__(
            code=ErrorCode.CSRF_TOKEN_INVALID,
            user_message="Invalid or missing CSRF token."
        )


class SoldOutError(StorefrontError):
    """A cart line asks for more units than the product currently has in stock."""

    def __init__(self, product_title: str, requested: int, available: int):
        self.product_title = product_title
        super().__init__(
            code=ErrorCode.PRODUCT_SOLD_OUT,
            user_message=f"{product_title} just sold out. Please delete it from the cart to continue.",
            context={
                "product_title": product_title,
                "requested": requested,
                "available": available
            }
        )


class EmptyCartError(StorefrontError):
    def __init__(self):
        super().__init__(code=ErrorCode.EMPTY_CART, user_message="Your cart is empty.")


class ReviewTargetNotFoundError(StorefrontError):
    def __init__(self, order_id: str, product_id: str):
        super().__init__(
            code=ErrorCode.REVIEW_TARGET_NOT_FOUND,
            user_message="The order line for this review could not be found.",
            context={"order_id": order_id, "product_id": product_id}
        )


class PaymentNotCompletedError(StorefrontError):
    def __init__(self, session_id: str, payment_status: Optional[str]):
        super().__init__(
            code=ErrorCode.PAYMENT_NOT_COMPLETED,
            user_message="The payment for this checkout has not been completed.",
            context={"session_id": session_id, "payment_status": payment_status}
        )


class PaymentProviderError(StorefrontError):
    def __init__(self, technical_details: str):
        super().__init__(
            code=ErrorCode.PAYMENT_PROVIDER_ERROR,
            user_message="The payment service is currently unavailable.",
            technical_details=technical_details
        )


class StorageError(StorefrontError):
    def __init__(self, technical_details: str, filename: Optional[str] = None):
        context = {}
        if filename:
            context["filename"] = filename
        super().__init__(
            code=ErrorCode.STORAGE_ERROR,
            user_message="The image could not be stored.",
            technical_details=technical_details,
            context=context
        )
