# Core infrastructure services
from .email_service import send_order_confirmation_email, send_password_reset_email
from .rate_limiter import limiter
from .storage import upload_product_image, delete_product_image, is_allowed_image

__all__ = [
    "send_order_confirmation_email",
    "send_password_reset_email",
    "limiter",
    "upload_product_image",
    "delete_product_image",
    "is_allowed_image",
]
