# storefront/core/infrastructure/email_service.py

import os
import logging
from typing import List, Tuple
from fastapi_mail import FastMail, MessageSchema, ConnectionConfig
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

conf = ConnectionConfig(
    MAIL_USERNAME = os.getenv("MAIL_USERNAME", "noreply@example.com"),
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "password"),
    MAIL_FROM = os.getenv("MAIL_FROM", "noreply@example.com"),
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587")),
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com"),
    MAIL_STARTTLS = os.getenv("MAIL_STARTTLS", "True").lower() == "true",
    MAIL_SSL_TLS = os.getenv("MAIL_SSL_TLS", "False").lower() == "true",
    USE_CREDENTIALS = True,
    VALIDATE_CERTS = True
)

# Toggle real email sending. In local/dev environments, leave EMAIL_ENABLED unset or set to "false"
EMAIL_ENABLED = os.getenv("EMAIL_ENABLED", "false").lower() == "true"


async def _send(message: MessageSchema, description: str) -> None:
    recipient = message.recipients[0]
    if not EMAIL_ENABLED:
        logger.info("EMAIL_ENABLED is false; skipping real email send. %s for %s", description, recipient)
        return

    try:
        fm = FastMail(conf)
        await fm.send_message(message)
        logger.info(f"{description} sent successfully to {recipient}")
    except Exception:
        # Sent after the response went out, so there is nobody left to report to
        logger.exception(f"Failed to send {description.lower()} to {recipient}")


async def send_order_confirmation_email(recipient_email: str, order_id: str, items: List[Tuple[str, int]]):
    """
    Sends the order confirmation listing every purchased product.

    Args:
        recipient_email (str): The buyer's email address.
        order_id (str): Id of the order that was placed.
        items (List[Tuple[str, int]]): (product title, quantity) pairs.
    """
    product_texts = ", ".join(f"{title} ({quantity})" for title, quantity in items)
    template = f"""
    <p>Your order #{order_id} had been confirmed</p>
    <p>The order consists of {product_texts}.</p>
    """

    message = MessageSchema(
        subject="Order Confirmed",
        recipients=[recipient_email],
        body=template,
        subtype="html"
    )
    await _send(message, "Order confirmation email")


async def send_password_reset_email(recipient_email: str, reset_link: str, name: str):
    """
    Sends the password reset link to a user.

    Args:
        recipient_email (str): The email address of the recipient.
        reset_link (str): The URL the user will click to reset their password.
        name (str): The name of the user, for personalization.
    """
    template = f"""
    <p>Hello {name},</p>
    <p>You have requested a password reset.</p>
    <p>Click <a href="{reset_link}">this link</a> to reset your password. The link is valid for one hour.</p>
    <p>Please ignore this message if you did not request a password reset.</p>
    """

    message = MessageSchema(
        subject="Reset Password",
        recipients=[recipient_email],
        body=template,
        subtype="html"
    )
    await _send(message, "Password reset email")
