import stripe
import logging
from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status

from ..cart.models import CartLine
from ..core.config import settings
from ..core.exceptions import PaymentProviderError
from ..schemas.checkout import CheckoutSession
from ..users.models import User

logger = logging.getLogger(__name__)

# Initialize Stripe
stripe.api_key = settings.STRIPE_SECRET_KEY

CHECKOUT_COMPLETED_EVENT = "checkout.session.completed"


def success_url() -> str:
    # Stripe substitutes the placeholder with the session id on redirect
    return f"{settings.BASE_URL}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}"


def cancel_url() -> str:
    return f"{settings.BASE_URL}/checkout/cancel"


def build_line_items(lines: List[CartLine]) -> List[Dict[str, Any]]:
    """Stripe line items priced in the currency's minor unit."""
    return [
        {
            "price_data": {
                "currency": settings.STRIPE_CURRENCY,
                "product_data": {"name": line.product.title},
                "unit_amount": int(round(line.product.price * 100)),
            },
            "quantity": line.quantity,
        }
        for line in lines
    ]


def create_checkout_session(user: User, lines: List[CartLine]) -> CheckoutSession:
    """
    Create a hosted Stripe Checkout Session for the given cart lines.

    The user id travels as ``client_reference_id`` so the success redirect
    and the webhook can tie the payment back to the buyer.
    """
    try:
        session = stripe.checkout.Session.create(
            line_items=build_line_items(lines),
            mode="payment",
            success_url=success_url(),
            cancel_url=cancel_url(),
            payment_method_types=["card"],
            client_reference_id=str(user.id),
            customer_email=user.email,
            metadata={"user_id": str(user.id)},
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe rejected checkout session for user {user.id}: {e}")
        raise PaymentProviderError(technical_details=str(e))

    logger.info(f"Checkout session created successfully: {session.id}")
    return CheckoutSession(session_id=session.id, checkout_url=session.url)


def retrieve_session(session_id: str):
    try:
        return stripe.checkout.Session.retrieve(session_id)
    except stripe.StripeError as e:
        logger.error(f"Could not retrieve checkout session {session_id}: {e}")
        raise PaymentProviderError(technical_details=str(e))


def verify_webhook_signature(payload: bytes, signature: str):
    """
    Verify the webhook signature to ensure it's from Stripe
    """
    try:
        return stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
    except ValueError:
        logger.warning("Invalid payload received in webhook")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload"
        )
    except Exception:
        logger.warning("Invalid signature in webhook")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid signature"
        )


def completed_checkout_session(event) -> Optional[Any]:
    """The paid Checkout Session carried by a webhook event, if any."""
    event_type = event["type"]
    logger.info(f"Processing webhook event: {event_type}")

    if event_type != CHECKOUT_COMPLETED_EVENT:
        logger.info(f"Unhandled event type: {event_type}")
        return None

    session = event["data"]["object"]
    if session["payment_status"] != "paid":
        logger.info(f"Checkout session {session['id']} completed without payment")
        return None
    return session
