from pydantic import BaseModel, Field


class CheckoutSession(BaseModel):
    """Handle of a hosted payment session the client completes out-of-band."""
    session_id: str = Field(..., description="Stripe Checkout Session id")
    checkout_url: str = Field(..., description="Stripe-hosted payment page")
