from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Request
import logging

from .service import CheckoutService
from ..cart.controller import render_cart
from ..core.exceptions import EmptyCartError, PaymentNotCompletedError, SoldOutError
from ..core.infrastructure import send_order_confirmation_email
from ..core.middleware.request_context import AuthContext, redirect
from ..database.core import DbSession
from ..orders.models import Order

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])


def queue_confirmation_email(background_tasks: BackgroundTasks, order: Order) -> None:
    items = [(line.product["title"], line.quantity) for line in order.lines]
    background_tasks.add_task(send_order_confirmation_email, order.user_email, str(order.id), items)


@router.get("")
async def get_checkout(ctx: AuthContext):
    """
    Re-validate the cart against current stock and open a hosted payment
    session. A sold out line sends the user back to the cart untouched.
    """
    try:
        session, cart = CheckoutService.initiate_checkout(ctx.user)
    except SoldOutError as e:
        ctx.flash("cartError", e.user_message)
        return redirect("/cart")
    except EmptyCartError:
        return redirect("/cart")

    return ctx.render(
        "/checkout",
        "Check Out",
        cart_items=cart.items,
        total_sum=cart.total_sum,
        session_id=session.session_id,
        checkout_url=session.checkout_url,
    )


@router.get("/success")
async def checkout_success(ctx: AuthContext, background_tasks: BackgroundTasks, session_id: Optional[str] = None):
    if not session_id:
        return redirect("/cart")

    try:
        order, created = CheckoutService.confirm_payment(ctx.db, ctx.user, session_id)
    except PaymentNotCompletedError as e:
        ctx.flash("cartError", e.user_message)
        return redirect("/cart")
    except EmptyCartError:
        return redirect("/cart")

    if created:
        queue_confirmation_email(background_tasks, order)
    return redirect("/orders")


@router.get("/cancel")
async def checkout_cancel(ctx: AuthContext):
    return render_cart(ctx, path="/checkout")


@router.post("/webhook")
async def stripe_webhook(request: Request, db: DbSession, background_tasks: BackgroundTasks):
    """Stripe calls this directly; authenticated by signature instead of session and CSRF."""
    payload = await request.body()
    signature = request.headers.get("stripe-signature", "")
    result = CheckoutService.handle_webhook(db, payload, signature)
    if result is not None:
        order, created = result
        if created:
            queue_confirmation_email(background_tasks, order)
    return {"received": True}
