from typing import List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from ..cart.models import CartLine
from ..cart.service import CartService
from ..core.exceptions import EmptyCartError, PaymentNotCompletedError, SoldOutError
from ..orders.models import Order
from ..orders.service import OrderService
from ..schemas.cart import CartResponse
from ..schemas.checkout import CheckoutSession
from ..services import stripe_service
from ..users.models import User
from ..utils.identifiers import parse_uuid

logger = logging.getLogger(__name__)


class CheckoutService:

    @staticmethod
    def validate_cart(user: User) -> List[CartLine]:
        """
        Check every cart line against the product's current stock.

        Raises for the first line asking for more than is available; the cart
        itself is never modified here.
        """
        lines = list(user.cart.values())
        if not lines:
            raise EmptyCartError()

        for line in lines:
            if line.quantity > line.product.quantity:
                raise SoldOutError(line.product.title, line.quantity, line.product.quantity)
        return lines

    @staticmethod
    def initiate_checkout(user: User) -> Tuple[CheckoutSession, CartResponse]:
        lines = CheckoutService.validate_cart(user)
        cart = CartService.view_cart(user)
        session = stripe_service.create_checkout_session(user, lines)
        logger.info(f"User {user.id} started checkout {session.session_id} for {cart.total_sum}")
        return session, cart

    @staticmethod
    def confirm_payment(db: Session, user: User, session_id: str) -> Tuple[Order, bool]:
        """Place the order for a Checkout Session the user has paid."""
        session = stripe_service.retrieve_session(session_id)
        if session["payment_status"] != "paid" or session["client_reference_id"] != str(user.id):
            raise PaymentNotCompletedError(session_id, session["payment_status"])
        return OrderService.place_order(db, user, payment_session_id=session_id)

    @staticmethod
    def handle_webhook(db: Session, payload: bytes, signature: str) -> Optional[Tuple[Order, bool]]:
        event = stripe_service.verify_webhook_signature(payload, signature)
        session = stripe_service.completed_checkout_session(event)
        if session is None:
            return None

        user_id = parse_uuid(session["client_reference_id"])
        user = db.get(User, user_id) if user_id else None
        if user is None:
            logger.warning(f"Checkout session {session['id']} references unknown user {session['client_reference_id']}")
            return None

        try:
            return OrderService.place_order(db, user, payment_session_id=session["id"])
        except EmptyCartError:
            logger.warning(f"Checkout session {session['id']} completed but the cart of user {user.id} is empty")
            return None
