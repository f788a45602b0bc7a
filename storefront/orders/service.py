from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from .models import Order, OrderLine
from ..users.models import User
from ..products.models import Product
from ..cart.service import CartService
from ..core.exceptions import EmptyCartError

logger = logging.getLogger(__name__)


class OrderService:

    @staticmethod
    def place_order(db: Session, user: User, payment_session_id: Optional[str] = None) -> Tuple[Order, bool]:
        """
        Turn the user's cart into an order.

        Snapshots every cart line, decrements stock and empties the cart in a
        single transaction. When ``payment_session_id`` already produced an
        order, that order is returned untouched. The second element of the
        result tells whether a new order was created.
        """
        if payment_session_id:
            existing = OrderService.find_by_payment_session(db, payment_session_id)
            if existing is not None:
                logger.info(f"Payment session {payment_session_id} already placed order {existing.id}")
                return existing, False

        lines = list(user.cart.values())
        if not lines:
            raise EmptyCartError()

        order = Order(
            user_id=user.id,
            user_email=user.email,
            user_name=user.name,
            payment_session_id=payment_session_id,
        )
        for line in lines:
            order.lines.append(OrderLine(
                product_id=line.product.id,
                product=line.product.snapshot(),
                quantity=line.quantity,
            ))

        try:
            db.add(order)
            for line in lines:
                # Stock is not re-checked here and may go below zero
                remaining = line.product.quantity - line.quantity
                if remaining < 0:
                    logger.warning(
                        f"Stock of product {line.product.id} goes negative ({remaining}) with order for user {user.id}"
                    )
                db.query(Product).filter(Product.id == line.product_id).update(
                    {Product.quantity: Product.quantity - line.quantity},
                    synchronize_session=False,
                )
            CartService.clear(user)
            db.commit()
        except IntegrityError:
            db.rollback()
            # Another request placed the order for this payment session first
            existing = OrderService.find_by_payment_session(db, payment_session_id) if payment_session_id else None
            if existing is None:
                raise
            return existing, False
        except Exception as e:
            logger.error(f"Error placing order for user {user.id}: {e}")
            db.rollback()
            raise

        db.refresh(order)
        logger.info(f"Placed order {order.id} with {len(order.lines)} line(s) for user {user.id}")
        return order, True

    @staticmethod
    def list_orders(db: Session, user_id: UUID) -> List[Order]:
        return (
            db.query(Order)
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
            .all()
        )

    @staticmethod
    def get_order(db: Session, user_id: UUID, order_id: UUID) -> Optional[Order]:
        """Get an order only if it belongs to the user."""
        return db.query(Order).filter(Order.id == order_id, Order.user_id == user_id).first()

    @staticmethod
    def find_by_payment_session(db: Session, payment_session_id: str) -> Optional[Order]:
        return db.query(Order).filter(Order.payment_session_id == payment_session_id).first()
