from typing import Optional
from uuid import UUID
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from .models import Review
from ..orders.models import Order, OrderLine
from ..products.models import Product
from ..users.models import User
from ..core.exceptions import ReviewTargetNotFoundError

logger = logging.getLogger(__name__)


class ReviewService:

    @staticmethod
    def find_order_line(db: Session, user_id: UUID, order_id: UUID, product_id: UUID) -> Optional[OrderLine]:
        """The line of one of the user's own orders that bought ``product_id``."""
        return (
            db.query(OrderLine)
            .join(Order, OrderLine.order_id == Order.id)
            .filter(
                Order.id == order_id,
                Order.user_id == user_id,
                OrderLine.product_id == product_id,
            )
            .first()
        )

    @staticmethod
    def submit_review(db: Session, author: User, order_id: UUID, product_id: UUID,
                      rating: int, text: str) -> Review:
        """
        Record a review and refresh the product's mean rating.

        The review insert, the rating update and flagging the order line as
        reviewed are committed together; if the order line cannot be found
        nothing is written.
        """
        try:
            product = db.get(Product, product_id)
            if product is None:
                raise ReviewTargetNotFoundError(str(order_id), str(product_id))

            review = Review(review=text, rating=rating, product_id=product_id, user_id=author.id)
            db.add(review)
            db.flush()

            mean_rating = (
                db.query(func.avg(Review.rating))
                .filter(Review.product_id == product_id)
                .scalar()
            )
            product.rating = float(mean_rating)

            line = (
                db.query(OrderLine)
                .filter(OrderLine.order_id == order_id, OrderLine.product_id == product_id)
                .first()
            )
            if line is None:
                raise ReviewTargetNotFoundError(str(order_id), str(product_id))
            line.reviewed = True

            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"User {author.id} reviewed product {product_id} with rating {rating}")
        return review
