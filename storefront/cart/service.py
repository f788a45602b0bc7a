from sqlalchemy.orm import Session
from uuid import UUID
import logging

from .models import CartLine
from ..users.models import User
from ..products.models import Product
from ..core.exceptions import CartQuantityError, ErrorCode
from ..schemas.cart import CartLineResponse, CartResponse

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND_MESSAGE = "Product not found"
MAX_QUANTITY_MESSAGE = "Max Quantity reached"
MIN_QUANTITY_MESSAGE = "Minimum number for the quantity reached"


class CartService:
    """
    Operations on a user's cart. ``User.cart`` is a dict keyed by product id,
    so every lookup here is a key lookup and a product has at most one line.
    """

    @staticmethod
    def count_items(user: User) -> int:
        return sum(line.quantity for line in user.cart.values())

    @staticmethod
    def total_sum(user: User) -> float:
        """Priced with the products' current prices, not the price at add time."""
        return sum(line.product.price * line.quantity for line in user.cart.values())

    @staticmethod
    def view_cart(user: User) -> CartResponse:
        return CartResponse(
            items=[CartLineResponse.model_validate(line) for line in user.cart.values()],
            total_sum=CartService.total_sum(user),
            num_items=CartService.count_items(user),
        )

    @staticmethod
    def add_to_cart(db: Session, user: User, product_id: UUID) -> bool:
        """
        Add one unit of a product. Returns False when the product does not exist.
        """
        product = db.get(Product, product_id)
        if product is None:
            logger.info(f"User {user.id} tried to add unknown product {product_id} to the cart")
            return False

        try:
            line = user.cart.get(product.id)
            if line is None:
                user.cart[product.id] = CartLine(product_id=product.id, quantity=1)
            else:
                line.quantity += 1
            db.commit()
        except Exception as e:
            logger.error(f"Error adding product {product_id} to cart of user {user.id}: {e}")
            db.rollback()
            raise

        logger.info(f"Added product {product_id} to cart of user {user.id}")
        return True

    @staticmethod
    def increment_line(db: Session, user: User, product_id: UUID) -> CartResponse:
        line = user.cart.get(product_id)
        if line is None:
            raise CartQuantityError(ErrorCode.CART_LINE_NOT_FOUND, PRODUCT_NOT_FOUND_MESSAGE)

        if line.quantity >= line.product.quantity:
            raise CartQuantityError(ErrorCode.MAX_QUANTITY_REACHED, MAX_QUANTITY_MESSAGE)

        try:
            line.quantity += 1
            db.commit()
        except Exception as e:
            logger.error(f"Error incrementing cart line {product_id} of user {user.id}: {e}")
            db.rollback()
            raise

        return CartService.view_cart(user)

    @staticmethod
    def decrement_line(db: Session, user: User, product_id: UUID) -> CartResponse:
        line = user.cart.get(product_id)
        if line is None:
            raise CartQuantityError(ErrorCode.CART_LINE_NOT_FOUND, PRODUCT_NOT_FOUND_MESSAGE)

        # Lines are only ever removed explicitly
        if line.quantity <= 1:
            raise CartQuantityError(ErrorCode.MIN_QUANTITY_REACHED, MIN_QUANTITY_MESSAGE)

        try:
            line.quantity -= 1
            db.commit()
        except Exception as e:
            logger.error(f"Error decrementing cart line {product_id} of user {user.id}: {e}")
            db.rollback()
            raise

        return CartService.view_cart(user)

    @staticmethod
    def remove_line(db: Session, user: User, product_id: UUID) -> bool:
        """Delete a line whatever its quantity. Missing lines are ignored."""
        if product_id not in user.cart:
            return False

        try:
            del user.cart[product_id]
            db.commit()
        except Exception as e:
            logger.error(f"Error removing cart line {product_id} of user {user.id}: {e}")
            db.rollback()
            raise

        logger.info(f"Removed product {product_id} from cart of user {user.id}")
        return True

    @staticmethod
    def clear(user: User) -> None:
        """Empty the cart without committing; the caller owns the transaction."""
        user.cart.clear()
