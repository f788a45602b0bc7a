from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session, Query

from .models import Product
from ..cart.models import CartLine
from ..reviews.models import Review
from ..schemas.products import ProductForm
from ..utils.pagination import Pagination, paginate
from ..core.config import settings

logger = logging.getLogger(__name__)


def escape_like(term: str) -> str:
    """Make ``term`` match literally inside a LIKE pattern."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductService:

    @staticmethod
    def _catalog_query(db: Session) -> Query:
        # id breaks rating ties so consecutive pages never overlap
        return db.query(Product).order_by(Product.rating.desc(), Product.id)

    @staticmethod
    def list_top_rated(db: Session, limit: int = settings.INDEX_PRODUCTS_LIMIT) -> List[Product]:
        return ProductService._catalog_query(db).limit(limit).all()

    @staticmethod
    def list_products(db: Session, page: int, per_page: int = settings.PRODUCTS_PER_PAGE) -> Pagination:
        return paginate(ProductService._catalog_query(db), page, per_page)

    @staticmethod
    def search_products(db: Session, term: str, page: int, per_page: int = settings.PRODUCTS_PER_PAGE) -> Pagination:
        """Case-insensitive substring match against title or category."""
        pattern = f"%{escape_like(term)}%"
        query = ProductService._catalog_query(db).filter(
            or_(
                Product.title.ilike(pattern, escape="\\"),
                Product.category.ilike(pattern, escape="\\"),
            )
        )
        return paginate(query, page, per_page)

    @staticmethod
    def get_product(db: Session, product_id: UUID) -> Optional[Product]:
        return db.get(Product, product_id)

    @staticmethod
    def get_product_with_reviews(db: Session, product_id: UUID) -> Optional[Tuple[Product, List[Review]]]:
        product = db.get(Product, product_id)
        if product is None:
            return None
        reviews = (
            db.query(Review)
            .filter(Review.product_id == product.id)
            .order_by(Review.created_at)
            .all()
        )
        return product, reviews

    @staticmethod
    def list_owner_products(db: Session, owner_id: UUID, page: int,
                            per_page: int = settings.PRODUCTS_PER_PAGE) -> Pagination:
        query = (
            db.query(Product)
            .filter(Product.user_id == owner_id)
            .order_by(Product.created_at.desc(), Product.id)
        )
        return paginate(query, page, per_page)

    @staticmethod
    def get_owned_product(db: Session, owner_id: UUID, product_id: UUID) -> Optional[Product]:
        return (
            db.query(Product)
            .filter(Product.id == product_id, Product.user_id == owner_id)
            .first()
        )

    @staticmethod
    def create_product(db: Session, owner_id: UUID, form: ProductForm, image_url: str) -> Product:
        product = Product(
            title=form.title,
            price=form.price,
            description=form.description,
            quantity=form.quantity,
            category=form.category.value,
            image_url=image_url,
            user_id=owner_id,
        )
        try:
            db.add(product)
            db.commit()
            db.refresh(product)
        except Exception as e:
            logger.error(f"Error creating product for user {owner_id}: {e}")
            db.rollback()
            raise

        logger.info(f"User {owner_id} created product {product.id}")
        return product

    @staticmethod
    def update_product(db: Session, owner_id: UUID, product_id: UUID, form: ProductForm,
                       image_url: Optional[str] = None) -> Optional[Product]:
        """
        Update a product the caller owns. The image is only replaced when a new
        one was uploaded. Returns None when no owned product matches.
        """
        product = ProductService.get_owned_product(db, owner_id, product_id)
        if product is None:
            logger.info(f"User {owner_id} tried to update product {product_id} they do not own")
            return None

        product.title = form.title
        product.price = form.price
        product.description = form.description
        product.quantity = form.quantity
        product.category = form.category.value
        if image_url:
            product.image_url = image_url
        product.updated_at = datetime.now(timezone.utc)

        try:
            db.commit()
            db.refresh(product)
        except Exception as e:
            logger.error(f"Error updating product {product_id}: {e}")
            db.rollback()
            raise

        return product

    @staticmethod
    def delete_product(db: Session, owner_id: UUID, product_id: UUID) -> bool:
        """
        Delete a product the caller owns, together with the cart lines and
        reviews pointing at it. Order snapshots are left alone.
        """
        product = ProductService.get_owned_product(db, owner_id, product_id)
        if product is None:
            logger.info(f"User {owner_id} tried to delete product {product_id} they do not own")
            return False

        try:
            db.query(CartLine).filter(CartLine.product_id == product.id).delete(synchronize_session=False)
            db.query(Review).filter(Review.product_id == product.id).delete(synchronize_session=False)
            db.delete(product)
            db.commit()
        except Exception as e:
            logger.error(f"Error deleting product {product_id}: {e}")
            db.rollback()
            raise

        logger.info(f"User {owner_id} deleted product {product_id}")
        return True
