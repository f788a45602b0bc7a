from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.orm.collections import attribute_keyed_dict
from ..database.core import Base
import uuid
from datetime import datetime, timezone


class User(Base):
    """
    SQLAlchemy model representing a shopper or seller account.

    The cart is exposed as a dict keyed by product id, so a product can only
    ever appear once in a user's cart.
    """
    __tablename__ = 'users'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    reset_token = Column(String, nullable=True, index=True)
    reset_token_expiration = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    cart = relationship(
        "CartLine",
        collection_class=attribute_keyed_dict("product_id"),
        cascade="all, delete-orphan",
        order_by="CartLine.id",
        back_populates="user",
    )

    def __repr__(self):
        return f"<User(email='{self.email}', name='{self.name}')>"
