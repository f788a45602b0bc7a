from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from ..database.core import Base
import enum
import uuid
from datetime import datetime, timezone


class ProductCategory(str, enum.Enum):
    PHONE = "phone"
    LAPTOP = "laptop"
    GAME_CONSOLE = "game console"
    DESKTOP = "desktop"
    MONITOR = "monitor"
    ACCESSORIES = "accessories"


class Product(Base):
    __tablename__ = "products"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    image_url = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    description = Column(Text, nullable=False)
    # Units in stock
    quantity = Column(Integer, nullable=False)
    # Stored as the plain category value so it can be searched with ILIKE
    category = Column(String, nullable=False, index=True)
    # Mean of all review ratings, recomputed on every new review
    rating = Column(Float, nullable=False, default=0)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=True)

    owner = relationship("User")

    def snapshot(self) -> dict:
        """Copy of the product's fields, detached from later edits."""
        return {
            "id": str(self.id),
            "title": self.title,
            "image_url": self.image_url,
            "price": self.price,
            "description": self.description,
            "quantity": self.quantity,
            "category": self.category,
            "rating": self.rating,
            "user_id": str(self.user_id),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
