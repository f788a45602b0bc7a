from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from ..database.core import Base
import uuid
from datetime import datetime, timezone


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    review = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    author = relationship("User")
