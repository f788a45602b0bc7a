from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from ..database.core import Base
import uuid
from datetime import datetime, timezone


class Order(Base):
    __tablename__ = "orders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    # Denormalized identity of the buyer at order time
    user_email = Column(String, nullable=False)
    user_name = Column(String, nullable=False)
    # Stripe Checkout Session that paid for this order; makes order placement idempotent
    payment_session_id = Column(String, unique=True, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    lines = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
    )

    @property
    def total_amount(self) -> float:
        return sum(line.product["price"] * line.quantity for line in self.lines)


class OrderLine(Base):
    __tablename__ = "order_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id"), nullable=False, index=True)
    # No foreign key: the product may be edited or deleted after the purchase
    product_id = Column(Uuid(as_uuid=True), nullable=False)
    product = Column(JSON, nullable=False)  # snapshot of the product at order time
    quantity = Column(Integer, nullable=False)
    reviewed = Column(Boolean, nullable=False, default=False)

    order = relationship("Order", back_populates="lines")
