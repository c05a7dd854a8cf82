from sqlalchemy import Column, Integer, ForeignKey, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from printcart.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)

    #one order per cart, one order per payment reference
    cart_id = Column(Integer, ForeignKey("carts.id"), nullable=False, unique=True)
    provider = Column(String, nullable=False)  # stripe, free
    provider_reference = Column(String, nullable=True, unique=True)

    status = Column(String, nullable=False, default="placed")
    payment_status = Column(String, nullable=False, default="paid")  # paid, processing, pending

    currency = Column(String(3), nullable=False, default="USD")
    subtotal_cents = Column(Integer, nullable=False, default=0)
    shipping_cents = Column(Integer, nullable=False, default=0)
    tax_cents = Column(Integer, nullable=False, default=0)
    discount_cents = Column(Integer, nullable=False, default=0)
    credits_cents = Column(Integer, nullable=False, default=0)
    total_cents = Column(Integer, nullable=False, default=0)

    placed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
    )
