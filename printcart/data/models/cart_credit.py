from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime
from sqlalchemy.orm import relationship

from printcart.data.database import Base


class CartCreditModel(Base):
    __tablename__ = "cart_credits"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)

    amount_cents = Column(Integer, nullable=False, default=0)
    reason = Column(String, nullable=False, default="credit")  # loyalty, promo, manual
    note = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    cart = relationship("CartModel", back_populates="credits")
