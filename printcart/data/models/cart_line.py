from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship

from printcart.data.database import Base


class CartLineModel(Base):
    __tablename__ = "cart_lines"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)
    option_ids = Column(JSON, nullable=False, default=list)

    quantity = Column(Integer, nullable=False, default=1)

    #pricing snapshot in cents, this is what gets charged
    unit_price_cents = Column(Integer, nullable=False, default=0)
    line_total_cents = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    cart = relationship("CartModel", back_populates="lines")
