#printcart/data/models/cart.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, JSON, Index
from sqlalchemy.orm import relationship

from printcart.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    sid = Column(String, nullable=False)
    user_id = Column(String, nullable=True)

    status = Column(String, nullable=False, default="open")  # open, closed
    currency = Column(String(3), nullable=False, default="USD")

    #SQL NULL until a shipping option is chosen
    selected_shipping = Column(JSON, nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    lines = relationship(
        "CartLineModel",
        back_populates="cart",
        cascade="all, delete-orphan",
    )
    credits = relationship(
        "CartCreditModel",
        back_populates="cart",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("carts_sid_status_idx", "sid", "status"),)
