from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from printcart.data.database import Base


class LoyaltyWalletModel(Base):
    __tablename__ = "loyalty_wallets"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, unique=True)

    points_balance = Column(Integer, nullable=False, default=0)
    lifetime_earned = Column(Integer, nullable=False, default=0)
    lifetime_redeemed = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    transactions = relationship(
        "LoyaltyTransactionModel",
        back_populates="wallet",
        cascade="all, delete-orphan",
    )
