from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime
from sqlalchemy.orm import relationship

from printcart.data.database import Base


class LoyaltyTransactionModel(Base):
    __tablename__ = "loyalty_transactions"

    id = Column(Integer, primary_key=True)
    wallet_id = Column(Integer, ForeignKey("loyalty_wallets.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)

    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="SET NULL"), nullable=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)

    #signed: +earned, -redeemed
    delta = Column(Integer, nullable=False)
    reason = Column(String, nullable=False)  # earn, redeem, adjust
    note = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    wallet = relationship("LoyaltyWalletModel", back_populates="transactions")
