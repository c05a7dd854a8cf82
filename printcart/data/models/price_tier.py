from sqlalchemy import Column, Integer, String, Numeric

from printcart.data.database import Base


class PriceTierModel(Base):
    __tablename__ = "price_tiers"

    id = Column(Integer, primary_key=True)
    scope = Column(String, nullable=False, default="global")  # global, category, product
    scope_id = Column(Integer, nullable=True)
    store = Column(String(2), nullable=False)  # US, CA

    min_qty = Column(Integer, nullable=False)
    max_qty = Column(Integer, nullable=True)  # NULL = open ended
    mult = Column(Numeric(6, 3), nullable=False)
    floor_pct = Column(Numeric(5, 3), nullable=True)
