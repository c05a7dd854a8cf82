# printcart/repos/price_tier_repo.py
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from printcart.data.models.price_tier import PriceTierModel
from printcart.domain.schemas import PriceTier


class PriceTierRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_tiers(self, store: str) -> List[PriceTier]:
        rows = self.db.execute(
            select(PriceTierModel).where(PriceTierModel.store == store).order_by(PriceTierModel.min_qty)
        ).scalars().all()
        return [PriceTier.model_validate(r) for r in rows]

    def replace_global_tiers(self, store: str, tiers: List[PriceTier]) -> int:
        self.db.execute(
            delete(PriceTierModel).where(
                PriceTierModel.scope == "global",
                PriceTierModel.scope_id.is_(None),
                PriceTierModel.store == store,
            )
        )
        for t in tiers:
            self.db.add(
                PriceTierModel(
                    scope="global",
                    scope_id=None,
                    store=store,
                    min_qty=t.min_qty,
                    max_qty=t.max_qty,
                    mult=t.mult,
                    floor_pct=t.floor_pct,
                )
            )
        self.db.flush()
        return len(tiers)
