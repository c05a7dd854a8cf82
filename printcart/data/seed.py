# printcart/data/seed.py
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from printcart.data.database import SessionLocal
from printcart.domain.schemas import PriceTier
from printcart.repos.price_tier_repo import PriceTierRepo
from printcart.services.markup import validate_tier_ladder
from printcart.services.pricing_service import configured_tiers
from printcart.utils.logging import get_logger

logger = get_logger(__name__)


def seed_price_tiers(db: Session, tiers_by_store: Optional[Dict[str, List[PriceTier]]] = None) -> int:
    """
    Replace the global tiers of each store with the given ladders (default:
    MARKUP_TIERS_US / MARKUP_TIERS_CA). All stores are validated before
    anything is written; the replacement is one transaction.
    """
    tiers_by_store = tiers_by_store if tiers_by_store is not None else configured_tiers()

    for store, tiers in tiers_by_store.items():
        if not tiers:
            raise ValueError(f"No tiers configured for store {store}")
        validate_tier_ladder(tiers)

    repo = PriceTierRepo(db)
    try:
        written = sum(repo.replace_global_tiers(store, tiers) for store, tiers in tiers_by_store.items())
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Seeded {written} global price tiers for {', '.join(sorted(tiers_by_store))}")
    return written


def seed():
    db = SessionLocal()
    try:
        seed_price_tiers(db)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
