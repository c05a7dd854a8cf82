# printcart/services/pricing_service.py
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from printcart.domain.schemas import LinePrice, PriceTier
from printcart.domain.stores import currency_to_store, store_to_currency
from printcart.repos.price_tier_repo import PriceTierRepo
from printcart.services.markup import apply_tiered_markup, parse_tier_config
from printcart.services.vendor_pricing import parse_vendor_price_response
from printcart.utils.settings import MARKUP_TIERS_US, MARKUP_TIERS_CA
from printcart.utils.logging import get_logger

logger = get_logger(__name__)


def configured_tiers() -> Dict[str, List[PriceTier]]:
    return {
        "US": parse_tier_config(MARKUP_TIERS_US, "US"),
        "CA": parse_tier_config(MARKUP_TIERS_CA, "CA"),
    }


def normalize_option_ids(option_ids) -> List[int]:
    out = []
    for o in option_ids or []:
        if isinstance(o, bool):
            continue
        try:
            out.append(int(o))
        except (TypeError, ValueError):
            continue
    return out


class PricingService:
    """
    Vendor trade cost -> tiered markup -> sell price in cents.

    vendor is anything with fetch_trade_price(product_id, option_ids, quantity, store) -> dict.
    Tiers come from the price_tiers table; MARKUP_TIERS_* supplies the global
    ladder for a store whose table rows hold no global tier.
    """

    def __init__(
        self,
        db: Session,
        vendor,
        fallback_tiers: Optional[Dict[str, List[PriceTier]]] = None,
    ):
        self.tier_repo = PriceTierRepo(db)
        self.vendor = vendor
        self.fallback_tiers = fallback_tiers if fallback_tiers is not None else configured_tiers()

    def tiers_for(self, store: str) -> List[PriceTier]:
        tiers = self.tier_repo.list_tiers(store)
        #scoped overrides alone keep the configured ladder underneath them
        if any(t.scope == "global" for t in tiers):
            return tiers
        return tiers + list(self.fallback_tiers.get(store, []))

    def compute_line_price(
        self,
        product_id: int,
        store: str,
        quantity: int,
        option_ids: List[int],
        category_id: Optional[int] = None,
    ) -> LinePrice:
        """
        Use Case: price one cart line.

        Raises InvalidVendorPriceError when the vendor gives no usable cost and
        ConfigurationError when no tier applies. Vendor I/O errors propagate.
        """
        if product_id is None or int(product_id) <= 0:
            raise ValueError("product_id must be positive")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError("quantity must be a positive integer")

        opts = normalize_option_ids(option_ids)
        if not opts:
            raise ValueError("option_ids are required")

        store = currency_to_store(store)

        raw = self.vendor.fetch_trade_price(int(product_id), opts, quantity, store)
        cost = parse_vendor_price_response(raw, quantity)

        marked = apply_tiered_markup(
            store,
            quantity,
            tiers=self.tiers_for(store),
            line_cost_cents=cost.line_cost_cents,
            product_id=int(product_id),
            category_id=category_id,
        )

        logger.info(
            f"Priced product {product_id} x{quantity} ({store}): "
            f"cost {cost.line_cost_cents} ({cost.source}) -> sell {marked.line_sell_cents}"
        )

        return LinePrice(
            currency=store_to_currency(store),
            quantity=quantity,
            unit_sell_cents=marked.unit_sell_cents,
            line_sell_cents=marked.line_sell_cents,
            unit_cost_cents=cost.unit_cost_cents,
            line_cost_cents=cost.line_cost_cents,
        )
