# printcart/services/markup.py
"""
Tiered markup: vendor trade cost (cents) -> retail sell price (cents).

Pure functions, no I/O. The line total is what gets charged; the unit price
is derived from it so that unit * quantity never exceeds the line.
"""
import json
from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence

from printcart.domain.errors import ConfigurationError
from printcart.domain.schemas import MarkupResult, PriceTier
from printcart.domain.stores import currency_to_store

#lower rank = more specific
_SCOPE_RANK = {"product": 0, "category": 1, "global": 2}

_MAX_FLOOR_PCT = Decimal("10")


def _matches_scope(tier: PriceTier, product_id: Optional[int], category_id: Optional[int]) -> bool:
    if tier.scope == "global":
        return True
    if tier.scope == "product":
        return product_id is not None and tier.scope_id == product_id
    if tier.scope == "category":
        return category_id is not None and tier.scope_id == category_id
    return False


def _contains(tier: PriceTier, quantity: int) -> bool:
    return tier.min_qty <= quantity and (tier.max_qty is None or quantity <= tier.max_qty)


def _width(tier: PriceTier) -> float:
    return float("inf") if tier.max_qty is None else tier.max_qty - tier.min_qty


def select_tier(
    tiers: Iterable[PriceTier],
    store: str,
    quantity: int,
    product_id: Optional[int] = None,
    category_id: Optional[int] = None,
) -> PriceTier:
    store = currency_to_store(store)
    candidates = [
        t for t in tiers
        if t.store == store and _contains(t, quantity) and _matches_scope(t, product_id, category_id)
    ]
    if not candidates:
        raise ConfigurationError(
            f"No price tier for store={store} quantity={quantity} "
            f"product={product_id} category={category_id}"
        )
    return min(candidates, key=lambda t: (_SCOPE_RANK[t.scope], _width(t), t.min_qty))


def apply_tiered_markup(
    store: str,
    quantity: int,
    *,
    tiers: Sequence[PriceTier],
    unit_cost_cents: Optional[int] = None,
    line_cost_cents: Optional[int] = None,
    product_id: Optional[int] = None,
    category_id: Optional[int] = None,
) -> MarkupResult:
    """
    Apply the tier that matches (store, scope, quantity) to the line cost.

    If both costs are given the line cost wins. A tier floor_pct guarantees
    sell >= cost * floor_pct. Raises ConfigurationError when no tier applies.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValueError(f"quantity must be a positive integer, got {quantity!r}")

    if line_cost_cents is None:
        if unit_cost_cents is None:
            raise ValueError("unit_cost_cents or line_cost_cents is required")
        line_cost_cents = unit_cost_cents * quantity

    if line_cost_cents < 0:
        raise ValueError("cost cannot be negative")

    tier = select_tier(tiers, store, quantity, product_id, category_id)

    cost = Decimal(int(line_cost_cents))
    sell = cost * tier.mult

    if tier.floor_pct is not None:
        floor = (cost * tier.floor_pct).to_integral_value(rounding=ROUND_CEILING)
        sell = max(sell, floor)

    line_sell_cents = int(sell.quantize(Decimal(1), rounding=ROUND_HALF_UP))

    return MarkupResult(
        unit_sell_cents=line_sell_cents // quantity,
        line_sell_cents=line_sell_cents,
    )


def _to_decimal(value, name: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ConfigurationError(f"{name} must be a number (got {value!r})")
    try:
        d = Decimal(str(value))
    except InvalidOperation:
        raise ConfigurationError(f"{name} must be a number (got {value!r})")
    if not d.is_finite():
        raise ConfigurationError(f"{name} must be finite (got {value!r})")
    return d


def _to_int(value, name: str) -> int:
    d = _to_decimal(value, name)
    if d != d.to_integral_value():
        raise ConfigurationError(f"{name} must be an integer (got {value!r})")
    return int(d)


def parse_tier_config(raw: str, store: str) -> List[PriceTier]:
    """
    Parse a MARKUP_TIERS_* JSON array into global tiers for one store.

    Entries look like {"min": 1, "max": 49, "mult": 1.6, "floorPct": 1.1}.
    Empty input gives an empty list.
    """
    if not raw or not raw.strip():
        return []

    store = currency_to_store(store)
    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Tier config for {store} is not valid JSON: {e}")
    if not isinstance(entries, list):
        raise ConfigurationError(f"Tier config for {store} must be a JSON array")

    tiers = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"{store}[{idx}] must be an object")

        min_qty = _to_int(entry.get("min", 1), f"{store}[{idx}].min")
        max_raw = entry.get("max")
        max_qty = None if max_raw is None else _to_int(max_raw, f"{store}[{idx}].max")
        mult = _to_decimal(entry.get("mult"), f"{store}[{idx}].mult")
        floor_raw = entry.get("floorPct", entry.get("floor_pct"))
        floor_pct = None if floor_raw is None else _to_decimal(floor_raw, f"{store}[{idx}].floorPct")

        if min_qty < 1:
            raise ConfigurationError(f"{store}[{idx}].min must be >= 1")
        if max_qty is not None and max_qty < min_qty:
            raise ConfigurationError(f"{store}[{idx}].max must be >= min")
        if mult <= 0:
            raise ConfigurationError(f"{store}[{idx}].mult must be > 0")
        if floor_pct is not None and not (0 <= floor_pct <= _MAX_FLOOR_PCT):
            raise ConfigurationError(f"{store}[{idx}].floorPct must be between 0 and {_MAX_FLOOR_PCT}")

        tiers.append(
            PriceTier(
                scope="global",
                store=store,
                min_qty=min_qty,
                max_qty=max_qty,
                mult=mult,
                floor_pct=floor_pct,
            )
        )

    tiers.sort(key=lambda t: t.min_qty)
    return tiers


def validate_tier_ladder(tiers: Sequence[PriceTier]) -> None:
    """
    A global ladder for one store must start at 1, must not overlap, and
    only its last tier may be open ended.
    """
    ordered = sorted(tiers, key=lambda t: t.min_qty)
    for i, cur in enumerate(ordered):
        if i == 0 and cur.min_qty != 1:
            raise ConfigurationError(f"{cur.store}: first tier min must be 1 (got {cur.min_qty})")
        if i + 1 < len(ordered):
            nxt = ordered[i + 1]
            if cur.max_qty is None:
                raise ConfigurationError(f"{cur.store}: tier {i} is open ended but is not the last tier")
            if nxt.min_qty <= cur.max_qty:
                raise ConfigurationError(
                    f"{cur.store}: overlapping tiers (tier {i} max={cur.max_qty}, tier {i + 1} min={nxt.min_qty})"
                )
