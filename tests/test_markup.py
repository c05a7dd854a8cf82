from __future__ import annotations

from decimal import Decimal

import pytest

from conftest import global_tier
from printcart.domain.errors import ConfigurationError
from printcart.domain.schemas import PriceTier
from printcart.services.markup import (
    apply_tiered_markup,
    parse_tier_config,
    select_tier,
    validate_tier_ladder,
)


def scoped_tier(scope: str, scope_id: int | None, mult: str, min_qty: int = 1, max_qty: int | None = None) -> PriceTier:
    return PriceTier(scope=scope, scope_id=scope_id, store="US", min_qty=min_qty, max_qty=max_qty, mult=Decimal(mult))


def test_line_total_rounds_half_up():
    # 999 * 1.5 = 1498.5
    result = apply_tiered_markup("US", 1, tiers=[global_tier(mult="1.5")], line_cost_cents=999)

    assert result.line_sell_cents == 1499
    assert result.unit_sell_cents == 1499


@pytest.mark.parametrize("quantity", [1, 2, 3, 7, 49])
def test_unit_times_quantity_never_exceeds_line(quantity: int):
    result = apply_tiered_markup("US", quantity, tiers=[global_tier(mult="1.6")], line_cost_cents=1001)

    assert result.line_sell_cents == 1602
    assert result.unit_sell_cents == 1602 // quantity
    assert result.unit_sell_cents * quantity <= result.line_sell_cents


def test_unit_cost_is_multiplied_by_quantity():
    result = apply_tiered_markup("US", 4, tiers=[global_tier(mult="2")], unit_cost_cents=250)

    assert result.line_sell_cents == 2000
    assert result.unit_sell_cents == 500


def test_line_cost_wins_over_unit_cost():
    result = apply_tiered_markup(
        "US", 2, tiers=[global_tier(mult="1")], unit_cost_cents=999, line_cost_cents=100
    )

    assert result.line_sell_cents == 100


def test_floor_lifts_sell_price_to_minimum():
    tiers = [global_tier(mult="1.0", floor_pct="1.1")]

    assert apply_tiered_markup("US", 1, tiers=tiers, line_cost_cents=1000).line_sell_cents == 1100
    # 999 * 1.1 = 1098.9, rounded up so the floor is never undercut
    assert apply_tiered_markup("US", 1, tiers=tiers, line_cost_cents=999).line_sell_cents == 1099


def test_floor_does_not_lower_a_higher_markup():
    tiers = [global_tier(mult="2", floor_pct="1.1")]

    assert apply_tiered_markup("US", 1, tiers=tiers, line_cost_cents=1000).line_sell_cents == 2000


def test_zero_cost_sells_for_zero():
    tiers = [global_tier(mult="1.6", floor_pct="1.1")]

    result = apply_tiered_markup("US", 3, tiers=tiers, line_cost_cents=0)

    assert result.line_sell_cents == 0
    assert result.unit_sell_cents == 0


def test_quantity_selects_ladder_step():
    tiers = [global_tier(min_qty=1, max_qty=49, mult="2"), global_tier(min_qty=50, mult="1.5")]

    assert apply_tiered_markup("US", 49, tiers=tiers, line_cost_cents=100).line_sell_cents == 200
    assert apply_tiered_markup("US", 50, tiers=tiers, line_cost_cents=100).line_sell_cents == 150


def test_product_scope_beats_category_and_global():
    tiers = [
        scoped_tier("global", None, "1.5"),
        scoped_tier("category", 7, "2"),
        scoped_tier("product", 42, "3"),
    ]

    assert select_tier(tiers, "US", 1, product_id=42, category_id=7).mult == Decimal("3")
    assert select_tier(tiers, "US", 1, product_id=41, category_id=7).mult == Decimal("2")
    assert select_tier(tiers, "US", 1, product_id=41, category_id=8).mult == Decimal("1.5")


def test_narrowest_window_wins_within_scope():
    tiers = [
        scoped_tier("global", None, "2", min_qty=1, max_qty=100),
        scoped_tier("global", None, "3", min_qty=10, max_qty=20),
        scoped_tier("global", None, "4", min_qty=1),
    ]

    assert select_tier(tiers, "US", 15).mult == Decimal("3")
    assert select_tier(tiers, "US", 50).mult == Decimal("2")
    assert select_tier(tiers, "US", 500).mult == Decimal("4")


def test_no_matching_tier_raises_configuration_error():
    tiers = [global_tier(min_qty=1, max_qty=10)]

    with pytest.raises(ConfigurationError):
        apply_tiered_markup("US", 11, tiers=tiers, line_cost_cents=100)
    with pytest.raises(ConfigurationError):
        apply_tiered_markup("CA", 1, tiers=tiers, line_cost_cents=100)
    with pytest.raises(ConfigurationError):
        apply_tiered_markup("US", 1, tiers=[], line_cost_cents=100)


def test_store_accepts_currency_codes():
    tiers = [global_tier(store="CA", mult="2")]

    assert apply_tiered_markup("CAD", 1, tiers=tiers, line_cost_cents=100).line_sell_cents == 200


@pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
def test_invalid_quantity_is_rejected(quantity):
    with pytest.raises(ValueError):
        apply_tiered_markup("US", quantity, tiers=[global_tier()], line_cost_cents=100)


def test_missing_or_negative_cost_is_rejected():
    with pytest.raises(ValueError):
        apply_tiered_markup("US", 1, tiers=[global_tier()])
    with pytest.raises(ValueError):
        apply_tiered_markup("US", 1, tiers=[global_tier()], line_cost_cents=-5)


def test_parse_tier_config_builds_sorted_global_tiers():
    raw = '[{"min": 50, "mult": 1.4}, {"min": 1, "max": 49, "mult": 1.6, "floorPct": 1.1}]'

    tiers = parse_tier_config(raw, "USD")

    assert [(t.min_qty, t.max_qty) for t in tiers] == [(1, 49), (50, None)]
    assert tiers[0].mult == Decimal("1.6")
    assert tiers[0].floor_pct == Decimal("1.1")
    assert tiers[1].floor_pct is None
    assert all(t.store == "US" and t.scope == "global" for t in tiers)


def test_parse_tier_config_empty_input():
    assert parse_tier_config("", "US") == []
    assert parse_tier_config("   ", "CA") == []


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"min": 1}',
        '["x"]',
        '[{"min": 0, "mult": 1.5}]',
        '[{"min": 10, "max": 5, "mult": 1.5}]',
        '[{"min": 1, "mult": 0}]',
        '[{"min": 1}]',
        '[{"min": 1, "mult": 1.5, "floorPct": 11}]',
        '[{"min": 1.5, "mult": 1.5}]',
    ],
)
def test_parse_tier_config_rejects_bad_entries(raw: str):
    with pytest.raises(ConfigurationError):
        parse_tier_config(raw, "US")


def test_validate_tier_ladder():
    validate_tier_ladder([global_tier(min_qty=1, max_qty=49), global_tier(min_qty=50)])

    with pytest.raises(ConfigurationError):
        validate_tier_ladder([global_tier(min_qty=2)])
    with pytest.raises(ConfigurationError):
        validate_tier_ladder([global_tier(min_qty=1, max_qty=50), global_tier(min_qty=50)])
    with pytest.raises(ConfigurationError):
        validate_tier_ladder([global_tier(min_qty=1), global_tier(min_qty=50)])
