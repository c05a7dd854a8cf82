from __future__ import annotations

from decimal import Decimal

import pytest

from conftest import FakeVendor, default_tiers, global_tier
from printcart.data.models.price_tier import PriceTierModel
from printcart.domain.errors import ConfigurationError, InvalidVendorPriceError
from printcart.services.pricing_service import PricingService, normalize_option_ids


def create_service(db, vendor, tiers=None) -> PricingService:
    return PricingService(db=db, vendor=vendor, fallback_tiers=default_tiers() if tiers is None else tiers)


def test_prices_line_from_vendor_cost_and_markup(db, vendor):
    svc = create_service(db, vendor)

    price = svc.compute_line_price(12, "US", 1, [3, 4])

    # 3895 * 1.6
    assert price.line_sell_cents == 6232
    assert price.unit_sell_cents == 6232
    assert price.line_cost_cents == 3895
    assert price.currency == "USD"
    assert vendor.calls == [(12, [3, 4], 1, "US")]


def test_vendor_line_price_is_not_multiplied_by_quantity(db, vendor):
    svc = create_service(db, vendor)

    price = svc.compute_line_price(12, "US", 7, [3])

    assert price.line_cost_cents == 3895
    assert price.line_sell_cents == 6232
    assert price.unit_sell_cents == 6232 // 7


def test_ca_store_uses_ca_tiers_and_currency(db, vendor):
    svc = create_service(db, vendor)

    price = svc.compute_line_price(12, "CAD", 1, [3])

    # 3895 * 1.7 = 6621.5
    assert price.line_sell_cents == 6622
    assert price.currency == "CAD"
    assert vendor.calls[0][3] == "CA"


def test_tiers_in_database_replace_configured_ones(db, vendor):
    db.add(PriceTierModel(scope="global", store="US", min_qty=1, max_qty=None, mult=Decimal("2")))
    db.add(PriceTierModel(scope="product", scope_id=12, store="US", min_qty=1, max_qty=None, mult=Decimal("3")))
    db.commit()
    svc = create_service(db, vendor)

    assert svc.compute_line_price(12, "US", 1, [3]).line_sell_cents == 3895 * 3
    assert svc.compute_line_price(13, "US", 1, [3]).line_sell_cents == 3895 * 2


def test_product_tier_in_database_keeps_configured_ladder_for_other_products(db, vendor):
    db.add(PriceTierModel(scope="product", scope_id=12, store="US", min_qty=1, max_qty=None, mult=Decimal("3")))
    db.commit()
    svc = create_service(db, vendor)

    assert svc.compute_line_price(12, "US", 1, [3]).line_sell_cents == 3895 * 3
    # 3895 * 1.6 from the configured US ladder
    assert svc.compute_line_price(13, "US", 1, [3]).line_sell_cents == 6232
    assert [t.scope for t in svc.tiers_for("US")] == ["product", "global", "global"]


def test_category_tier_applies_when_category_given(db, vendor):
    tiers = {
        "US": [
            global_tier(mult="1.5"),
            global_tier(mult="1.5").model_copy(update={"scope": "category", "scope_id": 9, "mult": Decimal("2")}),
        ]
    }
    svc = create_service(db, FakeVendor({"linePriceCents": 1000}), tiers)

    assert svc.compute_line_price(1, "US", 1, [1], category_id=9).line_sell_cents == 2000
    assert svc.compute_line_price(1, "US", 1, [1]).line_sell_cents == 1500


def test_missing_tiers_raise_configuration_error(db, vendor):
    svc = create_service(db, vendor, tiers={})

    with pytest.raises(ConfigurationError):
        svc.compute_line_price(12, "US", 1, [3])


def test_unusable_vendor_payload_raises(db):
    svc = create_service(db, FakeVendor({"message": "product not found"}))

    with pytest.raises(InvalidVendorPriceError):
        svc.compute_line_price(12, "US", 1, [3])


@pytest.mark.parametrize(
    "product_id, quantity, option_ids",
    [(0, 1, [1]), (5, 0, [1]), (5, 1, []), (5, 1, ["x", None])],
)
def test_invalid_input_is_rejected_before_vendor_call(db, vendor, product_id, quantity, option_ids):
    svc = create_service(db, vendor)

    with pytest.raises(ValueError):
        svc.compute_line_price(product_id, "US", quantity, option_ids)
    assert vendor.calls == []


def test_normalize_option_ids():
    assert normalize_option_ids(["3", 4, True, "x", None]) == [3, 4]
    assert normalize_option_ids(None) == []
