from __future__ import annotations

from decimal import Decimal

import pytest

from conftest import FakeVendor, default_tiers
from printcart.domain.errors import CartNotFoundError, InvalidVendorPriceError
from printcart.domain.schemas import SelectedShipping
from printcart.services.cart_service import CartService
from printcart.services.pricing_service import PricingService


def create_service(db, vendor=None) -> CartService:
    pricing = PricingService(db=db, vendor=vendor or FakeVendor(), fallback_tiers=default_tiers())
    return CartService(db=db, pricing=pricing)


def test_ensure_cart_reuses_open_cart(db):
    svc = create_service(db)

    first = svc.ensure_cart("sess-1", "CAD")
    second = svc.ensure_cart("sess-1")

    assert first["cart_id"] == second["cart_id"]
    assert first["currency"] == "CAD"
    assert first["totals"].total_cents == 0


def test_ensure_cart_claims_and_protects_ownership(db):
    svc = create_service(db)
    svc.ensure_cart("sess-1")

    svc.ensure_cart("sess-1", user_id="user-1")

    with pytest.raises(PermissionError):
        svc.ensure_cart("sess-1", user_id="user-2")


def test_ensure_cart_requires_sid(db):
    with pytest.raises(ValueError):
        create_service(db).ensure_cart("  ")


def test_add_line_stores_price_snapshot(db):
    svc = create_service(db)
    svc.ensure_cart("sess-1")

    view = svc.add_line("sess-1", product_id=12, quantity=3, option_ids=[1, 2])

    line = view["lines"][0]
    assert line["line_total_cents"] == 6232
    assert line["unit_price_cents"] == 6232 // 3
    assert view["totals"].subtotal_cents == 6232


def test_add_line_prices_in_cart_currency(db):
    vendor = FakeVendor()
    svc = create_service(db, vendor)
    svc.ensure_cart("sess-1", "CAD")

    svc.add_line("sess-1", product_id=12, quantity=1, option_ids=[1])

    assert vendor.calls[0][3] == "CA"


def test_add_line_pricing_failure_writes_nothing(db):
    svc = create_service(db, FakeVendor({"error": "unavailable"}))
    svc.ensure_cart("sess-1")

    with pytest.raises(InvalidVendorPriceError):
        svc.add_line("sess-1", product_id=12, quantity=1, option_ids=[1])

    assert svc.get_cart("sess-1")["lines"] == []


def test_add_line_needs_open_cart(db):
    with pytest.raises(CartNotFoundError):
        create_service(db).add_line("missing", product_id=12, quantity=1, option_ids=[1])


def test_remove_line(db):
    svc = create_service(db)
    svc.ensure_cart("sess-1")
    line_id = svc.add_line("sess-1", product_id=12, quantity=1, option_ids=[1])["lines"][0]["id"]

    view = svc.remove_line("sess-1", line_id)

    assert view["lines"] == []
    with pytest.raises(ValueError):
        svc.remove_line("sess-1", line_id)


def test_reprice_lines_refreshes_snapshot(db):
    vendor = FakeVendor({"linePriceCents": 1000})
    svc = create_service(db, vendor)
    svc.ensure_cart("sess-1")
    svc.add_line("sess-1", product_id=12, quantity=1, option_ids=[1])

    vendor.response = {"linePriceCents": 2000}
    view = svc.reprice_lines("sess-1")

    assert view["lines"][0]["line_total_cents"] == 3200
    assert view["totals"].subtotal_cents == 3200


def test_shipping_selection_feeds_totals(db):
    svc = create_service(db)
    svc.ensure_cart("sess-1")

    view = svc.choose_shipping(
        "sess-1",
        SelectedShipping(carrier="UPS", method="Ground", cost=Decimal("12.99"), days=3),
    )

    assert view["selected_shipping"]["carrier"] == "UPS"
    assert view["totals"].shipping_cents == 1299

    view = svc.clear_shipping("sess-1")

    assert view["selected_shipping"] is None
    assert view["totals"].shipping_cents == 0


def test_apply_credit_is_capped_and_replaced(db):
    svc = create_service(db, FakeVendor({"linePriceCents": 1000}))
    svc.ensure_cart("sess-1")
    svc.add_line("sess-1", product_id=12, quantity=1, option_ids=[1])

    applied, totals = svc.apply_credit("sess-1", 500)
    assert applied == 500
    assert totals.total_cents == 1100

    applied, totals = svc.apply_credit("sess-1", 5000)
    assert applied == 1600
    assert totals.credits_cents == 1600
    assert totals.total_cents == 0


def test_apply_credit_rejects_negative(db):
    svc = create_service(db)
    svc.ensure_cart("sess-1")

    with pytest.raises(ValueError):
        svc.apply_credit("sess-1", -1)


def test_every_command_bumps_version(db):
    svc = create_service(db)
    svc.ensure_cart("sess-1")
    cart = svc.repo.get_open_cart_by_sid("sess-1")
    start = cart.version

    svc.add_line("sess-1", product_id=12, quantity=1, option_ids=[1])
    svc.clear_shipping("sess-1")

    assert svc.repo.get_open_cart_by_sid("sess-1").version == start + 2


def test_stale_version_is_rejected(db):
    svc = create_service(db)
    svc.ensure_cart("sess-1")
    cart = svc.repo.get_open_cart_by_sid("sess-1")

    assert svc.repo.update_cart_version(cart.id, cart.version + 5, {"version": 99}) == 0
