"""Shared test fixtures."""

from __future__ import annotations

import os

#settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["MARKUP_TIERS_US"] = ""
os.environ["MARKUP_TIERS_CA"] = ""

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import printcart.data.models  # noqa: F401
from printcart.data.database import Base
from printcart.data.models.cart import CartModel
from printcart.data.models.cart_credit import CartCreditModel
from printcart.data.models.cart_line import CartLineModel
from printcart.domain.schemas import PriceTier


class FakeVendor:
    """Stands in for VendorPricingClient; returns a fixed payload and records calls."""

    def __init__(self, response: dict | None = None):
        self.response = response if response is not None else {"price": "38.95"}
        self.calls: list[tuple] = []

    def fetch_trade_price(self, product_id, option_ids, quantity, store):
        self.calls.append((product_id, list(option_ids), quantity, store))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def global_tier(
    store: str = "US",
    min_qty: int = 1,
    max_qty: int | None = None,
    mult: str = "1.6",
    floor_pct: str | None = None,
) -> PriceTier:
    return PriceTier(
        scope="global",
        store=store,
        min_qty=min_qty,
        max_qty=max_qty,
        mult=Decimal(mult),
        floor_pct=None if floor_pct is None else Decimal(floor_pct),
    )


def default_tiers() -> dict[str, list[PriceTier]]:
    return {
        "US": [global_tier("US", 1, 49, "1.6", "1.1"), global_tier("US", 50, None, "1.4", "1.1")],
        "CA": [global_tier("CA", 1, 49, "1.7", "1.1"), global_tier("CA", 50, None, "1.5", "1.1")],
    }


def create_cart(
    db,
    *,
    sid: str = "sess-1",
    lines: list[tuple[int, int, int | None]] | None = None,
    shipping: dict | None = None,
    credits_cents: int = 0,
    currency: str = "USD",
    user_id: str | None = None,
) -> CartModel:
    """Create an open cart with (unit_price_cents, quantity, line_total_cents) lines."""
    cart = CartModel(
        sid=sid,
        user_id=user_id,
        status="open",
        currency=currency,
        selected_shipping=shipping,
        version=1,
    )
    db.add(cart)
    db.flush()

    for idx, (unit, qty, line_total) in enumerate(lines or []):
        db.add(
            CartLineModel(
                cart_id=cart.id,
                product_id=100 + idx,
                option_ids=[1, 2],
                quantity=qty,
                unit_price_cents=unit,
                line_total_cents=line_total,
            )
        )

    if credits_cents:
        db.add(CartCreditModel(cart_id=cart.id, amount_cents=credits_cents, reason="loyalty"))

    db.commit()
    return cart


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def vendor() -> FakeVendor:
    return FakeVendor()
