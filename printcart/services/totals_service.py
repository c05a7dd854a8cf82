# printcart/services/totals_service.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from sqlalchemy.orm import Session

from printcart.data.models.cart import CartModel
from printcart.domain.schemas import CartTotals
from printcart.domain.stores import store_to_currency
from printcart.repos.cart_repo import CartRepo

#integer-valued shipping cost at or above this is read as cents, below it as dollars
SHIPPING_CENTS_THRESHOLD = 1000


def shipping_cents_from_selection(selected_shipping: Any) -> int:
    """
    selected_shipping.cost (or .price, or .rate.cost) -> cents.

    The UI mixes dollars and cents here. An integer-valued cost >= 1000 is
    taken as cents, anything else as dollars. Missing, invalid or
    non-positive cost means no shipping.
    """
    if not isinstance(selected_shipping, dict):
        return 0

    raw = selected_shipping.get("cost")
    if raw is None:
        raw = selected_shipping.get("price")
    if raw is None and isinstance(selected_shipping.get("rate"), dict):
        raw = selected_shipping["rate"].get("cost")

    if raw is None or isinstance(raw, bool):
        return 0
    try:
        n = Decimal(str(raw).strip())
    except InvalidOperation:
        return 0
    if not n.is_finite() or n <= 0:
        return 0

    if n == n.to_integral_value() and n >= SHIPPING_CENTS_THRESHOLD:
        return int(n)

    return int((n * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compose_total(subtotal_cents: int, shipping_cents: int, tax_cents: int, credits_cents: int) -> int:
    """total = max(0, subtotal + shipping + tax - credits), credits clamped at 0"""
    return max(0, subtotal_cents + shipping_cents + tax_cents - max(0, credits_cents))


class ZeroTax:
    """Tax is not wired in yet; always 0."""

    def tax_cents(self, cart: CartModel, subtotal_cents: int, shipping_cents: int) -> int:
        return 0


def totals_for_cart(repo: CartRepo, cart: CartModel, tax=None) -> CartTotals:
    """Totals from stored line/shipping/credit data, no repricing."""
    tax = tax or ZeroTax()

    subtotal_cents = max(0, repo.subtotal_cents(cart.id))
    shipping_cents = shipping_cents_from_selection(cart.selected_shipping)
    tax_cents = max(0, int(tax.tax_cents(cart, subtotal_cents, shipping_cents)))
    credits_cents = max(0, repo.credits_cents(cart.id))

    return CartTotals(
        cart_id=cart.id,
        sid=cart.sid,
        user_id=cart.user_id,
        currency=store_to_currency(cart.currency),
        subtotal_cents=subtotal_cents,
        shipping_cents=shipping_cents,
        tax_cents=tax_cents,
        credits_cents=credits_cents,
        total_cents=compose_total(subtotal_cents, shipping_cents, tax_cents, credits_cents),
    )


class CartTotalsService:
    """
    Query: authoritative totals for the open cart of a session (or a cart id).
    Cart summary, checkout, payment amount and webhook all go through here.
    """

    def __init__(self, db: Session, tax=None):
        self.repo = CartRepo(db)
        self.tax = tax or ZeroTax()

    def compute_cart_totals(self, sid: Optional[str] = None, cart_id: Optional[int] = None) -> CartTotals | None:
        cart = None
        if cart_id is not None:
            cart = self.repo.get_open_cart(cart_id)
        elif sid and sid.strip():
            cart = self.repo.get_open_cart_by_sid(sid.strip())

        if not cart:
            return None

        return totals_for_cart(self.repo, cart, self.tax)
