# printcart/services/cart_service.py
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from printcart.data.models.cart import CartModel
from printcart.data.models.cart_line import CartLineModel
from printcart.data.models.loyalty_transaction import LoyaltyTransactionModel
from printcart.domain.errors import CartNotFoundError, InsufficientPointsError, LoyaltyBalanceChangedError
from printcart.domain.schemas import CartTotals, SelectedShipping
from printcart.domain.stores import currency_to_store, store_to_currency
from printcart.repos.cart_repo import CartRepo
from printcart.repos.loyalty_repo import LoyaltyRepo
from printcart.services.loyalty import points_to_cover, points_to_credit_cents, validate_redeem_points
from printcart.services.totals_service import totals_for_cart
from printcart.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Commands (ensure, add, remove, reprice, shipping, credit, redeem) change the cart
    and bump its version; get_cart is read only.

    Every command checks the version it read (optimistic locking), so two
    concurrent edits of one cart cannot both commit.
    """

    def __init__(self, db: Session, pricing=None, tax=None):
        self.repo = CartRepo(db)
        self.loyalty = LoyaltyRepo(db)
        self.pricing = pricing
        self.tax = tax

    #query
    def get_cart(self, sid: str) -> Dict[str, Any] | None:
        cart = self.repo.get_open_cart_by_sid(sid)
        if not cart:
            return None
        return self._view(cart)

    def _view(self, cart: CartModel) -> Dict[str, Any]:
        lines = self.repo.get_lines(cart.id)
        return {
            "cart_id": cart.id,
            "sid": cart.sid,
            "status": cart.status,
            "currency": cart.currency,
            "selected_shipping": cart.selected_shipping,
            "lines": [
                {
                    "id": l.id,
                    "product_id": l.product_id,
                    "option_ids": list(l.option_ids or []),
                    "quantity": l.quantity,
                    "unit_price_cents": l.unit_price_cents,
                    "line_total_cents": l.line_total_cents,
                }
                for l in lines
            ],
            "totals": totals_for_cart(self.repo, cart, self.tax),
        }

    #commands
    def ensure_cart(self, sid: str, currency: str = "USD", user_id: Optional[str] = None) -> Dict[str, Any]:
        sid = (sid or "").strip()
        if not sid:
            raise ValueError("sid is required")

        existing = self.repo.get_open_cart_by_sid(sid)
        if existing:
            if user_id and existing.user_id and existing.user_id != user_id:
                raise PermissionError("Cart belongs to another user")
            if user_id and not existing.user_id:
                self._bump_version(existing, {"user_id": user_id})
                self.repo.commit()
                logger.info(f"Cart {existing.id} claimed by user {user_id}")
            return self._view(existing)

        created = self.repo.create_cart(
            CartModel(
                sid=sid,
                user_id=user_id,
                status="open",
                currency=store_to_currency(currency),
                version=1,
            )
        )
        logger.info(f"Created cart {created.id} for session {sid}")
        return self._view(created)

    def add_line(
        self,
        sid: str,
        product_id: int,
        quantity: int,
        option_ids: List[int],
        category_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        cart = self._open_cart(sid)

        #vendor price + markup before touching the db
        price = self._price(product_id, cart, quantity, option_ids, category_id)

        try:
            self.repo.add_line(
                CartLineModel(
                    cart_id=cart.id,
                    product_id=product_id,
                    option_ids=list(option_ids),
                    quantity=quantity,
                    unit_price_cents=price.unit_sell_cents,
                    line_total_cents=price.line_sell_cents,
                )
            )
            self._bump_version(cart)
            self.repo.commit()
        except Exception as e:
            logger.error(f"Failed to add product {product_id} to cart {cart.id}: {e}")
            self.repo.rollback()
            raise

        logger.info(f"Added product {product_id} x{quantity} to cart {cart.id} at {price.line_sell_cents}")
        return self._view(cart)

    def remove_line(self, sid: str, line_id: int) -> Dict[str, Any]:
        cart = self._open_cart(sid)

        if not self.repo.delete_line(cart.id, line_id):
            self.repo.rollback()
            raise ValueError(f"Line {line_id} is not in the cart")

        self._bump_version(cart)
        self.repo.commit()

        logger.info(f"Removed line {line_id} from cart {cart.id}")
        return self._view(cart)

    def reprice_lines(self, sid: str) -> Dict[str, Any]:
        """
        Use Case: refresh every line's price snapshot from the vendor.
        All lines are priced first; nothing is written if any line fails.
        """
        cart = self._open_cart(sid)
        lines = self.repo.get_lines(cart.id)

        prices = [
            self._price(l.product_id, cart, l.quantity, list(l.option_ids or []), None)
            for l in lines
        ]

        for line, price in zip(lines, prices):
            line.unit_price_cents = price.unit_sell_cents
            line.line_total_cents = price.line_sell_cents

        self._bump_version(cart)
        self.repo.commit()

        logger.info(f"Repriced {len(lines)} lines in cart {cart.id}")
        return self._view(cart)

    def choose_shipping(self, sid: str, selection: SelectedShipping) -> Dict[str, Any]:
        cart = self._open_cart(sid)

        self._bump_version(cart, {"selected_shipping": selection.model_dump(mode="json")})
        self.repo.commit()

        logger.info(f"Cart {cart.id} shipping set to {selection.carrier} {selection.method} ({selection.cost})")
        return self._view(cart)

    def clear_shipping(self, sid: str) -> Dict[str, Any]:
        cart = self._open_cart(sid)

        self._bump_version(cart, {"selected_shipping": None})
        self.repo.commit()

        return self._view(cart)

    def apply_credit(
        self,
        sid: str,
        amount_cents: int,
        reason: str = "manual",
        note: Optional[str] = None,
    ) -> tuple[int, CartTotals]:
        """
        Use Case: apply a staff or promo credit, replacing any earlier credit with
        the same reason. Not exposed over HTTP; loyalty credits only come from
        redeem_points. The credit is capped at subtotal + shipping + tax.
        Returns (applied, totals).
        """
        if amount_cents < 0:
            raise ValueError("Credit cannot be negative")
        if reason == "loyalty":
            raise ValueError("Loyalty credits are created by redeeming points")

        cart = self._open_cart(sid)
        before = totals_for_cart(self.repo, cart, self.tax)
        cap = max(0, before.subtotal_cents + before.shipping_cents + before.tax_cents)
        applied = min(amount_cents, cap)

        self.repo.replace_credit(cart.id, reason, applied, note)
        self._bump_version(cart)
        self.repo.commit()

        totals = totals_for_cart(self.repo, cart, self.tax)
        logger.info(f"Applied {applied} cents {reason} credit to cart {cart.id} (requested {amount_cents})")
        return applied, totals

    def redeem_points(self, sid: str, points: int, note: Optional[str] = None) -> Dict[str, Any]:
        """
        Use Case: turn loyalty points into a credit on the cart.

        Only the points needed to cover what is left to pay are taken
        (rounded up to the redemption step). The wallet debit, its ledger row
        and the credit row commit together; the debit only succeeds while the
        balance still covers the points.
        """
        points = validate_redeem_points(points)

        cart = self._open_cart(sid)
        user_id = (cart.user_id or "").strip()
        if not user_id:
            raise PermissionError("Sign in to redeem loyalty points")

        remaining = totals_for_cart(self.repo, cart, self.tax).total_cents
        if remaining <= 0:
            raise ValueError("Nothing left to pay on this cart")

        points = min(points, points_to_cover(remaining))
        credit_cents = min(points_to_credit_cents(points), remaining)

        wallet = self.loyalty.get_wallet(user_id)
        if not wallet or wallet.points_balance < points:
            raise InsufficientPointsError(
                f"Insufficient points: need {points}, have {wallet.points_balance if wallet else 0}"
            )

        try:
            if self.loyalty.debit_points(wallet.id, points) == 0:
                raise LoyaltyBalanceChangedError("Loyalty balance changed, try again")

            self.loyalty.add_transaction(
                LoyaltyTransactionModel(
                    wallet_id=wallet.id,
                    user_id=user_id,
                    cart_id=cart.id,
                    delta=-points,
                    reason="redeem",
                    note=note,
                )
            )
            self.repo.add_credit(cart.id, credit_cents, reason="loyalty", note=note)
            self._bump_version(cart)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        balance = self.loyalty.get_wallet(user_id).points_balance
        logger.info(f"Redeemed {points} points from {user_id} into {credit_cents} cents on cart {cart.id}")
        return {
            "cart_id": cart.id,
            "redeemed_points": points,
            "applied_cents": credit_cents,
            "points_balance": balance,
            "totals": totals_for_cart(self.repo, cart, self.tax),
        }

    #helpers
    def _open_cart(self, sid: str) -> CartModel:
        cart = self.repo.get_open_cart_by_sid((sid or "").strip())
        if not cart:
            raise CartNotFoundError("No open cart for this session")
        return cart

    def _price(self, product_id, cart: CartModel, quantity: int, option_ids, category_id):
        if self.pricing is None:
            raise RuntimeError("CartService was created without a pricing service")
        return self.pricing.compute_line_price(
            product_id,
            currency_to_store(cart.currency),
            quantity,
            option_ids,
            category_id=category_id,
        )

    def _bump_version(self, cart: CartModel, new_data: Optional[dict] = None) -> None:
        #UPDATE ... SET version = v + 1 WHERE id = :id AND version = v
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={"version": cart.version + 1, **(new_data or {})},
        )
        if rowcount == 0:
            self.repo.rollback()
            raise RuntimeError("Cart was modified by another operation")
