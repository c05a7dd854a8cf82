# printcart/services/order_service.py
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from printcart.data.models.order import OrderModel
from printcart.data.models.order_item import OrderItemModel
from printcart.domain.errors import CartNotFoundError, EmptyCartError
from printcart.repos.cart_repo import CartRepo
from printcart.repos.order_repo import OrderRepo
from printcart.services.totals_service import totals_for_cart
from printcart.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_STATUSES = ("paid", "processing", "pending")


def _clean(value) -> str:
    return str(value or "").strip()


class OrderService:
    """
    Orders are created from carts exactly once: at most one order per
    provider reference and at most one order per cart.
    """

    def __init__(self, db: Session, tax=None):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.tax = tax

    def ensure_order_from_cart(
        self,
        cart_id: int,
        provider_reference: Optional[str] = None,
        status: str = "paid",
        user_id: Optional[str] = None,
    ) -> int:
        """
        Use Case: turn a cart into an order (idempotent).

        1. Fast path: an order with this provider reference already exists
        2. In one transaction: lock the open cart, re-check the reference,
           load its lines, insert order + items from the stored snapshot,
           close the cart, consume its credits
        3. A concurrent insert that wins the unique constraint is returned instead
        """
        order_id, _ = self.place_order_from_cart(cart_id, provider_reference, status, user_id)
        return order_id

    def place_order_from_cart(
        self,
        cart_id: int,
        provider_reference: Optional[str] = None,
        status: str = "paid",
        user_id: Optional[str] = None,
    ) -> tuple[int, bool]:
        """Same as ensure_order_from_cart; also reports whether this call inserted the order."""
        if status not in PAYMENT_STATUSES:
            raise ValueError(f"Unknown payment status {status!r}")

        reference = _clean(provider_reference) or None

        if reference:
            existing = self.repo.get_order_id_by_reference(reference)
            if existing:
                logger.info(f"Order {existing} already exists for payment {reference}")
                return existing, False

        try:
            order_id, created = self._materialize(cart_id, reference, status, _clean(user_id) or None)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self._existing_order_id(cart_id, reference)
            if existing:
                logger.info(f"Lost insert race for cart {cart_id}, returning order {existing}")
                return existing, False
            raise
        except Exception:
            self.db.rollback()
            raise

        if created:
            logger.info(f"Order {order_id} created from cart {cart_id} (reference={reference})")
        return order_id, created

    def _existing_order_id(self, cart_id: int, reference: Optional[str]) -> int | None:
        if reference:
            by_ref = self.repo.get_order_id_by_reference(reference)
            if by_ref:
                return by_ref
        return self.repo.get_order_id_by_cart(cart_id)

    def _materialize(
        self,
        cart_id: int,
        reference: Optional[str],
        status: str,
        user_id: Optional[str],
    ) -> tuple[int, bool]:
        #lock first: a delivery that waited on the lock must see the order the holder committed
        cart = self.cart_repo.get_open_cart(cart_id, for_update=True)

        #re-check inside the transaction, two webhook deliveries can pass the fast path together
        if reference:
            existing = self.repo.get_order_id_by_reference(reference)
            if existing:
                return existing, False

        if not cart:
            existing = self._existing_order_id(cart_id, reference) if reference else None
            if existing:
                logger.info(f"Cart {cart_id} already turned into order {existing}")
                return existing, False
            raise CartNotFoundError(f"Cart {cart_id} not found or closed")

        lines = self.cart_repo.get_lines(cart.id)
        if not lines:
            raise EmptyCartError(f"Cart {cart_id} is empty")

        #charged amount comes from the stored snapshot, nothing is repriced here
        totals = totals_for_cart(self.cart_repo, cart, self.tax)
        owner = user_id or _clean(cart.user_id) or cart.sid

        order = self.repo.add_order(
            OrderModel(
                user_id=owner,
                cart_id=cart.id,
                provider="stripe" if reference else "free",
                provider_reference=reference,
                status="placed",
                payment_status=status,
                currency=totals.currency,
                subtotal_cents=totals.subtotal_cents,
                shipping_cents=totals.shipping_cents,
                tax_cents=totals.tax_cents,
                discount_cents=totals.credits_cents,
                credits_cents=totals.credits_cents,
                total_cents=totals.total_cents,
                placed_at=datetime.now(timezone.utc),
            )
        )

        for line in lines:
            line_total = line.line_total_cents
            if line_total is None:
                line_total = line.quantity * line.unit_price_cents
            self.repo.add_item(
                OrderItemModel(
                    order_id=order.id,
                    product_id=line.product_id,
                    option_ids=list(line.option_ids or []),
                    quantity=line.quantity,
                    unit_price_cents=line.unit_price_cents,
                    line_total_cents=line_total,
                )
            )

        #the session id stays out of carts.user_id; only signed-in owners are stamped
        self.cart_repo.close_cart(cart.id, user_id or cart.user_id)
        self.cart_repo.delete_credits(cart.id)
        self.db.flush()

        return order.id, True

    def get_order(self, order_id: int) -> OrderModel:
        """
        Use Case: order details (Query).
        """
        order = self.repo.get_order(order_id)
        if not order:
            raise ValueError("Order not found")
        return order
