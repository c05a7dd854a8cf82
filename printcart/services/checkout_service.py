# printcart/services/checkout_service.py
from typing import Optional, Union

from sqlalchemy.orm import Session

from printcart.domain.schemas import FreeCheckout, PaidCheckout
from printcart.services.order_service import OrderService
from printcart.services.totals_service import CartTotalsService
from printcart.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutService:
    """
    Decides how a cart leaves the open state:
    - total 0 (credits cover everything) -> free order created right here
    - total > 0 -> totals handed to the payment provider, the order is
      created later from the payment confirmation
    """

    def __init__(self, db: Session, tax=None):
        self.totals = CartTotalsService(db, tax=tax)
        self.orders = OrderService(db, tax=tax)

    def finalize_checkout(
        self,
        sid: str,
        expected_total_cents: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> Union[FreeCheckout, PaidCheckout, None]:
        """
        Use Case: finalize checkout for the open cart of a session.

        Returns None when there is no open cart or when expected_total_cents
        (the total the client displayed) no longer matches a non-zero fresh
        total. None means "refresh the cart and retry".
        """
        totals = self.totals.compute_cart_totals(sid=sid)
        if not totals:
            return None

        if expected_total_cents is not None and expected_total_cents >= 0:
            if totals.total_cents != expected_total_cents and totals.total_cents > 0:
                logger.info(
                    f"Stale checkout for cart {totals.cart_id}: client saw {expected_total_cents}, "
                    f"server total {totals.total_cents}"
                )
                return None

        if totals.total_cents == 0:
            order_id = self.orders.ensure_order_from_cart(
                totals.cart_id,
                provider_reference=None,
                status="paid",
                user_id=user_id,
            )
            logger.info(f"Free checkout for cart {totals.cart_id} -> order {order_id}")
            return FreeCheckout(order_id=order_id, totals=totals)

        return PaidCheckout(totals=totals)
