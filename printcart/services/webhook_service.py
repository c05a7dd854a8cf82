# printcart/services/webhook_service.py
from sqlalchemy.orm import Session

from printcart.services.order_service import OrderService
from printcart.utils.logging import get_logger

logger = get_logger(__name__)

HANDLED_EVENTS = ("payment_intent.succeeded",)


class PaymentConfirmationService:
    """
    Payment confirmations may arrive any number of times; each one funnels
    into place_order_from_cart keyed by the payment intent id.
    """

    def __init__(self, db: Session):
        self.orders = OrderService(db)

    def handle_event(self, event: dict) -> tuple[int, bool] | None:
        """Returns (order_id, created) or None for events that place no order."""
        event_type = event.get("type")
        if event_type not in HANDLED_EVENTS:
            logger.info(f"Ignoring payment event {event.get('id')} of type {event_type}")
            return None

        intent = event["data"]["object"]
        intent_id = intent.get("id")
        metadata = intent.get("metadata") or {}
        cart_id = metadata.get("cartId")

        if not intent_id or not cart_id:
            logger.warning(f"Payment event {event.get('id')} has no payment intent id or cartId metadata")
            return None

        try:
            cart_id = int(cart_id)
        except (TypeError, ValueError):
            logger.warning(f"Payment event {event.get('id')} has malformed cartId {cart_id!r}")
            return None

        order_id, created = self.orders.place_order_from_cart(
            cart_id,
            provider_reference=intent_id,
            status="paid",
        )

        charged = intent.get("amount_received") or intent.get("amount")
        order = self.orders.get_order(order_id)
        if charged is not None and int(charged) != order.total_cents:
            logger.warning(
                f"Order {order_id} total {order.total_cents} differs from charged amount {charged} "
                f"for payment {intent_id}"
            )

        return order_id, created
