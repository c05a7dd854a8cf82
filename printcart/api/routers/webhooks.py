# printcart/api/routers/webhooks.py
from fastapi import APIRouter, Depends, HTTPException, Header, Request
from sqlalchemy.orm import Session

from printcart.api.deps import get_payment_gateway, get_notifier
from printcart.data.database import get_db
from printcart.domain.errors import CartNotFoundError, EmptyCartError
from printcart.services.loyalty import LoyaltyService
from printcart.services.notification_service import NotificationService
from printcart.services.payment_gateway import PaymentGateway
from printcart.services.webhook_service import PaymentConfirmationService
from printcart.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header("", alias="stripe-signature"),
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: NotificationService = Depends(get_notifier),
):
    payload = await request.body()
    try:
        event = gateway.parse_webhook(payload, stripe_signature)
    except ValueError as e:
        logger.warning(f"Rejected webhook: {e}")
        raise HTTPException(status_code=400, detail="Invalid webhook")

    svc = PaymentConfirmationService(db)
    try:
        confirmation = svc.handle_event(event)
    except (CartNotFoundError, EmptyCartError) as e:
        logger.error(f"Payment event {event.get('id')} could not be turned into an order: {e}")
        raise HTTPException(status_code=409, detail=str(e))

    if confirmation is None:
        return {"received": True, "order_id": None}

    order_id, created = confirmation
    order = svc.orders.get_order(order_id)
    #earns at most once per order
    LoyaltyService(db).award_for_order(order)
    if created:
        notifier.send_order_notification(order.id, order.user_id, order.total_cents, order.currency)
    return {"received": True, "order_id": order_id}
