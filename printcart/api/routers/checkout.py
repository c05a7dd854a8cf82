# printcart/api/routers/checkout.py
import stripe
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from printcart.api.deps import get_payment_gateway, get_notifier
from printcart.data.database import get_db
from printcart.domain.errors import CartNotFoundError
from printcart.domain.schemas import FinalizeIn, CheckoutOut
from printcart.services.checkout_service import CheckoutService
from printcart.services.loyalty import LoyaltyService
from printcart.services.notification_service import NotificationService
from printcart.services.payment_gateway import PaymentGateway

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("/finalize", response_model=CheckoutOut)
def finalize_checkout(
    payload: FinalizeIn,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: NotificationService = Depends(get_notifier),
):
    """
    Free carts become orders right away; paid carts get a payment intent for
    the server computed total.
    """
    svc = CheckoutService(db)
    try:
        result = svc.finalize_checkout(
            payload.sid,
            expected_total_cents=payload.expected_total_cents,
            user_id=payload.user_id,
        )
    except CartNotFoundError as e:
        raise HTTPException(status_code=409, detail=f"Please refresh your cart: {e}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if result is None:
        raise HTTPException(status_code=409, detail="Cart changed, please refresh your cart")

    if result.kind == "free":
        order = svc.orders.get_order(result.order_id)
        LoyaltyService(db).award_for_order(order)
        notifier.send_order_notification(order.id, order.user_id, order.total_cents, order.currency)
        return {"kind": "free", "order_id": result.order_id, "totals": result.totals}

    try:
        intent = gateway.create_payment_intent(result.totals)
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except stripe.StripeError as e:
        raise HTTPException(status_code=502, detail=f"Payment provider failed: {e}")

    return {
        "kind": "paid",
        "totals": result.totals,
        "payment_intent_id": intent.payment_intent_id,
        "client_secret": intent.client_secret,
    }
