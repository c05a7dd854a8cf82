# printcart/services/payment_gateway.py
import json

import stripe

from printcart.domain.schemas import CartTotals, PaymentIntentHandle
from printcart.utils.settings import STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET
from printcart.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentGateway:
    """
    Stripe payment intents. The charged amount is always totals.total_cents,
    never a client supplied number.
    """

    def __init__(self, api_key: str | None = None, webhook_secret: str | None = None):
        self.api_key = api_key or STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret or STRIPE_WEBHOOK_SECRET

    def create_payment_intent(self, totals: CartTotals) -> PaymentIntentHandle:
        if not self.api_key:
            raise RuntimeError("Missing STRIPE_SECRET_KEY")
        if totals.total_cents <= 0:
            raise ValueError("Payment intents need a positive amount")

        intent = stripe.PaymentIntent.create(
            api_key=self.api_key,
            amount=totals.total_cents,
            currency=totals.currency.lower(),
            automatic_payment_methods={"enabled": True},
            metadata={"cartId": str(totals.cart_id), "sid": totals.sid},
        )
        logger.info(f"PaymentIntent {intent.id} for cart {totals.cart_id}: {totals.total_cents} {totals.currency}")

        return PaymentIntentHandle(
            payment_intent_id=intent.id,
            client_secret=intent.client_secret,
            amount_cents=totals.total_cents,
            currency=totals.currency,
        )

    def parse_webhook(self, payload: bytes, signature: str) -> dict:
        """Verify the Stripe-Signature header and return the event as a plain dict."""
        if not self.webhook_secret:
            raise RuntimeError("Missing STRIPE_WEBHOOK_SECRET")

        body = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        try:
            stripe.WebhookSignature.verify_header(body, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise ValueError(f"Bad webhook signature: {e}") from e

        return json.loads(body)
