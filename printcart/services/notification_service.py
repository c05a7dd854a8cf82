# printcart/services/notification_service.py
from printcart.celery_worker import celery_app
from printcart.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Order-placed notifications, processed by Celery.
    Called by route handlers after an order exists, never from the pricing core.
    """

    @staticmethod
    def send_order_notification(order_id: int, user_id: str, total_cents: int, currency: str):
        send_order_notification_task.delay(order_id, user_id, total_cents, currency)


@celery_app.task(name="printcart.services.notification_service.send_order_notification_task")
def send_order_notification_task(order_id: int, user_id: str, total_cents: int, currency: str):
    """
    Email delivery lives outside this service; the task records the event.
    """
    logger.info(f"[NOTIFICATION] Order {order_id} placed for {user_id}: {total_cents} {currency}")
    return {"order_id": order_id, "user_id": user_id, "status": "sent"}
