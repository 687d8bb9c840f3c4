# harvest/services/notification_service.py
from harvest.celery_worker import celery_app
from harvest.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Queues customer notifications on Celery.

    Notifications are best effort: the order is already committed when they
    are sent, so a broker failure is logged and does not fail the request.
    """

    @staticmethod
    def send_order_notification(user_id: int, order_id: int, status: str):
        try:
            send_order_notification_task.delay(user_id, order_id, status)
        except Exception as e:
            logger.warning(f"Could not queue notification for order {order_id}: {e}")


@celery_app.task(name="harvest.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int, status: str):
    """
    In production this would hand off to an email/push provider.
    For now it only logs.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} is now {status}")
    return {"user_id": user_id, "order_id": order_id, "status": status, "sent": True}
