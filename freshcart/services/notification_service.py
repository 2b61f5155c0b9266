# freshcart/services/notification_service.py
from freshcart.celery_worker import celery_app
from freshcart.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Notifications after an order is placed and after it is delivered.
    Fire-and-forget: a queueing failure is logged and never undoes the order.
    """

    def send_order_placed(self, user_id: int, order_id: int, total) -> bool:
        try:
            send_order_placed_task.delay(user_id, order_id, str(total))
            return True
        except Exception as e:
            logger.warning(f"Could not queue order placed notification for order {order_id}: {e}")
            return False

    def send_order_delivered(self, user_id: int, order_id: int) -> bool:
        try:
            send_order_delivered_task.delay(user_id, order_id)
            return True
        except Exception as e:
            logger.warning(f"Could not queue delivery notification for order {order_id}: {e}")
            return False


@celery_app.task(name="freshcart.services.notification_service.send_order_placed_task")
def send_order_placed_task(user_id: int, order_id: int, total: str):
    """
    Celery task, the real email/SMS sender sits outside this service.
    Logs only.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} placed, total {total} TL")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}


@celery_app.task(name="freshcart.services.notification_service.send_order_delivered_task")
def send_order_delivered_task(user_id: int, order_id: int):
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} delivered")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}
