# harvest/tasks/renew.py
from harvest.celery_worker import celery_app
from harvest.data.database import SessionLocal
from harvest.services.subscription_service import SubscriptionService
from harvest.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="harvest.tasks.renew.renew_subscriptions_task")
def renew_subscriptions_task():
    logger.info("Renew subscriptions task started")

    db = SessionLocal()
    try:
        renewed = SubscriptionService(db).renew_due()
        logger.info(f"Renewed {renewed} subscriptions")
        return renewed
    finally:
        db.close()
