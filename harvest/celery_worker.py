# harvest/celery_worker.py
from celery import Celery

from harvest.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
)

celery_app = Celery(
    "harvest",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks must be imported explicitly so the worker registers them
celery_app.conf.imports = (
    "harvest.tasks.renew",
    "harvest.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "renew-subscriptions-every-hour": {
        "task": "harvest.tasks.renew.renew_subscriptions_task",
        "schedule": 60.0 * 60,
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
celery_app.conf.task_store_eager_result = False
