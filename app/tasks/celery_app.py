import logging

from celery import Celery
from celery.schedules import crontab
from celery.signals import after_setup_logger

from app.core.config import settings
from app.core.logging_config import LOG_FORMAT
from app.db.redis_client import redis_url_with_tls

_redis_url = redis_url_with_tls(settings.REDIS_URL)

celery = Celery(
    "savanablu",
    broker=_redis_url,
    backend=_redis_url,
    include=["app.tasks.jobs"],
)

celery.conf.timezone = "Africa/Dar_es_Salaam"
celery.conf.task_acks_late = True
celery.conf.task_default_retry_delay = 60


@after_setup_logger.connect
def _use_app_log_format(logger, **kwargs):
    for handler in logger.handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))


celery.conf.beat_schedule = {
    "reconcile-payment-intents-every-5-minutes": {
        "task": "app.tasks.jobs.reconcile_payment_intents",
        "schedule": 300.0,
    },
    "send-trip-reminders-daily": {
        "task": "app.tasks.jobs.send_trip_reminders",
        "schedule": crontab(hour=8, minute=0),
    },
}
