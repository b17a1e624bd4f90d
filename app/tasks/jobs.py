import logging

from app.tasks.celery_app import celery
from app.services import notification_service, payment_service, reminder_service

logger = logging.getLogger(__name__)


@celery.task(name="app.tasks.jobs.send_notification")
def send_notification(kind: str, payload: dict):
    """Deliver one templated email. Failures are logged by the notification service."""
    return notification_service.deliver(kind, payload)


@celery.task(name="app.tasks.jobs.reconcile_payment_intents")
def reconcile_payment_intents():
    result = payment_service.reconcile_payment_intents()
    if result["processed"]:
        logger.info("payment intent reconciliation: %s", result)
    return result


@celery.task(name="app.tasks.jobs.send_trip_reminders")
def send_trip_reminders():
    result = reminder_service.send_trip_reminders()
    logger.info("trip reminders: %s", result)
    return result
