"""Pre-trip reminders and post-trip review requests.

Runs daily from Celery beat. Emails are sent inline (not queued) so a
booking is only flagged once its email actually went out; a run that fails
half way is simply picked up again the next day.
"""
import logging
from datetime import date

from app.core.errors import StorageWriteFailure
from app.db.booking_store import BOOKING_ID_ALIASES, BookingStore
from app.models.booking import BookingStatus
from app.services import notification_service
from app.services.admin_service import booking_date

logger = logging.getLogger(__name__)

REVIEW_AFTER_DAYS = 2


def _booking_ref(b: dict) -> str:
    return next((b[k] for k in BOOKING_ID_ALIASES if b.get(k)), "")


def _due_kind(b: dict, today: date) -> tuple[str, str] | None:
    """(notification kind, flag to set) when `b` is due an email today."""
    trip = booking_date(b)
    if not trip or not b.get("customerEmail") or not b.get("customerName"):
        return None
    if b.get("status") == BookingStatus.CANCELLED.value:
        return None
    days = (trip - today).days
    if days == 1 and not b.get("reminderSent"):
        return notification_service.TRIP_REMINDER, "reminderSent"
    if days <= -REVIEW_AFTER_DAYS and not b.get("reviewRequestSent"):
        return notification_service.REVIEW_REQUEST, "reviewRequestSent"
    return None


def send_trip_reminders(today: date | None = None, store: BookingStore | None = None) -> dict:
    store = store or BookingStore()
    today = today or date.today()
    counts = {"remindersSent": 0, "reviewRequestsSent": 0}

    for b in store.read_all():
        due = _due_kind(b, today)
        if due is None:
            continue
        kind, flag = due
        ref = _booking_ref(b)
        payload = notification_service.build_booking_payload(b)
        payload["dateLabel"] = booking_date(b).strftime("%d %b %Y")
        if not notification_service.deliver(kind, payload):
            continue
        if kind == notification_service.TRIP_REMINDER:
            counts["remindersSent"] += 1
        else:
            counts["reviewRequestsSent"] += 1
        try:
            store.update_by_any_id(ref, {flag: True}, stamp=False)
        except StorageWriteFailure as e:
            # the guest may get this email again tomorrow
            logger.error("%s sent for %s but the flag was not saved: %s", kind, ref, e)
    return counts
