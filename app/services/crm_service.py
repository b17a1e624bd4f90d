import logging
import re
import secrets
import threading
import time

import redis

from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.db.booking_store import BookingStore, RecordStore, utcnow_iso
from app.db.redis_client import get_redis
from app.db.store import KEY_PREFIX
from app.models.crm_lead import PACKAGE_ENQUIRY_SOURCE, CrmLead, CrmLeadNote, CrmLeadStatus, normalize_email
from app.services import catalog_service, notification_service
from app.services.email_service import is_valid_email

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^[\d\s+\-()]+$")

# fallback when Redis is off: key -> expiry (monotonic seconds)
_local_guard: dict[str, float] = {}
_local_lock = threading.Lock()


def get_lead_store() -> RecordStore:
    return RecordStore("crm-leads")


def duplicate_key(email: str, now: float | None = None, window_minutes: int | None = None) -> str:
    window = (window_minutes or settings.CONTACT_DUPLICATE_WINDOW_MINUTES) * 60
    bucket = int((now if now is not None else time.time()) // window)
    return f"{KEY_PREFIX}:contact-dedupe:{normalize_email(email)}:{bucket}"


def claim_submission(email: str, now: float | None = None) -> bool:
    """True for the first submission from `email` in the current time bucket, False for repeats."""
    key = duplicate_key(email, now)
    ttl = settings.CONTACT_DUPLICATE_WINDOW_MINUTES * 60
    client = get_redis()
    if client is not None:
        try:
            return bool(client.set(key, "1", nx=True, ex=ttl))
        except redis.RedisError as e:
            logger.warning("duplicate check via redis failed, using local guard: %s", e)
    with _local_lock:
        mono = time.monotonic()
        for k in [k for k, exp in _local_guard.items() if exp <= mono]:
            del _local_guard[k]
        if key in _local_guard:
            return False
        _local_guard[key] = mono + ttl
        return True


def validate_enquiry(body: dict) -> dict:
    name = (body.get("name") or "").strip()
    email = (body.get("email") or "").strip()
    phone = (body.get("phone") or "").strip()
    if phone and not PHONE_PATTERN.match(phone):
        raise ValidationError(
            "Phone number contains invalid characters. Please use only numbers, +, spaces, dashes, and parentheses."
        )
    if email and not is_valid_email(email):
        raise ValidationError("Please enter a valid email address.")
    if not name or not email or not phone:
        raise ValidationError("Name, email, and WhatsApp number are required fields.")
    return {
        "name": name,
        "email": email,
        "phone": phone,
        "message": (body.get("message") or "").strip(),
        "preferredTour": (body.get("preferredTour") or "").strip(),
        "dates": (body.get("dates") or "").strip(),
        "accommodation": (body.get("accommodation") or "").strip(),
    }


def submit_enquiry(body: dict, leads: RecordStore | None = None) -> dict:
    leads = leads or get_lead_store()
    payload = validate_enquiry(body)

    if not claim_submission(payload["email"]):
        logger.info("duplicate contact submission from %s within %s minutes, skipped",
                    payload["email"], settings.CONTACT_DUPLICATE_WINDOW_MINUTES)
        return {"success": True, "duplicate": True}

    lead = CrmLead(id=f"lead_{int(time.time() * 1000)}", createdAt=utcnow_iso(), **payload).to_record()
    result = leads.append_one(lead)
    if not result.ok:
        logger.error("lead %s from %s not persisted: %s", lead["id"], payload["email"], result.errors)

    notification_service.dispatch_enquiry({"id": lead["id"], **payload})
    return {"success": True, "leadId": lead["id"]}


def submit_package_enquiry(body: dict, leads: RecordStore | None = None) -> dict:
    """Enquiry from a safari package page. Not deduplicated: one lead per package asked about."""
    leads = leads or get_lead_store()
    name = (body.get("name") or "").strip()
    email = (body.get("email") or "").strip()
    slug = (body.get("packageSlug") or "").strip()
    if not name or not email or not slug:
        raise ValidationError("Missing required fields.")
    if not is_valid_email(email):
        raise ValidationError("Please enter a valid email address.")
    package = catalog_service.get_package(slug)
    title = package.title if package else (body.get("packageTitle") or "").strip() or slug

    lead = CrmLead(
        id=f"pkg-{int(time.time() * 1000)}-{secrets.token_hex(3)}",
        createdAt=utcnow_iso(),
        source=PACKAGE_ENQUIRY_SOURCE,
        name=name,
        email=email,
        phone=(body.get("phone") or "").strip(),
        dates=(body.get("dates") or "").strip(),
        message=(body.get("message") or "").strip(),
        preferredTour=title,
        packageSlug=slug,
        packageTitle=title,
        guests=str(body.get("guests") or "").strip(),
    ).to_record()
    result = leads.append_one(lead)
    if not result.ok:
        logger.error("package lead %s from %s not persisted: %s", lead["id"], email, result.errors)

    notification_service.dispatch_enquiry(lead)
    return {"success": True, "leadId": lead["id"]}


def bookings_for_email(email: str, store: BookingStore | None = None) -> list[dict]:
    """Soft join: bookings whose guest email matches, ignoring case and surrounding spaces."""
    store = store or BookingStore()
    wanted = normalize_email(email)
    if not wanted:
        return []
    return [
        b for b in store.read_all()
        if normalize_email(b.get("customerEmail") or b.get("guestEmail") or b.get("email")) == wanted
    ]


def list_leads(status: str = "", leads: RecordStore | None = None) -> list[dict]:
    leads = leads or get_lead_store()
    rows = leads.read_all()
    if status:
        rows = [r for r in rows if r.get("status") == status]
    return sorted(rows, key=lambda r: r.get("createdAt") or "", reverse=True)


def get_lead(lead_id: str, leads: RecordStore | None = None, store: BookingStore | None = None) -> dict:
    leads = leads or get_lead_store()
    lead = leads.find_by_id(lead_id)
    if not lead:
        raise NotFoundError("Lead not found")
    return {**lead, "bookings": bookings_for_email(lead.get("email"), store)}


def update_lead(lead_id: str, status: str | None = None, follow_up_date: str | None = None,
                new_note: str | None = None, leads: RecordStore | None = None) -> dict:
    leads = leads or get_lead_store()
    lead = leads.find_by_id(lead_id)
    if not lead:
        raise NotFoundError("Lead not found")
    patch: dict = {}
    if status is not None:
        try:
            patch["status"] = CrmLeadStatus(status).value
        except ValueError:
            raise ValidationError(f"Invalid lead status: {status}")
    if follow_up_date is not None:
        patch["followUpDate"] = follow_up_date
    if new_note and new_note.strip():
        note = CrmLeadNote(note=new_note.strip(), createdAt=utcnow_iso()).model_dump()
        patch["notes"] = [*(lead.get("notes") or []), note]
    return leads.update_by_id(lead_id, patch)
