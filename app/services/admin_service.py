import logging
from datetime import date, datetime

from app.core.errors import NotFoundError, ValidationError
from app.db.booking_store import BookingStore, utcnow_iso
from app.models.booking import BookingStatus, PaymentStatus, is_confirmed

logger = logging.getLogger(__name__)

# Trip date keys in priority order; older records used the type-specific ones.
DATE_KEYS = ("date", "tourDate", "packageDate", "preferredDate", "bookingDate")


def _require_reason(reason: str | None) -> str:
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A reason is required.")
    return reason


def cancel_booking(booking_id: str, reason: str | None, store: BookingStore | None = None) -> dict:
    """Operator cancellation. Does not touch the payment provider; refunds are settled by hand."""
    store = store or BookingStore()
    reason = _require_reason(reason)
    updated = store.update_by_any_id(booking_id, {
        "status": BookingStatus.CANCELLED.value,
        "cancellationReason": reason,
    })
    if not updated:
        raise NotFoundError("Booking not found")
    logger.info("booking %s cancelled: %s", booking_id, reason)
    return updated


def reverse_payment(booking_id: str, reason: str | None, amount: float | None = None,
                    store: BookingStore | None = None) -> dict:
    """Record a manual refund of the deposit."""
    store = store or BookingStore()
    reason = _require_reason(reason)
    booking = store.find_by_any_id(booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    deposit = booking.get("depositUSD") or 0
    if not is_confirmed(booking) or deposit <= 0:
        raise ValidationError("Only confirmed bookings with a paid deposit can be refunded.")
    if booking.get("paymentStatus") == PaymentStatus.REFUNDED.value:
        raise ValidationError("Payment already refunded.")
    if amount is not None and (amount <= 0 or amount > deposit):
        raise ValidationError("Refund amount must be between 0 and the deposit paid.")

    updated = store.update_by_any_id(booking_id, {
        "paymentStatus": PaymentStatus.REFUNDED.value,
        "refundReason": reason,
        "refundedAt": utcnow_iso(),
        "refundedAmount": amount if amount is not None else deposit,
    })
    if not updated:
        raise NotFoundError("Booking not found")
    logger.info("booking %s payment reversed (%s): %s", booking_id, updated.get("refundedAmount"), reason)
    return updated


def update_internal_notes(booking_id: str, notes: str, store: BookingStore | None = None) -> dict:
    store = store or BookingStore()
    updated = store.update_by_any_id(booking_id, {"internalNotes": notes if isinstance(notes, str) else ""})
    if not updated:
        raise NotFoundError("Booking not found")
    return updated


def booking_date(b: dict) -> date | None:
    for key in DATE_KEYS:
        value = b.get(key)
        if isinstance(value, str) and value.strip():
            try:
                return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
            except ValueError:
                return None
    return None


def list_bookings(status: str = "", when: str = "", store: BookingStore | None = None) -> list[dict]:
    """Bookings sorted by trip date. `when` = upcoming|completed splits on today."""
    store = store or BookingStore()
    rows = store.read_all()
    if status:
        rows = [b for b in rows if b.get("status") == status or b.get("paymentStatus") == status]
    if when in ("upcoming", "completed"):
        today = date.today()
        dated = [(b, booking_date(b)) for b in rows]
        if when == "upcoming":
            rows = [b for b, d in dated if d and d >= today]
        else:
            rows = [b for b, d in dated if d and d < today]
    return sorted(rows, key=lambda b: booking_date(b) or date.min)
