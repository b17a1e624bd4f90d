import logging
import uuid
import time
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import quote, urlencode

from app.core.config import settings
from app.core.errors import NotFoundError, PaymentAdapterFailure, StorageWriteFailure, ValidationError
from app.db.booking_store import BookingStore, utcnow_iso
from app.models.booking import AdvancePayment, Booking, BookingStatus, PaymentStatus, is_confirmed, total_usd_of
from app.schemas.booking import BookingCreate
from app.services import notification_service
from app.services.catalog_service import BOOKING_KINDS, resolve_item
from app.services.email_service import is_valid_email
from app.services.payment_service import PAYMENT_METHOD, create_deposit_intent, record_intent
from app.services.pricing_service import (
    compute_balance, compute_deposit, compute_trip_total, convert_usd, round_money,
)
from app.services.promo_service import apply_promo

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("type", "slug", "date", "adults", "customerEmail", "customerName")
SUCCESS_PAGE = "/booking/success"
NOT_PROVIDED = ("Not provided", "Not required (hotel/villa pick-up)")


@dataclass
class BookingCreated:
    booking_id: str
    redirect_url: str
    booking: dict


def make_booking_id() -> str:
    # millisecond prefix keeps ids time-ordered; the suffix keeps them unique
    return f"booking_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def format_date_label(date_str: str) -> str:
    """2025-12-14 -> '14 Dec 2025'. Unparseable input is returned unchanged."""
    try:
        d = datetime.fromisoformat(date_str.strip().replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return date_str
    return f"{d.day} {d.strftime('%b %Y')}"


def _num(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _count(value, default: int) -> int:
    try:
        n = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return n if n > 0 else default


def build_success_url(booking: dict) -> str:
    params = {
        "bookingId": booking["id"],
        "experienceTitle": booking.get("experienceTitle", ""),
        "totalUsd": _num(booking.get("totalUsd", 0)),
        "date": booking.get("dateLabel", ""),
        "type": booking.get("type", ""),
    }
    return f"{SUCCESS_PAGE}?{urlencode(params)}"


def parse_pickup_from_notes(notes: str | None) -> dict:
    """The booking widget writes pick-up details as labelled lines in the notes."""
    out = {"pickupLocation": None, "pickupTime": None, "airportPickup": False, "airportFlight": None}
    for line in (notes or "").splitlines():
        line = line.strip()
        if line.startswith("Pick-up location:"):
            v = line.replace("Pick-up location:", "", 1).strip()
            out["pickupLocation"] = v if v and v not in NOT_PROVIDED else None
        elif line.startswith("Pick-up time:"):
            v = line.replace("Pick-up time:", "", 1).strip()
            out["pickupTime"] = v if v and v not in NOT_PROVIDED else None
        elif line.startswith("Airport pick-up required:"):
            out["airportPickup"] = "Yes" in line
        elif line.startswith("Flight details:"):
            v = line.replace("Flight details:", "", 1).strip()
            out["airportFlight"] = v if v and v not in NOT_PROVIDED else None
    return out


def _pickup_details(body: BookingCreate) -> dict:
    details = parse_pickup_from_notes(body.notes)
    if body.pickupLocation:
        details["pickupLocation"] = body.pickupLocation.strip()
    if body.pickupTime:
        details["pickupTime"] = body.pickupTime.strip()
    if body.airportPickup is not None:
        details["airportPickup"] = bool(body.airportPickup)
        if body.airportPickup and not (body.airportFlight or "").strip():
            raise ValidationError("Flight details are required for airport pick-up.")
    if body.airportFlight and details["airportPickup"]:
        details["airportFlight"] = body.airportFlight.strip()
    return details


def _is_blank(value) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return value is None or value == 0


def validate_booking_input(body: BookingCreate) -> str:
    """Return the normalized booking kind or raise ValidationError."""
    if any(_is_blank(getattr(body, f)) for f in REQUIRED_FIELDS):
        raise ValidationError("Missing required fields.")
    kind = body.type.strip().lower()
    if kind not in BOOKING_KINDS:
        raise ValidationError(f"Unknown booking type: {body.type}")
    if not is_valid_email(body.customerEmail):
        raise ValidationError("Please enter a valid email address.")
    return kind


def create_booking(body: BookingCreate, store: BookingStore | None = None) -> BookingCreated:
    store = store or BookingStore()
    kind = validate_booking_input(body)
    pickup = _pickup_details(body)

    item = resolve_item(kind, body.slug.strip())
    if not item:
        raise NotFoundError(f"{'Tour' if kind == 'tour' else 'Package'} not found.")

    adults = _count(body.adults, 2 if kind == "package" else 1)
    children = max(_count(body.children, 0), 0)
    subtotal = compute_trip_total(item.base_price, adults, children)
    promo = apply_promo(body.promoCode, subtotal)
    total = round_money(promo.total)

    booking_id = make_booking_id()
    record = Booking(
        id=booking_id,
        type=item.experience_type,
        experienceSlug=item.slug,
        experienceTitle=item.title,
        date=body.date.strip(),
        dateLabel=format_date_label(body.date),
        adults=adults,
        children=children,
        totalUSD=total,
        totalUsd=total,
        depositUSD=0,
        balanceUSD=total,
        promoCode=promo.applied_code,
        discountUSD=round_money(promo.discount),
        customerName=body.customerName.strip(),
        customerEmail=body.customerEmail.strip(),
        customerPhone=(body.customerPhone or "").strip(),
        notes=body.notes or "",
        status=BookingStatus.PENDING.value,
        createdAt=utcnow_iso(),
        **pickup,
    ).to_record()

    result = store.append_one(record)
    if not result.ok:
        logger.error("create_booking: booking %s not persisted, continuing: %s", booking_id, result.errors)

    deposit_usd = compute_deposit(total)
    deposit_aed = convert_usd(deposit_usd)
    if deposit_usd > 0:
        _attach_payment_link(store, record, deposit_usd, total)
    else:
        logger.info("create_booking: no deposit for booking %s (total %s), skipping payment link", booking_id, total)

    payload = notification_service.build_booking_payload(record, deposit_usd, deposit_aed)
    notification_service.dispatch_on_hold(payload)

    return BookingCreated(booking_id=booking_id, redirect_url=build_success_url(record), booking=record)


def _attach_payment_link(store: BookingStore, record: dict, deposit_usd: float, total: float) -> None:
    booking_id = record["id"]
    try:
        intent = create_deposit_intent(
            amount=deposit_usd,
            description=record.get("experienceTitle") or "Savana Blu booking advance",
            success_path=f"/booking/ziina/success?bookingId={quote(booking_id)}",
            cancel_path=f"/booking/ziina/cancel?bookingId={quote(booking_id)}",
        )
    except PaymentAdapterFailure as e:
        logger.error("create_booking: payment link for booking %s (deposit %s) failed: %s", booking_id, deposit_usd, e)
        return

    patch = {
        "ziinaPaymentIntentId": intent.intent_id,
        "paymentLinkUrl": intent.redirect_url,
        "status": BookingStatus.ON_HOLD.value,
        "depositUSD": deposit_usd,
        "balanceUSD": compute_balance(total, deposit_usd),
    }
    record.update(patch)
    record_intent(record, intent)
    try:
        if store.update_by_id(booking_id, patch, stamp=False) is None:
            logger.error("create_booking: booking %s missing from store; intent %s left for reconciliation",
                         booking_id, intent.intent_id)
    except StorageWriteFailure as e:
        logger.error("create_booking: payment link for booking %s not persisted: %s", booking_id, e)


def confirm_payment(booking_id: str, store: BookingStore | None = None) -> dict:
    """Mark the deposit as received. Safe to call repeatedly for the same booking."""
    store = store or BookingStore()
    if not booking_id or not str(booking_id).strip():
        raise ValidationError("bookingId is required")
    booking_id = str(booking_id).strip()

    booking = store.find_by_any_id(booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    emails_sent = booking.get("confirmationEmailsSent") is True
    if is_confirmed(booking) and emails_sent:
        logger.info("confirm_payment: booking %s already confirmed, skipping", booking_id)
        return {"ok": True, "message": "Booking already confirmed", "alreadyProcessed": True}

    total = total_usd_of(booking)
    deposit_usd = deposit_aed = None
    if total is not None:
        deposit_usd = compute_deposit(total)
        deposit_aed = convert_usd(deposit_usd)

    now = utcnow_iso()
    patch = {
        "paymentStatus": PaymentStatus.CONFIRMED.value,
        "confirmedAt": booking.get("confirmedAt") or now,
        "advancePayment": AdvancePayment(
            method=PAYMENT_METHOD, percent=settings.DEPOSIT_PERCENT, usd=deposit_usd, aed=deposit_aed, paidAt=now,
        ).model_dump(),
        # set before sending so a duplicate callback racing this one does not send again
        "confirmationEmailsSent": True,
    }
    if booking.get("status") == BookingStatus.CANCELLED.value:
        logger.warning("confirm_payment: deposit received for cancelled booking %s; refund manually", booking_id)
    else:
        patch["status"] = BookingStatus.CONFIRMED.value
    if deposit_usd is not None:
        patch["depositUSD"] = deposit_usd
        patch["balanceUSD"] = compute_balance(total, deposit_usd)

    try:
        updated = store.update_by_any_id(booking_id, patch)
    except StorageWriteFailure as e:
        logger.error("confirm_payment: booking %s not persisted, continuing: %s", booking_id, e)
        updated = None
    merged = updated or {**booking, **patch}

    if not emails_sent:
        notification_service.dispatch_confirmed(
            notification_service.build_booking_payload(merged, deposit_usd, deposit_aed)
        )
    return {"ok": True}


def get_public_booking(booking_id: str, store: BookingStore | None = None) -> dict:
    store = store or BookingStore()
    booking = store.find_by_any_id(booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    return booking
