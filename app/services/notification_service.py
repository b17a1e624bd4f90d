"""Booking and enquiry emails.

The request path only *enqueues* (``dispatch``); the Celery worker runs
``deliver``. Neither one raises: a failed enqueue or a failed send is logged
with the booking id so the team can follow up by hand.
"""
import logging
import smtplib

import redis
import requests
from kombu.exceptions import OperationalError

from app.core.config import settings
from app.core.errors import NotificationFailure
from app.models.booking import total_usd_of
from app.services.email_service import send_email
from app.services.voucher_service import render_booking_pdf_bytes

logger = logging.getLogger(__name__)

ON_HOLD_GUEST = "on-hold-guest"
ON_HOLD_OPERATOR = "on-hold-operator"
CONFIRMED_GUEST = "confirmed-guest"
CONFIRMED_OPERATOR = "confirmed-operator"
ENQUIRY_GUEST = "enquiry-guest"
ENQUIRY_OPERATOR = "enquiry-operator"
TRIP_REMINDER = "trip-reminder"
REVIEW_REQUEST = "review-request"

GUEST_KINDS = {ON_HOLD_GUEST, CONFIRMED_GUEST, ENQUIRY_GUEST, TRIP_REMINDER, REVIEW_REQUEST}
KINDS = GUEST_KINDS | {ON_HOLD_OPERATOR, CONFIRMED_OPERATOR, ENQUIRY_OPERATOR}

# ValueError covers an unknown kind from render()
_DELIVERY_ERRORS = (NotificationFailure, requests.RequestException, smtplib.SMTPException, OSError, ValueError)


def build_booking_payload(booking: dict, deposit_usd: float | None = None, deposit_aed: float | None = None,
                          payment_link_url: str | None = None) -> dict:
    """Flatten a stored booking (any historical shape) into what the templates read."""
    return {
        "id": booking.get("id") or booking.get("bookingId") or booking.get("stripeSessionId") or "",
        "experienceTitle": booking.get("experienceTitle") or booking.get("title") or booking.get("tourTitle") or "",
        "type": booking.get("type") or "zanzibar-tour",
        "dateLabel": booking.get("dateLabel") or booking.get("date") or "",
        "guestName": booking.get("customerName") or booking.get("guestName") or booking.get("name") or "",
        "guestEmail": booking.get("customerEmail") or booking.get("guestEmail") or booking.get("email") or "",
        "guestPhone": booking.get("customerPhone") or booking.get("guestPhone") or "",
        "adults": booking.get("adults"),
        "children": booking.get("children"),
        "totalUsd": total_usd_of(booking),
        "depositUsd": deposit_usd,
        "depositAed": deposit_aed,
        "balanceUsd": booking.get("balanceUSD"),
        "promoCode": booking.get("promoCode"),
        "pickupLocation": booking.get("pickupLocation"),
        "pickupTime": booking.get("pickupTime"),
        "airportPickup": bool(booking.get("airportPickup")),
        "airportFlight": booking.get("airportFlight"),
        "paymentLinkUrl": payment_link_url or booking.get("paymentLinkUrl"),
        "notes": booking.get("notes") or None,
    }


def _money(v) -> str:
    return f"USD {v:.2f}" if isinstance(v, (int, float)) else "-"


def _booking_lines(p: dict) -> list[str]:
    lines = [
        f"Booking ID: {p.get('id')}",
        f"Experience: {p.get('experienceTitle')}",
        f"Date: {p.get('dateLabel')}",
        f"Guests: {p.get('adults') or 0} adults, {p.get('children') or 0} children",
        f"Total: {_money(p.get('totalUsd'))}",
    ]
    if p.get("promoCode"):
        lines.append(f"Promo code: {p['promoCode']}")
    if p.get("depositUsd") is not None:
        deposit = _money(p.get("depositUsd"))
        if p.get("depositAed") is not None:
            deposit += f" (AED {p['depositAed']:.2f})"
        lines.append(f"Deposit ({settings.DEPOSIT_PERCENT}%): {deposit}")
    if p.get("pickupLocation"):
        lines.append(f"Pick-up: {p['pickupLocation']} {p.get('pickupTime') or ''}".rstrip())
    if p.get("airportPickup"):
        lines.append(f"Airport pick-up, flight: {p.get('airportFlight') or 'not provided'}")
    return lines


def _enquiry_lines(p: dict) -> list[str]:
    lines = [
        f"Name: {p.get('name')}",
        f"Email: {p.get('email')}",
        f"WhatsApp: {p.get('phone') or '-'}",
        f"Preferred tour: {p.get('preferredTour') or '-'}",
        f"Dates: {p.get('dates') or '-'}",
        f"Accommodation: {p.get('accommodation') or '-'}",
        "",
        p.get("message") or "",
    ]
    if p.get("packageSlug"):
        lines[3:3] = [f"Package: {p.get('packageTitle') or p['packageSlug']}", f"Guests: {p.get('guests') or '-'}"]
    return lines


def render(kind: str, p: dict) -> tuple[str, str]:
    """Return (subject, plain text body)."""
    title = p.get("experienceTitle") or "your Savana Blu experience"
    if kind == ON_HOLD_GUEST:
        body = [f"Hi {p.get('guestName') or 'there'},", "", "Your booking is on hold until the deposit is paid.", ""]
        body += _booking_lines(p)
        if p.get("paymentLinkUrl"):
            body += ["", f"Pay your deposit securely here: {p['paymentLinkUrl']}"]
        else:
            body += ["", "We will send you a payment link shortly."]
        return f"Your Savana Blu booking is on hold – {title}", "\n".join(body)
    if kind == ON_HOLD_OPERATOR:
        body = ["New booking on hold.", ""] + _booking_lines(p)
        body += [f"Guest: {p.get('guestName')} <{p.get('guestEmail')}> {p.get('guestPhone') or ''}".rstrip()]
        body += [f"Payment link: {p.get('paymentLinkUrl') or 'NOT CREATED – follow up manually'}"]
        if p.get("notes"):
            body += ["", "Notes:", p["notes"]]
        return f"New booking on hold – {title}", "\n".join(body)
    if kind == CONFIRMED_GUEST:
        body = [f"Hi {p.get('guestName') or 'there'},", "", "We have received your deposit. Your booking is confirmed.", ""]
        body += _booking_lines(p)
        if p.get("balanceUsd") is not None:
            body += [f"Balance due on the day: {_money(p.get('balanceUsd'))}"]
        body += ["", "Your booking voucher is attached."]
        return f"Your Savana Blu booking is confirmed – {title}", "\n".join(body)
    if kind == CONFIRMED_OPERATOR:
        body = ["Deposit received, booking confirmed.", ""] + _booking_lines(p)
        body += [f"Guest: {p.get('guestName')} <{p.get('guestEmail')}>"]
        return f"Booking confirmed – {title}", "\n".join(body)
    if kind == ENQUIRY_GUEST:
        body = [f"Hi {p.get('name') or 'there'},", "", "Thank you for your enquiry. We will reply within 24 hours.", ""]
        return "We've received your enquiry – Savana Blu Zanzibar", "\n".join(body + _enquiry_lines(p))
    if kind == ENQUIRY_OPERATOR:
        return "New website enquiry – Savana Blu", "\n".join(["New enquiry from the contact form.", ""] + _enquiry_lines(p))
    if kind == TRIP_REMINDER:
        what = "itinerary" if p.get("type") == "safari" else "day tour"
        body = [
            f"Hi {p.get('guestName') or 'there'},", "",
            f"Just a quick note from Savana Blu to remind you about your {what} tomorrow:", "",
            f"Experience: {p.get('experienceTitle') or 'Your experience'}",
            f"Date: {p.get('dateLabel')}",
            f"Pick-up: {p.get('pickupLocation') or 'To be confirmed'}, {p.get('pickupTime') or 'To be confirmed'}",
            "",
            "If your plans have changed, reply to this email or send us a WhatsApp so we can adjust on our side.",
        ]
        return "Reminder for your Savana Blu experience tomorrow", "\n".join(body)
    if kind == REVIEW_REQUEST:
        what = "trip" if p.get("type") == "safari" else "day tour"
        body = [
            f"Hi {p.get('guestName') or 'there'},", "",
            f"We hope you enjoyed your {what} with Savana Blu: {p.get('experienceTitle') or 'your experience'}.", "",
            "If you have a quiet moment, a short review or a few lines about your experience would help us a great deal.",
            "You can simply reply to this email, or share a review on your preferred platform.",
        ]
        return "How was your time with Savana Blu?", "\n".join(body)
    raise ValueError(f"unknown notification kind: {kind}")


def recipient_for(kind: str, payload: dict) -> str:
    if kind in GUEST_KINDS:
        return (payload.get("guestEmail") or payload.get("email") or "").strip()
    return settings.ADMIN_EMAIL


def deliver(kind: str, payload: dict) -> bool:
    """Send one email. Runs in the worker; logs and returns False on failure."""
    ref = payload.get("id") or payload.get("email") or "-"
    to_email = recipient_for(kind, payload)
    if not to_email:
        logger.error("%s email for %s skipped: no recipient address", kind, ref)
        return False
    try:
        subject, body = render(kind, payload)
        attachments = _attachments(kind, payload, ref)
        send_email(to_email, subject, body, attachments)
    except _DELIVERY_ERRORS as e:
        logger.error("%s email for %s to %s failed: %s", kind, ref, to_email, e)
        return False
    logger.info("%s email for %s sent to %s", kind, ref, to_email)
    return True


def _attachments(kind: str, payload: dict, ref: str) -> list[tuple[str, bytes, str]]:
    """The guest confirmation carries the voucher. A voucher that fails to render is left out."""
    if kind != CONFIRMED_GUEST:
        return []
    try:
        pdf = render_booking_pdf_bytes(_voucher_view(payload))
    except (ValueError, TypeError, KeyError, OSError) as e:
        logger.error("voucher for %s could not be rendered, sending without it: %s", ref, e)
        return []
    return [(f"savanablu-{ref}.pdf", pdf, "application/pdf")]


def _voucher_view(p: dict) -> dict:
    return {
        "id": p.get("id"), "experienceTitle": p.get("experienceTitle"), "dateLabel": p.get("dateLabel"),
        "customerName": p.get("guestName"), "customerEmail": p.get("guestEmail"), "customerPhone": p.get("guestPhone"),
        "adults": p.get("adults"), "children": p.get("children"), "totalUsd": p.get("totalUsd"),
        "depositUSD": p.get("depositUsd"), "balanceUSD": p.get("balanceUsd"), "promoCode": p.get("promoCode"),
        "pickupLocation": p.get("pickupLocation"), "pickupTime": p.get("pickupTime"),
        "airportPickup": p.get("airportPickup"), "airportFlight": p.get("airportFlight"),
        "status": "confirmed", "paymentStatus": "confirmed",
    }


def dispatch(kind: str, payload: dict) -> bool:
    """Queue one email and return immediately."""
    from app.tasks.jobs import send_notification

    try:
        send_notification.delay(kind, payload)
    except (OperationalError, redis.RedisError, OSError) as e:
        logger.error("could not queue %s email for %s: %s", kind, payload.get("id") or payload.get("email"), e)
        return False
    return True


def dispatch_on_hold(payload: dict) -> None:
    dispatch(ON_HOLD_GUEST, payload)
    dispatch(ON_HOLD_OPERATOR, payload)


def dispatch_confirmed(payload: dict) -> None:
    dispatch(CONFIRMED_GUEST, payload)
    dispatch(CONFIRMED_OPERATOR, payload)


def dispatch_enquiry(payload: dict) -> None:
    dispatch(ENQUIRY_GUEST, payload)
    dispatch(ENQUIRY_OPERATOR, payload)
