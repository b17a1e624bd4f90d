from __future__ import annotations

import io
from datetime import datetime, timezone

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.models.booking import total_usd_of


def _money(value) -> str:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return "-"
    return f"USD {value:.2f}"


def render_booking_pdf_bytes(booking: dict) -> bytes:
    """Return an A4 booking voucher as PDF bytes. Pure function."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    _, h = A4

    c.setFont("Helvetica-Bold", 18)
    c.drawString(60, h - 60, "Savana Blu Booking")
    c.setFont("Helvetica", 11)
    c.drawString(60, h - 80, f"Booking ID: {booking.get('id', '')}")
    c.drawString(60, h - 96, f"Status: {booking.get('status', '-')}  Payment: {booking.get('paymentStatus') or '-'}")

    c.setFont("Helvetica-Bold", 12)
    c.drawString(60, h - 130, "Guest")
    c.setFont("Helvetica", 11)
    c.drawString(60, h - 148, booking.get("customerName") or booking.get("guestName") or "(Not provided)")
    c.drawString(60, h - 164, booking.get("customerEmail") or booking.get("guestEmail") or "")
    c.drawString(60, h - 180, booking.get("customerPhone") or booking.get("guestPhone") or "")

    c.setFont("Helvetica-Bold", 12)
    c.drawString(60, h - 215, "Experience")
    c.setFont("Helvetica", 11)
    c.drawString(60, h - 233, booking.get("experienceTitle") or "-")
    c.drawString(60, h - 249, f"Date: {booking.get('dateLabel') or booking.get('date') or '-'}")
    c.drawString(60, h - 265, f"Guests: {booking.get('adults', 0)} adults, {booking.get('children', 0)} children")
    y = h - 281
    if booking.get("pickupLocation"):
        c.drawString(60, y, f"Pick-up: {booking['pickupLocation']} {booking.get('pickupTime') or ''}".rstrip())
        y -= 16
    if booking.get("airportPickup"):
        c.drawString(60, y, f"Airport pick-up, flight: {booking.get('airportFlight') or '-'}")
        y -= 16

    c.setFont("Helvetica-Bold", 12)
    c.drawString(60, y - 20, "Payment")
    c.setFont("Helvetica", 11)
    c.drawString(60, y - 38, f"Total: {_money(total_usd_of(booking))}")
    c.drawString(60, y - 54, f"Deposit paid online: {_money(booking.get('depositUSD'))}")
    c.drawString(60, y - 70, f"Balance due on the day: {_money(booking.get('balanceUSD'))}")
    if booking.get("promoCode"):
        c.drawString(60, y - 86, f"Promo code: {booking['promoCode']}")

    c.setFont("Helvetica", 9)
    c.drawString(60, 40, "Balance is settled in person at the start of your experience.")
    c.drawString(60, 26, f"Generated: {datetime.now(timezone.utc).isoformat()}")

    c.showPage()
    c.save()
    return buf.getvalue()
