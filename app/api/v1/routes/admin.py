from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from app.api.deps import require_admin
from app.schemas.admin import AvailabilityIn, BookingPatch, LeadPatch
from app.services import admin_service, availability_service, crm_service, reminder_service
from app.services.booking_service import get_public_booking
from app.services.finance_service import get_finance_summary
from app.services.voucher_service import render_booking_pdf_bytes

router = APIRouter(tags=["admin"])


@router.get("/admin/bookings")
def list_bookings(status: str | None = None, when: str | None = None, _: str = Depends(require_admin)):
    """`when`: upcoming | completed."""
    items = admin_service.list_bookings(status=status or "", when=when or "")
    return {"total": len(items), "items": items}


@router.get("/admin/bookings/{booking_id}")
def get_booking(booking_id: str, _: str = Depends(require_admin)):
    return get_public_booking(booking_id)


@router.patch("/admin/bookings/{booking_id}")
def update_booking(booking_id: str, body: BookingPatch, _: str = Depends(require_admin)):
    if body.action == "cancel":
        booking = admin_service.cancel_booking(booking_id, body.reason)
    elif body.action == "reverse-payment":
        booking = admin_service.reverse_payment(booking_id, body.reason, body.amount)
    elif body.internalNotes is not None:
        booking = admin_service.update_internal_notes(booking_id, body.internalNotes)
    else:
        raise HTTPException(status_code=400, detail="Nothing to update")
    return {"success": True, "booking": booking}


@router.get("/admin/bookings/{booking_id}/pdf")
def booking_pdf(booking_id: str, _: str = Depends(require_admin)):
    booking = get_public_booking(booking_id)
    pdf = render_booking_pdf_bytes(booking)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="booking-{booking["id"]}.pdf"'},
    )


@router.get("/admin/finance")
def finance(_: str = Depends(require_admin)):
    return get_finance_summary()


@router.get("/admin/crm-leads")
def list_leads(status: str | None = None, _: str = Depends(require_admin)):
    items = crm_service.list_leads(status or "")
    return {"total": len(items), "items": items}


@router.get("/admin/crm-leads/{lead_id}")
def get_lead(lead_id: str, _: str = Depends(require_admin)):
    return crm_service.get_lead(lead_id)


@router.patch("/admin/crm-leads/{lead_id}")
def update_lead(lead_id: str, body: LeadPatch, _: str = Depends(require_admin)):
    lead = crm_service.update_lead(lead_id, status=body.status, follow_up_date=body.followUpDate,
                                   new_note=body.newNote)
    return {"success": True, "lead": lead}


@router.get("/admin/availability")
def get_availability(_: str = Depends(require_admin)):
    return availability_service.read_availability()


@router.put("/admin/availability")
def set_availability(body: AvailabilityIn, _: str = Depends(require_admin)):
    return {"success": True, **availability_service.write_availability(body.model_dump())}


@router.post("/admin/reminders/send")
def send_reminders(_: str = Depends(require_admin)):
    """Run the daily reminder pass now."""
    return reminder_service.send_trip_reminders()
