from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from app.models.booking import public_view
from app.schemas.booking import BookingCreate, BookingCreatedOut
from app.services.booking_service import create_booking, get_public_booking

router = APIRouter(tags=["bookings"])


def _wants_json(request: Request, return_json: str | None) -> bool:
    return return_json == "true" or "application/json" in request.headers.get("accept", "")


@router.post("/public/bookings", response_model=BookingCreatedOut)
@router.post("/booking/create", response_model=BookingCreatedOut, include_in_schema=False)
def create(body: BookingCreate, request: Request, returnJson: str | None = None):
    created = create_booking(body)
    if _wants_json(request, returnJson):
        return BookingCreatedOut(redirectUrl=created.redirect_url, bookingId=created.booking_id)
    return RedirectResponse(url=created.redirect_url, status_code=303)


@router.get("/public/bookings/{booking_id}")
def get_booking(booking_id: str):
    """Guest-facing booking lookup for the success page."""
    return public_view(get_public_booking(booking_id))
