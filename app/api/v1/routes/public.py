from fastapi import APIRouter, HTTPException

from app.schemas.booking import PromoValidateRequest, QuoteOut, QuoteRequest
from app.schemas.crm import ContactOut, ContactRequest, PackageEnquiryRequest
from app.services import availability_service, catalog_service, crm_service
from app.services.pricing_service import build_quote, compute_trip_total
from app.services.promo_service import apply_promo, promo_message

router = APIRouter(tags=["public"])


@router.get("/public/tours")
def list_tours():
    return [t.model_dump() for t in catalog_service.get_tours()]


@router.get("/public/tours/{slug}")
def get_tour(slug: str):
    tour = catalog_service.get_tour(slug)
    if not tour:
        raise HTTPException(status_code=404, detail="Tour not found")
    return tour.model_dump()


@router.get("/public/packages")
def list_packages():
    """Safari packages, cheapest first."""
    return [p.model_dump() for p in catalog_service.get_packages()]


@router.get("/public/packages/{slug}")
def get_package(slug: str):
    package = catalog_service.get_package(slug)
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")
    return package.model_dump()


@router.post("/public/quote", response_model=QuoteOut)
def quote(body: QuoteRequest):
    """Live price preview for the booking widget. Uses the same deposit rate as checkout."""
    kind = (body.type or "").strip().lower()
    if kind not in catalog_service.BOOKING_KINDS:
        raise HTTPException(status_code=400, detail=f"Unknown booking type: {body.type}")
    item = catalog_service.resolve_item(kind, body.slug.strip())
    if not item:
        raise HTTPException(status_code=404, detail="Tour not found" if kind == "tour" else "Package not found")
    subtotal = compute_trip_total(item.base_price, body.adults, body.children)
    promo = apply_promo(body.promoCode, subtotal)
    out = build_quote(subtotal, promo.discount, promo.applied_code).as_dict()
    out["promoError"] = promo.error
    return out


@router.post("/public/promos/validate")
def validate_promo(body: PromoValidateRequest):
    try:
        amount = float(body.amount)
    except (TypeError, ValueError):
        amount = 0.0
    if not body.code or not body.code.strip() or amount <= 0:
        raise HTTPException(status_code=400, detail="Promo code and a positive amount are required.")
    result = apply_promo(body.code, amount)
    if not result.valid:
        raise HTTPException(status_code=400, detail=result.error)
    return {
        "valid": True,
        "code": result.applied_code,
        "type": result.promo.type,
        "value": result.promo.value,
        "discountAmount": result.discount,
        "finalAmount": result.total,
        "message": promo_message(result.promo),
    }


@router.post("/public/contact", response_model=ContactOut, response_model_exclude_none=True)
def contact(body: ContactRequest):
    return crm_service.submit_enquiry(body.model_dump())


@router.post("/public/enquiries/package", response_model=ContactOut, response_model_exclude_none=True)
def package_enquiry(body: PackageEnquiryRequest):
    return crm_service.submit_package_enquiry(body.model_dump())


@router.get("/public/availability")
def availability(tourSlug: str | None = None):
    """Dates the booking calendar should grey out, global plus the tour's own."""
    return {"blockedDates": availability_service.blocked_dates(tourSlug)}
