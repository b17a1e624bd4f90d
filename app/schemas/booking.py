from pydantic import BaseModel
from typing import Any, Optional, Union

Number = Union[int, float, str]


class BookingCreate(BaseModel):
    # Everything optional on purpose: missing fields are reported as a 400 by the
    # booking service, not as a 422 by request parsing.
    type: Optional[str] = None            # tour|package
    slug: Optional[str] = None
    date: Optional[str] = None
    adults: Optional[Number] = None
    children: Optional[Number] = None
    promoCode: Optional[str] = None
    customerName: Optional[str] = None
    customerEmail: Optional[str] = None
    customerPhone: Optional[str] = None
    notes: Optional[str] = None
    pickupLocation: Optional[str] = None
    pickupTime: Optional[str] = None
    airportPickup: Optional[bool] = None
    airportFlight: Optional[str] = None


class BookingCreatedOut(BaseModel):
    redirectUrl: str
    bookingId: str


class QuoteRequest(BaseModel):
    type: str = "tour"
    slug: str
    adults: Optional[Number] = 1
    children: Optional[Number] = 0
    promoCode: Optional[str] = None


class QuoteOut(BaseModel):
    subtotalUSD: float
    discountUSD: float
    totalUSD: float
    depositUSD: float
    balanceUSD: float
    depositPercent: int
    promoCode: Optional[str] = None
    promoError: Optional[str] = None
    currency: str = "USD"


class PromoValidateRequest(BaseModel):
    code: Optional[str] = None
    amount: Optional[Any] = None
