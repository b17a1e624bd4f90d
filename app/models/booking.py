from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BookingStatus(str, Enum):
    PENDING = "pending"        # created, no deposit intent yet
    ON_HOLD = "on-hold"        # deposit intent created, awaiting payment
    CONFIRMED = "confirmed"    # deposit received
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    CONFIRMED = "confirmed"
    REFUNDED = "refunded"      # only after confirmed; coexists with confirmed/cancelled
    CANCELLED = "cancelled"


class ExperienceType(str, Enum):
    TOUR = "zanzibar-tour"
    SAFARI = "safari"


class AdvancePayment(BaseModel):
    method: str = "ziina"
    percent: int = 20
    usd: Optional[float] = None
    aed: Optional[float] = None
    paidAt: str


class Booking(BaseModel):
    """Stored booking document. Unknown keys from older records are kept as-is."""
    model_config = ConfigDict(extra="allow")

    id: str
    type: str                          # zanzibar-tour|safari
    experienceSlug: str
    experienceTitle: str               # captured at booking time
    date: str
    dateLabel: str = ""
    adults: int = 1
    children: int = 0

    totalUSD: float = 0
    totalUsd: float = 0                # legacy camelCase twin of totalUSD
    depositUSD: float = 0
    balanceUSD: float = 0
    promoCode: Optional[str] = None
    discountUSD: float = 0

    customerName: str
    customerEmail: str
    customerPhone: str = ""
    notes: str = ""

    pickupLocation: Optional[str] = None
    pickupTime: Optional[str] = None
    airportPickup: bool = False
    airportFlight: Optional[str] = None

    status: str = BookingStatus.PENDING.value
    paymentStatus: Optional[str] = None

    ziinaPaymentIntentId: Optional[str] = None
    paymentLinkUrl: Optional[str] = None
    confirmedAt: Optional[str] = None
    advancePayment: Optional[AdvancePayment] = None
    confirmationEmailsSent: bool = False

    internalNotes: Optional[str] = None
    cancellationReason: Optional[str] = None
    refundReason: Optional[str] = None
    refundedAt: Optional[str] = None
    refundedAmount: Optional[float] = None

    createdAt: str
    updatedAt: Optional[str] = None
    source: str = "website-booking"

    def to_record(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


# Operator-only fields, never shown on guest-facing responses.
INTERNAL_FIELDS = ("internalNotes", "cancellationReason", "refundReason", "refundedAmount", "confirmationEmailsSent")


def public_view(record: dict) -> dict:
    return {k: v for k, v in record.items() if k not in INTERNAL_FIELDS}


def total_usd_of(record: dict) -> float | None:
    """Historical records carry the total under one of several keys."""
    for key in ("totalUsd", "totalUSD", "total"):
        v = record.get(key)
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return float(v)
    return None


def is_confirmed(record: dict) -> bool:
    return (
        record.get("paymentStatus") == PaymentStatus.CONFIRMED.value
        or record.get("status") == BookingStatus.CONFIRMED.value
        or bool(record.get("confirmedAt"))
    )
