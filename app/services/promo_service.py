from dataclasses import dataclass

from app.db.data_files import read_json_list
from app.models.promo import Promo

INVALID_PROMO = "This promo code is not valid or no longer active."


@dataclass
class PromoResult:
    discount: float
    applied_code: str | None
    total: float
    valid: bool
    promo: Promo | None = None
    error: str | None = None


def get_promos() -> list[Promo]:
    return [Promo(**p) for p in read_json_list("promos")]


def find_promo(code: str) -> Promo | None:
    """Exact, case-sensitive match on the trimmed code."""
    wanted = (code or "").strip()
    if not wanted:
        return None
    return next((p for p in get_promos() if p.code.strip() == wanted), None)


def apply_promo(code: str | None, subtotal: float) -> PromoResult:
    """Soft-fail: an unknown or inactive code never blocks a booking, it just gives no discount."""
    subtotal = max(float(subtotal or 0), 0.0)
    if not code or not code.strip():
        return PromoResult(discount=0.0, applied_code=None, total=subtotal, valid=False)

    promo = find_promo(code)
    if not promo or not promo.active:
        return PromoResult(discount=0.0, applied_code=None, total=subtotal, valid=False, error=INVALID_PROMO)

    if promo.type == "percent":
        discount = subtotal * promo.value / 100
    else:
        discount = promo.value
    discount = min(max(discount, 0.0), subtotal)
    return PromoResult(discount=discount, applied_code=promo.code, total=subtotal - discount, valid=True, promo=promo)


def promo_message(promo: Promo) -> str:
    if promo.type == "percent":
        return f"Promo applied: {promo.value:g}% off your tour."
    return f"Promo applied: USD {promo.value:.2f} off your tour."
