import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from app.core.config import settings

CHILD_RATE = 0.5
CURRENCY = "USD"
# Single authoritative deposit rate: the charge and the booking widget preview both use it.
DEPOSIT_RATE = settings.DEPOSIT_PERCENT / 100


def round_money(amount: float) -> float:
    return float(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _as_count(value, minimum: int, default: int) -> int:
    try:
        n = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return max(n, minimum)


def compute_trip_total(base_price: float, adults=1, children=0) -> float:
    """Adults pay the base price, children half of it. Not rounded; discounts apply first."""
    try:
        price = float(base_price or 0)
    except (TypeError, ValueError):
        price = 0.0
    if not math.isfinite(price) or price < 0:
        price = 0.0
    adults_n = _as_count(adults, 1, 1)
    children_n = _as_count(children, 0, 0)
    return price * adults_n + price * CHILD_RATE * children_n


def compute_deposit(total: float) -> float:
    return round_money(max(total, 0) * DEPOSIT_RATE)


def compute_balance(total: float, deposit: float) -> float:
    return round_money(total - deposit)


def convert_usd(amount_usd: float, rate: float | None = None) -> float:
    """USD -> secondary display currency (AED for the Ziina receipt)."""
    return round_money(amount_usd * (rate or settings.USD_TO_AED_RATE))


@dataclass
class Quote:
    subtotal: float
    discount: float
    total: float
    deposit: float
    balance: float
    promo_code: str | None = None
    currency: str = CURRENCY

    def as_dict(self) -> dict:
        return {
            "subtotalUSD": round_money(self.subtotal),
            "discountUSD": round_money(self.discount),
            "totalUSD": round_money(self.total),
            "depositUSD": self.deposit,
            "balanceUSD": self.balance,
            "depositPercent": settings.DEPOSIT_PERCENT,
            "promoCode": self.promo_code,
            "currency": self.currency,
        }


def build_quote(subtotal: float, discount: float = 0, promo_code: str | None = None) -> Quote:
    total = round_money(subtotal - discount)
    deposit = compute_deposit(total)
    return Quote(
        subtotal=subtotal,
        discount=discount,
        total=total,
        deposit=deposit,
        balance=compute_balance(total, deposit),
        promo_code=promo_code,
    )
