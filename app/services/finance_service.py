from datetime import datetime

from app.db.booking_store import BookingStore
from app.models.booking import total_usd_of
from app.services.pricing_service import round_money

PACKAGE_TYPES = ("safari", "Safari", "package")


def _empty_totals() -> dict:
    return {"bookingCount": 0, "totalRevenueUSD": 0.0, "totalDepositsUSD": 0.0, "totalBalanceUSD": 0.0}


def _add(row: dict, total: float, deposit: float, balance: float) -> None:
    row["bookingCount"] += 1
    row["totalRevenueUSD"] += total
    row["totalDepositsUSD"] += deposit
    row["totalBalanceUSD"] += balance


def _rounded(row: dict) -> dict:
    return {k: (round_money(v) if isinstance(v, float) else v) for k, v in row.items()}


def _month_key(b: dict) -> str:
    raw = b.get("date") or b.get("tourDate") or b.get("packageDate") or b.get("createdAt")
    if not raw:
        return "Unknown"
    try:
        d = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return "Unknown"
    return f"{d.year}-{d.month:02d}"


def get_finance_summary(store: BookingStore | None = None) -> dict:
    """Revenue, deposit and balance totals overall, per type, per experience and per month."""
    store = store or BookingStore()
    totals = _empty_totals()
    by_type = {"tours": _empty_totals(), "packages": _empty_totals()}
    by_experience: dict[str, dict] = {}
    by_month: dict[str, dict] = {}

    for b in store.read_all():
        total = total_usd_of(b) or 0.0
        deposit = float(b.get("depositUSD") or 0)
        balance = b.get("balanceUSD")
        balance = float(balance) if isinstance(balance, (int, float)) else total - deposit

        _add(totals, total, deposit, balance)
        _add(by_type["packages" if b.get("type") in PACKAGE_TYPES else "tours"], total, deposit, balance)

        slug = b.get("experienceSlug") or b.get("slug") or "unknown"
        if slug not in by_experience:
            by_experience[slug] = {
                "experienceSlug": slug,
                "experienceTitle": b.get("experienceTitle") or b.get("tourTitle") or b.get("packageTitle") or "Unknown",
                **_empty_totals(),
            }
        _add(by_experience[slug], total, deposit, balance)

        month = _month_key(b)
        by_month.setdefault(month, {"monthKey": month, **_empty_totals()})
        _add(by_month[month], total, deposit, balance)

    return {
        "totals": _rounded(totals),
        "byType": {k: _rounded(v) for k, v in by_type.items()},
        "byExperience": sorted((_rounded(r) for r in by_experience.values()), key=lambda r: -r["totalRevenueUSD"]),
        "byMonth": sorted((_rounded(r) for r in by_month.values()), key=lambda r: r["monthKey"]),
    }
