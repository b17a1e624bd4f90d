from datetime import date

from app.core.errors import ValidationError
from app.db.data_files import read_json, write_json

AVAILABILITY_FILE = "availability"


def _dates(values) -> list[str]:
    if not isinstance(values, list):
        return []
    return sorted({v.strip() for v in values if isinstance(v, str) and v.strip()})


def normalize(raw) -> dict:
    """{globalBlocked: [...], tours: {slug: [...]}} with only string dates kept."""
    raw = raw if isinstance(raw, dict) else {}
    tours = raw.get("tours") if isinstance(raw.get("tours"), dict) else {}
    return {
        "globalBlocked": _dates(raw.get("globalBlocked")),
        "tours": {slug: _dates(values) for slug, values in tours.items()},
    }


def read_availability() -> dict:
    return normalize(read_json(AVAILABILITY_FILE, {}))


def write_availability(raw: dict) -> dict:
    data = normalize(raw)
    for d in data["globalBlocked"] + [d for values in data["tours"].values() for d in values]:
        try:
            date.fromisoformat(d)
        except ValueError:
            raise ValidationError(f"Invalid date: {d}. Use YYYY-MM-DD.")
    write_json(AVAILABILITY_FILE, data)
    return data


def blocked_dates(slug: str | None = None) -> list[str]:
    """Global blocked dates, plus the ones for `slug` when given."""
    data = read_availability()
    if not slug:
        return data["globalBlocked"]
    return sorted(set(data["globalBlocked"]) | set(data["tours"].get(slug, [])))
