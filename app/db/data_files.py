import json
from pathlib import Path

from app.core.config import settings


def data_path(name: str) -> Path:
    return Path(settings.DATA_DIR) / f"{name}.json"


def read_json(name: str, default):
    """Reference data kept as a plain file. A missing file gives `default`."""
    path = data_path(name)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default
    return json.loads(raw) if raw.strip() else default


def write_json(name: str, data) -> None:
    path = data_path(name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def read_json_list(name: str) -> list[dict]:
    """Read-only reference data (catalog, promo codes). A missing file is an empty list."""
    data = read_json(name, [])
    return data if isinstance(data, list) else []


def write_json_list(name: str, items: list[dict]) -> None:
    write_json(name, items)
