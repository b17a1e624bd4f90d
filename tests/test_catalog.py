from app.core.config import settings
from app.db.data_files import data_path, read_json_list
from app.seed import DEFAULT_PROMOS, run as run_seed
from app.services.catalog_service import resolve_item


def test_packages_sorted_cheapest_first(client):
    r = client.get("/api/v1/public/packages")
    assert [p["slug"] for p in r.json()] == ["mikumi-safari", "big-safari"]


def test_tour_detail_and_missing(client):
    assert client.get("/api/v1/public/tours/spice-tour").json()["basePrice"] == 100
    r = client.get("/api/v1/public/tours/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Tour not found"}


def test_resolve_item():
    item = resolve_item("package", "big-safari")
    assert item.base_price == 1200
    assert item.experience_type == "safari"
    assert resolve_item("tour", "big-safari") is None


def test_seed_only_fills_missing_files(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path / "fresh"))
    run_seed()
    assert read_json_list("promos") == DEFAULT_PROMOS
    data_path("promos").write_text("[]", encoding="utf-8")
    run_seed()
    assert read_json_list("promos") == []


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_quote_rejects_unknown_type(client):
    r = client.post("/api/v1/public/quote", json={"type": "cruise", "slug": "mikumi-safari"})
    assert r.status_code == 400
    assert r.json() == {"error": "Unknown booking type: cruise"}
    r = client.post("/api/v1/public/quote", json={"type": "Package", "slug": "mikumi-safari", "adults": 2})
    assert r.json()["subtotalUSD"] == 1000
