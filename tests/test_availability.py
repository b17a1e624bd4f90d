import pytest

from app.core.errors import ValidationError
from app.db.data_files import write_json
from app.services import availability_service


def test_missing_file_blocks_nothing(client):
    r = client.get("/api/v1/public/availability")
    assert r.status_code == 200
    assert r.json() == {"blockedDates": []}
    assert availability_service.read_availability() == {"globalBlocked": [], "tours": {}}


def test_tour_dates_add_to_global_dates(client):
    write_json("availability", {
        "globalBlocked": ["2030-12-25", "2030-12-24", "2030-12-25"],
        "tours": {"spice-tour": ["2030-12-14", "2030-12-24"]},
    })
    assert client.get("/api/v1/public/availability").json()["blockedDates"] == ["2030-12-24", "2030-12-25"]
    r = client.get("/api/v1/public/availability", params={"tourSlug": "spice-tour"})
    assert r.json()["blockedDates"] == ["2030-12-14", "2030-12-24", "2030-12-25"]
    r = client.get("/api/v1/public/availability", params={"tourSlug": "prison-island"})
    assert r.json()["blockedDates"] == ["2030-12-24", "2030-12-25"]


def test_malformed_file_is_normalized():
    write_json("availability", {"globalBlocked": "2030-01-01", "tours": {"spice-tour": [None, " 2030-02-02 "]}})
    assert availability_service.read_availability() == {"globalBlocked": [], "tours": {"spice-tour": ["2030-02-02"]}}


def test_write_rejects_bad_dates():
    with pytest.raises(ValidationError, match="14/12/2030"):
        availability_service.write_availability({"globalBlocked": ["14/12/2030"]})
    assert availability_service.read_availability()["globalBlocked"] == []


def test_admin_edit(client, admin_headers):
    body = {"globalBlocked": ["2031-01-01"], "tours": {"prison-island": ["2031-01-05"]}}
    assert client.put("/api/v1/admin/availability", json=body).status_code == 401

    r = client.put("/api/v1/admin/availability", json=body, headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, **body}
    assert client.get("/api/v1/admin/availability", headers=admin_headers).json() == body

    r = client.put("/api/v1/admin/availability", json={"globalBlocked": ["soon"]}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid date: soon. Use YYYY-MM-DD."}
