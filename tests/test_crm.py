import pytest
import redis

from app.core.errors import NotFoundError, ValidationError
from app.db.booking_store import BookingStore
from app.services import crm_service
from app.services.crm_service import claim_submission, duplicate_key, get_lead_store


def _enquiry(**overrides):
    body = {"name": "Jonas", "email": "Jonas@Example.com", "phone": "+49 (170) 123-4567",
            "message": "Two nights in Nungwi, any boat trips?"}
    body.update(overrides)
    return body


def test_submit_stores_lead_and_queues_both_emails(outbox):
    result = crm_service.submit_enquiry(_enquiry())
    assert result["success"] is True
    lead = get_lead_store().find_by_id(result["leadId"])
    assert lead["status"] == "new"
    assert lead["source"] == "contact-form"
    assert sorted(m["to"] for m in outbox) == ["Jonas@Example.com", "hello@savanablu.com"]


@pytest.mark.parametrize("override", [
    {"name": ""},
    {"email": "   "},
    {"phone": None},
    {"phone": "call me maybe"},
    {"email": "jonas-at-example"},
])
def test_invalid_enquiry(outbox, override):
    with pytest.raises(ValidationError):
        crm_service.submit_enquiry(_enquiry(**override))
    assert get_lead_store().read_all() == []
    assert outbox == []


def test_duplicate_within_window_is_suppressed(outbox):
    crm_service.submit_enquiry(_enquiry())
    outbox.clear()
    again = crm_service.submit_enquiry(_enquiry(email=" jonas@example.COM "))
    assert again == {"success": True, "duplicate": True}
    assert len(get_lead_store().read_all()) == 1
    assert outbox == []


def test_duplicate_key_buckets_by_window():
    t = 1_700_000_100.0
    assert duplicate_key("A@x.com", now=t) == duplicate_key("a@x.com ", now=t + 60)
    assert duplicate_key("a@x.com", now=t) != duplicate_key("a@x.com", now=t + 600)


def test_claim_uses_redis_set_nx(fake_redis):
    assert claim_submission("a@x.com") is True
    assert claim_submission("a@x.com") is False
    key = duplicate_key("a@x.com")
    assert 0 < fake_redis.ttl(key) <= 300


def test_claim_falls_back_to_local_guard(monkeypatch):
    class DownRedis:
        def set(self, *args, **kwargs):
            raise redis.ConnectionError("down")

    monkeypatch.setattr(crm_service, "get_redis", lambda: DownRedis())
    monkeypatch.setattr(crm_service, "_local_guard", {})
    assert claim_submission("b@x.com") is True
    assert claim_submission("b@x.com") is False


def test_lead_detail_joins_bookings_on_email():
    lead_id = crm_service.submit_enquiry(_enquiry())["leadId"]
    BookingStore().write_all([
        {"id": "b1", "customerEmail": "  jonas@example.com"},
        {"id": "b2", "customerEmail": "someone@else.com"},
        {"id": "b3", "guestEmail": "JONAS@EXAMPLE.COM"},
    ])
    lead = crm_service.get_lead(lead_id)
    assert [b["id"] for b in lead["bookings"]] == ["b1", "b3"]


def test_update_lead_appends_notes():
    lead_id = crm_service.submit_enquiry(_enquiry())["leadId"]
    crm_service.update_lead(lead_id, status="in-progress", new_note="Sent quote by WhatsApp")
    updated = crm_service.update_lead(lead_id, follow_up_date="2030-02-01", new_note="Chased")
    assert updated["status"] == "in-progress"
    assert updated["followUpDate"] == "2030-02-01"
    assert [n["note"] for n in updated["notes"]] == ["Sent quote by WhatsApp", "Chased"]


def test_update_lead_rejects_bad_status_and_unknown_id():
    lead_id = crm_service.submit_enquiry(_enquiry())["leadId"]
    with pytest.raises(ValidationError):
        crm_service.update_lead(lead_id, status="maybe")
    with pytest.raises(NotFoundError):
        crm_service.update_lead("lead_0", status="new")


def test_contact_and_admin_endpoints(client, admin_headers):
    r = client.post("/api/v1/public/contact", json=_enquiry())
    assert r.status_code == 200
    lead_id = r.json()["leadId"]
    assert client.post("/api/v1/public/contact", json=_enquiry()).json() == {"success": True, "duplicate": True}
    assert client.post("/api/v1/public/contact", json=_enquiry(name="")).status_code == 400

    r = client.get("/api/v1/admin/crm-leads", headers=admin_headers)
    assert r.json()["total"] == 1
    r = client.patch(f"/api/v1/admin/crm-leads/{lead_id}", json={"status": "closed-won", "newNote": "Booked"},
                     headers=admin_headers)
    assert r.json()["lead"]["status"] == "closed-won"
    r = client.get(f"/api/v1/admin/crm-leads/{lead_id}", headers=admin_headers)
    assert r.json()["bookings"] == []


def test_package_enquiry_is_stored_as_lead(client, outbox):
    r = client.post("/api/v1/public/enquiries/package", json={
        "packageSlug": "mikumi-safari", "name": "Lena", "email": "lena@example.com",
        "dates": "March 2031", "guests": "2 adults", "message": "Is a private vehicle possible?",
    })
    assert r.status_code == 200
    lead_id = r.json()["leadId"]
    assert lead_id.startswith("pkg-")
    lead = get_lead_store().find_by_id(lead_id)
    assert lead["source"] == "package-enquiry"
    assert lead["packageTitle"] == "Mikumi Safari"
    assert lead["guests"] == "2 adults"
    assert lead["status"] == "new"
    operator = next(m for m in outbox if m["to"] == "hello@savanablu.com")
    assert "Package: Mikumi Safari" in operator["body"]


def test_package_enquiry_is_not_deduplicated():
    crm_service.submit_package_enquiry({"packageSlug": "big-safari", "name": "Lena", "email": "lena@example.com"})
    crm_service.submit_package_enquiry({"packageSlug": "big-safari", "name": "Lena", "email": "lena@example.com"})
    assert len(get_lead_store().read_all()) == 2


def test_package_enquiry_keeps_title_for_retired_package():
    result = crm_service.submit_package_enquiry({
        "packageSlug": "old-safari", "packageTitle": "Old Safari", "name": "Lena", "email": "lena@example.com",
    })
    assert get_lead_store().find_by_id(result["leadId"])["packageTitle"] == "Old Safari"


@pytest.mark.parametrize("override", [{"packageSlug": ""}, {"name": None}, {"email": "nope"}])
def test_package_enquiry_rejected(client, outbox, override):
    body = {"packageSlug": "big-safari", "name": "Lena", "email": "lena@example.com", **override}
    r = client.post("/api/v1/public/enquiries/package", json=body)
    assert r.status_code == 400
    assert get_lead_store().read_all() == []
    assert outbox == []
