import fakeredis
import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.security import hash_password
from app.db.data_files import write_json_list
from app.db.redis_client import set_redis
from app.services import notification_service, payment_service
from app.services.ziina_client import ZiinaError
from app.tasks.celery_app import celery

ADMIN_PASSCODE = "letmein-123"

TOURS = [
    {"slug": "spice-tour", "title": "Spice Farm Tour", "basePrice": 100},
    {"slug": "prison-island", "title": "Prison Island", "basePrice": 45.5},
]
PACKAGES = [
    {"slug": "big-safari", "title": "Big Safari", "priceFrom": 1200},
    {"slug": "mikumi-safari", "title": "Mikumi Safari", "priceFrom": 500},
]
PROMOS = [
    {"code": "SAVE10", "type": "percent", "value": 10, "active": True},
    {"code": "FLAT50", "type": "fixed", "value": 50, "active": True},
    {"code": "HUGE", "type": "fixed", "value": 1000, "active": True},
    {"code": "OLD", "type": "percent", "value": 30, "active": False},
]


class FakeZiina:
    """Stands in for ZiinaClient; records every intent request."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def create_payment_intent(self, **kwargs):
        self.calls.append(kwargs)
        if self.fail:
            raise ZiinaError("Ziina 500: upstream unavailable")
        n = len(self.calls)
        return {"id": f"pi_{n}", "redirect_url": f"https://pay.ziina.com/pi_{n}"}


@pytest.fixture(autouse=True)
def env(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setattr(settings, "STORE_USE_REDIS", True)
    monkeypatch.setattr(settings, "ENV", "local")
    monkeypatch.setattr(settings, "RESEND_API_KEY", "")
    monkeypatch.setattr(settings, "ZIINA_API_KEY", "test-key")
    monkeypatch.setattr(settings, "APP_PUBLIC_URL", "https://savanablu.test")
    monkeypatch.setattr(settings, "ADMIN_PASSCODE_HASH", hash_password(ADMIN_PASSCODE))

    write_json_list("tours", TOURS)
    write_json_list("packages", PACKAGES)
    write_json_list("promos", PROMOS)

    celery.conf.task_always_eager = True
    yield
    celery.conf.task_always_eager = False


@pytest.fixture(autouse=True)
def fake_redis():
    client = fakeredis.FakeRedis(decode_responses=True)
    set_redis(client)
    yield client
    set_redis(None)


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    sent = []

    def _send(to_email, subject, body, attachments=None):
        sent.append({"to": to_email, "subject": subject, "body": body, "attachments": attachments or []})

    monkeypatch.setattr(notification_service, "send_email", _send)
    return sent


@pytest.fixture
def ziina(monkeypatch):
    fake = FakeZiina()
    monkeypatch.setattr(payment_service, "_ziina_client", lambda: fake)
    return fake


@pytest.fixture
def ziina_down(monkeypatch):
    fake = FakeZiina(fail=True)
    monkeypatch.setattr(payment_service, "_ziina_client", lambda: fake)
    return fake


@pytest.fixture
def client():
    from app.main import app
    return TestClient(app)


@pytest.fixture
def admin_headers(client):
    r = client.post("/api/v1/admin/login", json={"passcode": ADMIN_PASSCODE})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


def _booking_body(**overrides):
    body = {
        "type": "tour",
        "slug": "spice-tour",
        "date": "2030-12-14",
        "adults": 2,
        "children": 1,
        "promoCode": "SAVE10",
        "customerName": "Amina Said",
        "customerEmail": "amina@example.com",
        "customerPhone": "+255 700 000 000",
        "notes": "",
    }
    body.update(overrides)
    return body


@pytest.fixture
def booking_body():
    return _booking_body

