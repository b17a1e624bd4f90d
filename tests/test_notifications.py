import pytest
import requests
from kombu.exceptions import OperationalError

from app.core.config import settings
from app.core.errors import NotificationFailure
from app.services import email_service, notification_service
from app.services.notification_service import (
    CONFIRMED_GUEST, ON_HOLD_GUEST, ON_HOLD_OPERATOR, build_booking_payload, deliver, dispatch, render,
)

BOOKING = {
    "id": "booking_1_abc", "experienceTitle": "Safari Blue", "type": "zanzibar-tour", "dateLabel": "14 Dec 2030",
    "customerName": "Amina", "customerEmail": "amina@example.com", "adults": 2, "children": 0,
    "totalUSD": 200, "balanceUSD": 160, "paymentLinkUrl": "https://pay.ziina.com/pi_1",
}


def test_payload_reads_legacy_keys():
    p = build_booking_payload({"bookingId": "old", "guestEmail": "g@x.com", "total": 50})
    assert p["id"] == "old"
    assert p["guestEmail"] == "g@x.com"
    assert p["totalUsd"] == 50


def test_on_hold_guest_mentions_link_and_deposit():
    subject, body = render(ON_HOLD_GUEST, build_booking_payload(BOOKING, 40, 148))
    assert "on hold" in subject
    assert "https://pay.ziina.com/pi_1" in body
    assert "USD 40.00" in body


def test_unknown_kind():
    with pytest.raises(ValueError):
        render("birthday", {})


def test_deliver_skips_guest_without_email(outbox):
    assert deliver(ON_HOLD_GUEST, build_booking_payload({**BOOKING, "customerEmail": ""})) is False
    assert outbox == []


def test_operator_email_goes_to_admin_inbox(outbox):
    assert deliver(ON_HOLD_OPERATOR, build_booking_payload(BOOKING)) is True
    assert outbox[0]["to"] == settings.ADMIN_EMAIL


def test_confirmed_guest_gets_voucher(outbox):
    deliver(CONFIRMED_GUEST, build_booking_payload(BOOKING, 40, 148))
    name, content, mime = outbox[0]["attachments"][0]
    assert name == "savanablu-booking_1_abc.pdf"
    assert content.startswith(b"%PDF")


def test_deliver_failure_is_logged_not_raised(monkeypatch, caplog):
    def _boom(*args, **kwargs):
        raise NotificationFailure("Resend error 500")

    monkeypatch.setattr(notification_service, "send_email", _boom)
    assert deliver(ON_HOLD_GUEST, build_booking_payload(BOOKING)) is False
    assert "booking_1_abc" in caplog.text


def test_dispatch_swallows_broker_outage(monkeypatch, caplog):
    from app.tasks import jobs

    def _down(*args, **kwargs):
        raise OperationalError("Error 111 connecting to localhost:6379")

    monkeypatch.setattr(jobs.send_notification, "delay", _down)
    assert dispatch(ON_HOLD_GUEST, build_booking_payload(BOOKING)) is False
    assert "could not queue" in caplog.text


def test_dispatch_runs_task(outbox):
    assert dispatch(ON_HOLD_GUEST, build_booking_payload(BOOKING)) is True
    assert outbox[0]["to"] == "amina@example.com"


# Transport

class FakeSMTP:
    sent = []

    def __init__(self, host, port, timeout=None):
        self.host = host

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def login(self, username, password):
        pass

    def send_message(self, msg):
        FakeSMTP.sent.append(msg)


def test_send_email_rejects_bad_address():
    with pytest.raises(NotificationFailure):
        email_service.send_email("nobody", "s", "b")


def test_send_email_smtp(monkeypatch):
    FakeSMTP.sent = []
    monkeypatch.setattr(email_service.smtplib, "SMTP", FakeSMTP)
    email_service.send_email("a@example.com", "Hello", "Body", [("v.pdf", b"%PDF-1.4", "application/pdf")])
    msg = FakeSMTP.sent[0]
    assert msg["To"] == "a@example.com"
    assert [p.get_filename() for p in msg.iter_attachments()] == ["v.pdf"]


def test_send_email_resend(monkeypatch):
    posted = {}

    class Resp:
        status_code = 200
        text = "{}"

    def _post(url, json=None, headers=None, timeout=None):
        posted.update(url=url, json=json, headers=headers)
        return Resp()

    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(email_service.requests, "post", _post)
    email_service.send_email("a@example.com", "Hello", "Body", [("v.pdf", b"%PDF", "application/pdf")])
    assert posted["url"] == email_service.RESEND_URL
    assert posted["json"]["to"] == ["a@example.com"]
    assert posted["json"]["attachments"][0]["content"] == "JVBERg=="
    assert posted["headers"]["Authorization"] == "Bearer re_test"


def test_send_email_resend_error(monkeypatch):
    class Resp:
        status_code = 422
        text = "invalid from"

    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(email_service.requests, "post", lambda *a, **k: Resp())
    with pytest.raises(NotificationFailure, match="422"):
        email_service.send_email("a@example.com", "Hello", "Body")


def test_unknown_kind_is_logged_not_raised(outbox, caplog):
    assert deliver("birthday", {"id": "b9", "email": "a@example.com"}) is False
    assert "unknown notification kind" in caplog.text
    assert outbox == []


def test_voucher_failure_still_sends_confirmation(monkeypatch, outbox, caplog):
    def _broken_pdf(booking):
        raise ValueError("bad font")

    monkeypatch.setattr(notification_service, "render_booking_pdf_bytes", _broken_pdf)
    assert deliver(CONFIRMED_GUEST, build_booking_payload(BOOKING, 40, 148)) is True
    assert outbox[0]["attachments"] == []
    assert "could not be rendered" in caplog.text
