import base64
import logging
import re
import smtplib
from email.message import EmailMessage

import requests

from app.core.config import settings
from app.core.errors import NotificationFailure

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str | None) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email.strip()))


def send_email(to_email: str, subject: str, body: str, attachments: list[tuple[str, bytes, str]] | None = None) -> None:
    """Send via Resend if configured, otherwise SMTP (MailHog recommended for local).

    attachments: list of (filename, content_bytes, mime_type)
    """
    if not is_valid_email(to_email):
        raise NotificationFailure(f"Invalid email address: {to_email!r}")
    attachments = attachments or []

    if settings.RESEND_API_KEY:
        _send_via_resend(to_email, subject, body, attachments)
        return

    msg = EmailMessage()
    msg["From"] = settings.EMAIL_FROM
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    for filename, content, mime in attachments:
        maintype, subtype = (mime.split("/", 1) + ["octet-stream"])[:2]
        msg.add_attachment(content, maintype=maintype, subtype=subtype, filename=filename)

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
        if settings.SMTP_USERNAME:
            smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        smtp.send_message(msg)
    logger.info("email sent via SMTP to %s: %s", to_email, subject)


def _send_via_resend(to_email: str, subject: str, body: str, attachments: list[tuple[str, bytes, str]]):
    payload = {
        "from": settings.EMAIL_FROM,
        "to": [to_email],
        "subject": subject,
        "text": body,
    }

    if attachments:
        payload["attachments"] = [
            {"filename": filename, "content": base64.b64encode(content).decode("utf-8")}
            for filename, content, _mime in attachments
        ]

    r = requests.post(
        RESEND_URL,
        json=payload,
        headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
        timeout=20,
    )
    if r.status_code >= 400:
        raise NotificationFailure(f"Resend error {r.status_code}: {r.text}")
    logger.info("email sent via Resend to %s: %s", to_email, subject)
