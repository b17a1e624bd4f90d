import logging
from dataclasses import dataclass

import requests

from app.core.errors import PaymentAdapterFailure

logger = logging.getLogger(__name__)

MERCHANT_NAME = "Savana Blu Luxury Expeditions"
MIN_AMOUNT_CENTS = 100


@dataclass
class ZiinaConfig:
    api_base: str          # https://api-v2.ziina.com/api
    api_key: str           # Bearer token from the Ziina dashboard
    timeout: int = 25


class ZiinaError(PaymentAdapterFailure):
    pass


class ZiinaClient:
    def __init__(self, cfg: ZiinaConfig):
        if not cfg.api_key:
            raise ZiinaError("ZIINA_API_KEY is not configured")
        self.cfg = cfg

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {self.cfg.api_key}",
        }

    def request(self, method: str, path: str, payload: dict | None = None) -> dict:
        url = f"{self.cfg.api_base.rstrip('/')}{path}"
        try:
            r = requests.request(method=method.upper(), url=url, json=payload, headers=self._headers(), timeout=self.cfg.timeout)
        except requests.RequestException as e:
            raise ZiinaError(f"Ziina request failed: {e}") from e
        try:
            data = r.json() if r.text else {}
        except ValueError:
            data = {"raw": r.text}
        if r.status_code >= 400:
            message = ""
            if isinstance(data, dict):
                message = data.get("message") or data.get("error") or ""
            raise ZiinaError(message or f"Ziina {r.status_code}: {data}")
        return data

    def create_payment_intent(self, *, amount_cents: int, currency_code: str, success_url: str, cancel_url: str,
                              description: str, test: bool = True) -> dict:
        if amount_cents < MIN_AMOUNT_CENTS:
            raise ZiinaError(f"Amount too small. Minimum is {MIN_AMOUNT_CENTS} cents")
        payload = {
            "amount": amount_cents,
            "currency_code": currency_code,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "description": description,
            "merchant_name": MERCHANT_NAME,
        }
        # Ziina rejects test=false on some accounts; only send it when true
        if test:
            payload["test"] = True
        data = self.request("POST", "/payment_intent", payload)
        if not data.get("id") or not data.get("redirect_url"):
            logger.error("unexpected Ziina payment_intent response: %s", data)
            raise ZiinaError("Ziina did not return redirect_url or id")
        return data
