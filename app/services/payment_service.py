import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from app.core.config import settings
from app.core.errors import StorageWriteFailure
from app.db.booking_store import BookingStore, RecordStore, utcnow_iso
from app.services.ziina_client import ZiinaClient, ZiinaConfig

logger = logging.getLogger(__name__)

PAYMENT_METHOD = "ziina"
INTENT_CURRENCY = "USD"


@dataclass
class DepositIntent:
    intent_id: str
    redirect_url: str


def _ziina_client() -> ZiinaClient:
    return ZiinaClient(ZiinaConfig(
        api_base=settings.ZIINA_API_BASE,
        api_key=settings.ZIINA_API_KEY,
        timeout=settings.ZIINA_TIMEOUT,
    ))


def _to_cents(amount: float) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def create_deposit_intent(*, amount: float, description: str, success_path: str, cancel_path: str,
                          test_mode: bool | None = None) -> DepositIntent:
    """Open a hosted Ziina payment page for `amount` USD. Raises ZiinaError; no retries."""
    if test_mode is None:
        test_mode = not settings.is_production
    base_url = settings.APP_PUBLIC_URL.rstrip("/")
    data = _ziina_client().create_payment_intent(
        amount_cents=_to_cents(amount),
        currency_code=INTENT_CURRENCY,
        success_url=f"{base_url}{success_path}",
        cancel_url=f"{base_url}{cancel_path}",
        description=description,
        test=test_mode,
    )
    return DepositIntent(intent_id=str(data["id"]), redirect_url=str(data["redirect_url"]))


# -------------------------
# Intent ledger: lets a periodic job repair bookings whose link (or whole record) failed to persist
# -------------------------
def get_intent_ledger() -> RecordStore:
    return RecordStore("payment-intents")


def record_intent(booking: dict, intent: DepositIntent, ledger: RecordStore | None = None) -> bool:
    ledger = ledger or get_intent_ledger()
    entry = {
        "id": intent.intent_id,
        "bookingId": booking.get("id"),
        "redirectUrl": intent.redirect_url,
        "createdAt": utcnow_iso(),
        "booking": booking,
    }
    result = ledger.append_one(entry)
    if not result.ok:
        logger.error("payment intent %s for booking %s not recorded in ledger: %s",
                     intent.intent_id, booking.get("id"), result.errors)
    return result.ok


def reconcile_payment_intents(store: BookingStore | None = None, ledger: RecordStore | None = None) -> dict:
    """Re-associate ledgered intents with their bookings, then drop the entries that are settled."""
    store = store or BookingStore()
    ledger = ledger or get_intent_ledger()
    entries = ledger.read_all()
    if not entries:
        return {"processed": 0, "restored": 0, "linked": 0, "pending": 0}

    remaining: list[dict] = []
    restored = linked = 0
    for entry in entries:
        booking_id = entry.get("bookingId")
        link = {"ziinaPaymentIntentId": entry.get("id"), "paymentLinkUrl": entry.get("redirectUrl")}
        try:
            booking = store.find_by_id(booking_id)
            if booking is None:
                snapshot = entry.get("booking")
                if not snapshot:
                    logger.warning("intent %s has no booking snapshot; booking %s needs manual follow-up",
                                   entry.get("id"), booking_id)
                    remaining.append(entry)
                    continue
                store.append_one({**snapshot, **link}).raise_for_failure(f"restore booking {booking_id}")
                restored += 1
                logger.info("restored booking %s from payment intent %s", booking_id, entry.get("id"))
            elif not booking.get("ziinaPaymentIntentId"):
                store.update_by_id(booking_id, link)
                linked += 1
                logger.info("linked payment intent %s to booking %s", entry.get("id"), booking_id)
        except StorageWriteFailure as e:
            logger.error("reconcile of booking %s failed: %s", booking_id, e)
            remaining.append(entry)

    # re-read so intents ledgered while this ran are kept
    settled = {e.get("id") for e in entries} - {e.get("id") for e in remaining}
    if settled:
        ledger.write_all([e for e in ledger.read_all() if e.get("id") not in settled])
    return {"processed": len(entries), "restored": restored, "linked": linked, "pending": len(remaining)}
