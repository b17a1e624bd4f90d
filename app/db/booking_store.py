from datetime import datetime, timezone

from app.db.store import DualStore, StoreResult

# Historical records were keyed by these fields before `id` was standard.
BOOKING_ID_ALIASES = ("id", "bookingId", "stripeSessionId")


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecordStore:
    """Keyed access to one dual-backed collection of JSON records."""

    def __init__(self, collection: str, store: DualStore | None = None):
        self.store = store or DualStore(collection)

    def read_all(self) -> list[dict]:
        return self.store.read_all()

    def write_all(self, records: list[dict]) -> StoreResult:
        return self.store.write_all(records)

    def append_one(self, record: dict) -> StoreResult:
        """Append unless a record with the same id is already stored."""
        records = self.read_all()
        rid = record.get("id")
        if rid and any(r.get("id") == rid for r in records):
            return StoreResult(ok=True, skipped=True)
        records.append(record)
        return self.write_all(records)

    def find_by_id(self, record_id: str) -> dict | None:
        if not record_id:
            return None
        return next((r for r in self.read_all() if r.get("id") == record_id), None)

    def update_by_id(self, record_id: str, patch: dict, stamp: bool = True) -> dict | None:
        """Shallow-merge `patch` into the record. Raises StorageWriteFailure if nothing persisted."""
        return self._update(lambda r: r.get("id") == record_id, record_id, patch, stamp)

    def _update(self, match, label: str, patch: dict, stamp: bool) -> dict | None:
        records = self.read_all()
        updated = None
        for i, r in enumerate(records):
            if match(r):
                updated = {**r, **patch}
                if stamp:
                    updated["updatedAt"] = utcnow_iso()
                records[i] = updated
                break
        if updated is None:
            return None
        self.write_all(records).raise_for_failure(f"update {self.store.collection}/{label}")
        return updated


class BookingStore(RecordStore):
    def __init__(self, store: DualStore | None = None):
        super().__init__("bookings", store)

    def find_by_any_id(self, booking_id: str) -> dict | None:
        """Like find_by_id, but also matches the legacy `bookingId` / `stripeSessionId` keys."""
        if not booking_id:
            return None
        for b in self.read_all():
            if any(b.get(k) == booking_id for k in BOOKING_ID_ALIASES):
                return b
        return None

    def update_by_any_id(self, booking_id: str, patch: dict, stamp: bool = True) -> dict | None:
        return self._update(
            lambda b: any(b.get(k) == booking_id for k in BOOKING_ID_ALIASES), booking_id, patch, stamp
        )


def get_booking_store() -> BookingStore:
    return BookingStore()
