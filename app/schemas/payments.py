from pydantic import BaseModel
from typing import Optional


class MarkPaidRequest(BaseModel):
    # Optional so a missing id is a 400 from the service, not a 422
    bookingId: Optional[str] = None


class MarkPaidOut(BaseModel):
    ok: bool
    message: Optional[str] = None
    alreadyProcessed: Optional[bool] = None


class ReconcileOut(BaseModel):
    processed: int
    restored: int
    linked: int
    pending: int
