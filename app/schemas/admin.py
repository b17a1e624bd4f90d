from pydantic import BaseModel
from typing import Dict, List, Literal, Optional


class AdminLoginRequest(BaseModel):
    passcode: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class BookingPatch(BaseModel):
    action: Optional[Literal["cancel", "reverse-payment"]] = None
    reason: Optional[str] = None
    amount: Optional[float] = None
    internalNotes: Optional[str] = None


class LeadPatch(BaseModel):
    status: Optional[str] = None
    followUpDate: Optional[str] = None
    newNote: Optional[str] = None


class AvailabilityIn(BaseModel):
    globalBlocked: List[str] = []
    tours: Dict[str, List[str]] = {}
