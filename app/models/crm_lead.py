from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class CrmLeadStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in-progress"
    CLOSED_WON = "closed-won"
    CLOSED_LOST = "closed-lost"


class CrmLeadNote(BaseModel):
    note: str
    createdAt: str


PACKAGE_ENQUIRY_SOURCE = "package-enquiry"


class CrmLead(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    createdAt: str
    source: str = "contact-form"
    status: CrmLeadStatus = CrmLeadStatus.NEW
    name: str
    email: str
    phone: str = ""
    message: str = ""
    preferredTour: str = ""
    dates: str = ""
    accommodation: str = ""
    # package enquiries only
    packageSlug: Optional[str] = None
    packageTitle: Optional[str] = None
    guests: Optional[str] = None
    followUpDate: Optional[str] = None
    notes: List[CrmLeadNote] = []

    def to_record(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


def normalize_email(email: str | None) -> str:
    """Join key between leads and bookings."""
    return (email or "").strip().lower()
