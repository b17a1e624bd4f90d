from pydantic import BaseModel
from typing import Optional


class ContactRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    preferredTour: Optional[str] = None
    dates: Optional[str] = None
    accommodation: Optional[str] = None


class ContactOut(BaseModel):
    success: bool
    duplicate: Optional[bool] = None
    leadId: Optional[str] = None


class PackageEnquiryRequest(BaseModel):
    packageSlug: Optional[str] = None
    packageTitle: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    dates: Optional[str] = None
    guests: Optional[str] = None
    message: Optional[str] = None
