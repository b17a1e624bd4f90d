from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Tour(BaseModel):
    model_config = ConfigDict(extra="allow")

    slug: str
    title: str
    shortDescription: str = ""
    location: str = ""
    durationHours: float = 0
    basePrice: float
    pickupTime: str = ""
    category: str = ""
    privateOptionAvailable: bool = False


class PackageDay(BaseModel):
    title: str
    description: str = ""
    overnight: Optional[str] = None


class Package(BaseModel):
    model_config = ConfigDict(extra="allow")

    slug: str
    title: str
    shortDescription: str = ""
    priceFrom: float
    days: List[PackageDay] = []
    includes: List[str] = []
    excludes: List[str] = []
