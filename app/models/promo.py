from typing import Literal

from pydantic import BaseModel


class Promo(BaseModel):
    code: str
    type: Literal["percent", "fixed"]
    value: float
    active: bool = True
