from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class OfferOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    title: str
    description: Optional[str] = None
    musician_uid: Optional[str] = None
    price: Decimal
