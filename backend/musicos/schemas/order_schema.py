from typing import List, Optional

from pydantic import BaseModel, Field


class OrderItemIn(BaseModel):
    id: str
    quantity: int = Field(1, gt=0)


class CheckoutIn(BaseModel):
    # customer fields keep the Portuguese names used by the web forms
    email: Optional[str] = None
    nome: Optional[str] = None
    telefone: Optional[str] = None
    notas: Optional[str] = None
    payment_method: str = "bank_transfer"
    # without items the session cart (cart_uuid cookie) is checked out
    items: Optional[List[OrderItemIn]] = None

    def customer_data(self) -> dict:
        return self.model_dump(include={"email", "nome", "telefone", "notas"}, exclude_none=True)
