from pydantic import BaseModel, Field


class AddItemIn(BaseModel):
    id: str
    quantity: int = Field(1, gt=0)
