from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, StrictInt


class OrderLineIn(BaseModel):
    book_id: str
    # strict: "3", true and 2.0 are not quantities; the range is checked by
    # the validator so that it answers with InvalidInput
    quantity: StrictInt


class CreateTransactionRequest(BaseModel):
    items: List[OrderLineIn]


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    book_id: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    created_at: datetime
    total_quantity: int
    total_price: Decimal
    items: List[OrderItemOut]
