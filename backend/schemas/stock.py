# backend/schemas/stock.py
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Literal, Optional

MoveTypeName = Literal["IN", "OUT"]


# Result of a committed stock movement
class TransactionCreated(BaseModel):
    id: int
    product_id: int
    user_id: int
    quantity: int
    move_type: MoveTypeName
    stock_quantity: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Ledger row joined with product and user details
class TransactionOut(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    sku: Optional[str] = None
    user_id: int
    user_name: Optional[str] = None
    quantity: int
    move_type: MoveTypeName
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
