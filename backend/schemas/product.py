# backend/schemas/product.py
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from schemas.common import ORMBase, encode_image


# Full product representation, including category name and current stock
class ProductOut(ORMBase):
    id: int
    name: str
    category_id: Optional[int] = None
    category: Optional[str] = None
    sku: str
    brand: Optional[str] = None
    price: Decimal
    quantity: int = 0
    image: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("image", mode="before")
    @classmethod
    def encode_image_bytes(cls, value):
        return encode_image(value)


# Schema for partial product updates - all fields optional
class ProductPatch(BaseModel):
    name: Optional[str] = None
    category_id: Optional[int] = None
    brand: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    image: Optional[bytes] = None
