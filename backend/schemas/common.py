# backend/schemas/common.py
import base64
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Envelope shared by every endpoint
class ApiResponse(BaseModel, Generic[T]):
    status: str = "success"
    message: str
    data: Optional[T] = None


# Binary image columns are exposed as base64 text
def encode_image(value):
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return value
