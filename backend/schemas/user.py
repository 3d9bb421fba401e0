from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Literal, Optional

from schemas.common import ORMBase, encode_image

Role = Literal["admin", "staff"]

# Schema for user authentication credentials (matched exactly, no normalization)
class UserLogin(BaseModel):
    email: str
    password: str

# Schema for creating a user account
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    role: Role = "staff"

# Output schema for user profile details
class UserResponse(ORMBase):
    id: int
    email: str
    name: str
    phone: Optional[str] = None
    role: str
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("avatar", mode="before")
    @classmethod
    def encode_avatar(cls, value):
        return encode_image(value)

# Fields a profile update may change; unset fields are left alone
class UserPatch(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[bytes] = None

# Login response payload
class Token(BaseModel):
    token: str
    token_type: str = "bearer"
