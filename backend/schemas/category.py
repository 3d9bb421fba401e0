from pydantic import BaseModel
from typing import Optional

from schemas.common import ORMBase


class CategoryOut(ORMBase):
    id: int
    name: str


# Partial update; only `name` can change
class CategoryPatch(BaseModel):
    name: Optional[str] = None
