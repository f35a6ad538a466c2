from typing import Literal

from pydantic import Field

from storefront.schemas.base import CamelModel, UtcDatetime

Role = Literal["customer", "admin"]


class UserIn(CamelModel):
    username: str = Field(..., min_length=1, max_length=64)
    role: Role = "customer"


class UserOut(CamelModel):
    id: int
    username: str
    role: str
    created_at: UtcDatetime
