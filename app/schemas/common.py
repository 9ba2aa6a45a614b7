# app/schemas/common.py
import math
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=max(1, math.ceil(total / limit)))


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T
    pagination: Optional[Pagination] = None


class Message(BaseModel):
    message: str


class ErrorEnvelope(BaseModel):
    success: bool = False
    error: str
