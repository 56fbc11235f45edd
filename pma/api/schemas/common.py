"""Response envelopes and the camelCase base model shared by every schema."""

from __future__ import annotations

import math
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

__all__ = [
    "ApiModel",
    "ApiResponse",
    "PaginationInfo",
    "MessageResponse",
    "total_pages",
]

T = TypeVar("T")


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python; accepts either on input."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


def total_pages(total: int, size: int) -> int:
    if size <= 0:
        return 0
    return math.ceil(total / size)


class PaginationInfo(ApiModel):
    page: int
    limit: int
    total_count: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> "PaginationInfo":
        return cls(
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=total_pages(total_count, limit),
        )


class ApiResponse(ApiModel, Generic[T]):
    """Standard ``{success, data, message, error, pagination}`` envelope."""

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    error: Optional[str] = None
    pagination: Optional[PaginationInfo] = None


class MessageResponse(ApiModel):
    success: bool = True
    message: str
