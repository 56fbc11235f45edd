"""Envelope helpers shared by the resource routers."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Optional, Type, TypeVar

from pydantic import BaseModel

from ..schemas.common import ApiResponse, MessageResponse, PaginationInfo
from ..services.base import Page

__all__ = ["ok", "ok_list", "ok_page", "deleted", "coerce_enum"]

SchemaT = TypeVar("SchemaT", bound=BaseModel)
EnumT = TypeVar("EnumT", bound=Enum)


def ok(schema: Type[SchemaT], obj: Any, message: Optional[str] = None) -> ApiResponse:
    return ApiResponse(data=schema.model_validate(obj), message=message)


def ok_list(schema: Type[SchemaT], objs: Iterable[Any]) -> ApiResponse:
    return ApiResponse(data=[schema.model_validate(obj) for obj in objs])


def ok_page(schema: Type[SchemaT], page: Page) -> ApiResponse:
    return ApiResponse(
        data=[schema.model_validate(obj) for obj in page.items],
        pagination=PaginationInfo.build(page.page, page.limit, page.total),
    )


def deleted(entity_name: str) -> MessageResponse:
    return MessageResponse(message=f"{entity_name} deleted successfully")


def coerce_enum(enum_cls: Type[EnumT], raw: Any) -> Optional[EnumT]:
    """Turn a query value into *enum_cls*; unknown values raise ``ValueError``."""

    if raw is None or raw == "":
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        raise ValueError(f"Invalid {enum_cls.__name__} value: {raw}") from None
