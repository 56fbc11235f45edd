"""Shared SQLAlchemy base, column types and time helpers for PMA models."""

from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from ..schema.enums import PmaEnum, PmaIntEnum

__all__ = ["Base", "IntEnumType", "str_enum", "utcnow", "as_utc_naive"]


class Base(DeclarativeBase):
    """Declarative base class shared by all PMA models."""

    # Entities flagged with ``__audited__ = True`` get ChangeGroup rows on flush.
    __audited__ = False


def utcnow() -> dt.datetime:
    """Current UTC time as a naive datetime, the storage convention for all columns."""

    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


def as_utc_naive(value: Any) -> Any:
    """Convert aware datetimes to naive UTC; leave everything else untouched."""

    if isinstance(value, dt.datetime) and value.tzinfo is not None:
        return value.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return value


# Enum column helpers ---------------------------------------------------------

class IntEnumType(TypeDecorator):
    """Store a :class:`PmaIntEnum` as its integer code."""

    impl = Integer
    cache_ok = True

    def __init__(self, enum_cls: type[PmaIntEnum]):
        super().__init__()
        self.enum_cls = enum_cls

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int(self.enum_cls(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.enum_cls(value)


def str_enum(enum_cls: type[PmaEnum], length: int = 32) -> SAEnum:
    """Return a portable ``VARCHAR`` backed enum persisting member values."""

    return SAEnum(
        enum_cls,
        native_enum=False,
        create_constraint=False,
        length=length,
        values_callable=lambda cls: [member.value for member in cls],
        validate_strings=True,
    )
