"""Shared plumbing for the PMA service layer."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, Mapping, Sequence, TypeVar

from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session

from ..database import PmaSettings
from ..models import Base, as_utc_naive

__all__ = ["Page", "CrudService", "ensure_date_range", "validate_paging"]

ModelT = TypeVar("ModelT", bound=Base)
ItemT = TypeVar("ItemT")

MAX_PAGE_SIZE = 100


@dataclass(slots=True)
class Page(Generic[ItemT]):
    """One page of results plus the unpaged total."""

    items: Sequence[ItemT]
    total: int
    page: int
    limit: int
    extra: dict[str, Any] = field(default_factory=dict)


def validate_paging(page: int, limit: int) -> None:
    if page < 1:
        raise ValueError("page must be greater than or equal to 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")


def ensure_date_range(start: dt.datetime | None, end: dt.datetime | None) -> None:
    if start is not None and end is not None and as_utc_naive(end) < as_utc_naive(start):
        raise ValueError("End date must be on or after start date")


class CrudService(Generic[ModelT]):
    """Generic get/list/create/update/delete over one mapped entity.

    Subclasses set :attr:`model` and :attr:`entity_name` and override the hooks
    they need. Relationship fields present on payloads are listed in
    :attr:`relation_fields` so they are not copied onto the row.
    """

    model: type[ModelT]
    entity_name: str = "Entity"
    relation_fields: frozenset[str] = frozenset()

    def __init__(self, session: Session, settings: PmaSettings):
        self.session = session
        self.settings = settings

    # ---------------------------- helpers -----------------------------
    def _get_or_raise(self, entity_id: int) -> ModelT:
        instance = self.session.get(self.model, entity_id)
        if instance is None:
            raise NoResultFound(f"{self.entity_name} not found")
        return instance

    def _paginate(self, stmt: Select, page: int, limit: int) -> Page[ModelT]:
        validate_paging(page, limit)
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = self.session.scalar(count_stmt) or 0
        items = self.session.scalars(stmt.offset((page - 1) * limit).limit(limit)).all()
        return Page(items=items, total=total, page=page, limit=limit)

    @staticmethod
    def _assign(instance: Any, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            setattr(instance, key, as_utc_naive(value))

    def _payload_values(self, payload: BaseModel, *, partial: bool) -> dict[str, Any]:
        # Creates skip nulls so column defaults apply; updates only touch sent fields.
        values = payload.model_dump(
            exclude_unset=partial,
            exclude_none=not partial,
            exclude=set(self.relation_fields),
        )
        columns = self.model.__table__.c
        return {
            key: value
            for key, value in values.items()
            if value is not None or key not in columns or columns[key].nullable
        }

    def _validate(self, instance: ModelT) -> None:
        """Hook for cross-field checks before a flush."""

    # ---------------------------- CRUD -----------------------------
    def get(self, entity_id: int) -> ModelT:
        return self._get_or_raise(entity_id)

    def list_all(self, *criteria: Any) -> Sequence[ModelT]:
        stmt = select(self.model).where(*criteria).order_by(self.model.id)
        return self.session.scalars(stmt).all()

    def create(self, payload: BaseModel) -> ModelT:
        instance = self.model()
        self._assign(instance, self._payload_values(payload, partial=False))
        self._validate(instance)
        self.session.add(instance)
        self.session.commit()
        return instance

    def update(self, entity_id: int, payload: BaseModel) -> ModelT:
        instance = self._get_or_raise(entity_id)
        self._assign(instance, self._payload_values(payload, partial=True))
        self._validate(instance)
        self.session.commit()
        return instance

    def delete(self, entity_id: int) -> None:
        instance = self._get_or_raise(entity_id)
        self.session.delete(instance)
        self.session.commit()

    @staticmethod
    def _dedupe(values: Iterable[int] | None) -> list[int]:
        seen: dict[int, None] = {}
        for value in values or ():
            seen.setdefault(value, None)
        return list(seen)
