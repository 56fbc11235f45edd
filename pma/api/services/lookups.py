"""Lookup (coded dropdown value) service."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import select

from ..models import Lookup
from .base import CrudService

__all__ = ["LookupService"]


class LookupService(CrudService[Lookup]):
    model = Lookup
    entity_name = "Lookup"

    def list_lookups(self, code: Optional[str] = None) -> Sequence[Lookup]:
        stmt = select(Lookup)
        if code:
            stmt = stmt.where(Lookup.code == code)
        return self.session.scalars(stmt.order_by(Lookup.code, Lookup.value, Lookup.id)).all()

    def by_code(self, code: str) -> Sequence[Lookup]:
        stmt = (
            select(Lookup)
            .where(Lookup.code == code, Lookup.is_active.is_(True))
            .order_by(Lookup.value, Lookup.id)
        )
        return self.session.scalars(stmt).all()
