"""Read and retention operations over the captured change history."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from ..models import ChangeGroup, ChangeItem, as_utc_naive, utcnow
from .base import CrudService

__all__ = ["AuditLogService", "DEFAULT_RECENT_LIMIT", "DEFAULT_RETENTION_DAYS"]

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 100
MAX_RECENT_LIMIT = 1000
DEFAULT_RETENTION_DAYS = 90
MAX_RETENTION_DAYS = 3650


class AuditLogService(CrudService[ChangeGroup]):
    model = ChangeGroup
    entity_name = "Change group"

    def _base_query(self):
        return (
            select(ChangeGroup)
            .options(selectinload(ChangeGroup.items))
            .order_by(ChangeGroup.changed_at.desc(), ChangeGroup.id.desc())
        )

    def for_entity(self, entity_type: str, entity_id: int) -> Sequence[ChangeGroup]:
        stmt = self._base_query().where(
            ChangeGroup.entity_type == entity_type, ChangeGroup.entity_id == entity_id
        )
        return self.session.scalars(stmt).all()

    def for_entity_in_range(
        self,
        entity_type: str,
        entity_id: int,
        start: dt.datetime,
        end: dt.datetime,
    ) -> Sequence[ChangeGroup]:
        if as_utc_naive(start) > as_utc_naive(end):
            raise ValueError("startDate must be on or before endDate")
        stmt = self._base_query().where(
            ChangeGroup.entity_type == entity_type,
            ChangeGroup.entity_id == entity_id,
            ChangeGroup.changed_at >= as_utc_naive(start),
            ChangeGroup.changed_at <= as_utc_naive(end),
        )
        return self.session.scalars(stmt).all()

    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> Sequence[ChangeGroup]:
        if limit < 1 or limit > MAX_RECENT_LIMIT:
            limit = DEFAULT_RECENT_LIMIT
        return self.session.scalars(self._base_query().limit(limit)).all()

    def by_user(self, username: str) -> Sequence[ChangeGroup]:
        stmt = self._base_query().where(ChangeGroup.changed_by == username)
        return self.session.scalars(stmt).all()

    @staticmethod
    def retention_days(older_than_days: int) -> int:
        if older_than_days < 1 or older_than_days > MAX_RETENTION_DAYS:
            return DEFAULT_RETENTION_DAYS
        return older_than_days

    def cleanup(self, older_than_days: int = DEFAULT_RETENTION_DAYS) -> int:
        """Delete change groups older than the retention window; returns the count."""

        older_than_days = self.retention_days(older_than_days)
        cutoff = utcnow() - dt.timedelta(days=older_than_days)
        stale = select(ChangeGroup.id).where(ChangeGroup.changed_at < cutoff)
        self.session.execute(
            delete(ChangeItem).where(ChangeItem.change_group_id.in_(stale)),
            execution_options={"synchronize_session": False},
        )
        result = self.session.execute(
            delete(ChangeGroup).where(ChangeGroup.changed_at < cutoff),
            execution_options={"synchronize_session": False},
        )
        self.session.commit()
        deleted = result.rowcount or 0
        logger.info("Removed %d change group(s) older than %d days", deleted, older_than_days)
        return deleted
