"""Calendar events and dashboard statistics."""

from __future__ import annotations

import datetime as dt
from typing import Iterable, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from ..models import CalendarEvent, CalendarEventAssignment, as_utc_naive, utcnow
from ..schema.enums import (
    CalendarEventPriority,
    CalendarEventStatus,
    CalendarEventType,
)
from ..schemas import activity as schemas
from .base import CrudService, Page, ensure_date_range

__all__ = ["CalendarService"]


class CalendarService(CrudService[CalendarEvent]):
    model = CalendarEvent
    entity_name = "Calendar event"
    relation_fields = frozenset({"attendee_ids"})

    def _base_query(self):
        return select(CalendarEvent).options(selectinload(CalendarEvent.assignments))

    def _validate(self, instance: CalendarEvent) -> None:
        ensure_date_range(instance.start_date, instance.end_date)

    def _replace_attendees(self, event: CalendarEvent, prs_ids: Iterable[int]) -> None:
        event.assignments.clear()
        self.session.flush()
        for prs_id in self._dedupe(prs_ids):
            event.assignments.append(CalendarEventAssignment(prs_id=prs_id))

    def list_events(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        start_date: Optional[dt.datetime] = None,
        end_date: Optional[dt.datetime] = None,
        event_type: Optional[CalendarEventType] = None,
        status: Optional[CalendarEventStatus] = None,
    ) -> Page[CalendarEvent]:
        ensure_date_range(start_date, end_date)
        stmt = self._base_query()
        # Events overlapping the requested window.
        if start_date is not None:
            stmt = stmt.where(CalendarEvent.end_date >= as_utc_naive(start_date))
        if end_date is not None:
            stmt = stmt.where(CalendarEvent.start_date <= as_utc_naive(end_date))
        if event_type is not None:
            stmt = stmt.where(CalendarEvent.type == event_type)
        if status is not None:
            stmt = stmt.where(CalendarEvent.status == status)
        return self._paginate(stmt.order_by(CalendarEvent.start_date, CalendarEvent.id), page, limit)

    def by_project(self, project_id: int) -> Sequence[CalendarEvent]:
        stmt = self._base_query().where(CalendarEvent.project_id == project_id)
        return self.session.scalars(stmt.order_by(CalendarEvent.start_date)).all()

    def by_creator(self, creator_id: int) -> Sequence[CalendarEvent]:
        stmt = self._base_query().where(CalendarEvent.created_by == creator_id)
        return self.session.scalars(stmt.order_by(CalendarEvent.start_date)).all()

    def create(self, payload: schemas.CalendarEventCreateRequest) -> CalendarEvent:
        event = CalendarEvent()
        self._assign(event, self._payload_values(payload, partial=False))
        self._validate(event)
        self.session.add(event)
        self._replace_attendees(event, payload.attendee_ids)
        self.session.commit()
        return event

    def update(self, event_id: int, payload: schemas.CalendarEventUpdateRequest) -> CalendarEvent:
        event = self._get_or_raise(event_id)
        self._assign(event, self._payload_values(payload, partial=True))
        self._validate(event)
        if payload.attendee_ids is not None:
            self._replace_attendees(event, payload.attendee_ids)
        self.session.commit()
        return event

    def stats(self, now: Optional[dt.datetime] = None) -> schemas.CalendarStatsResponse:
        now = as_utc_naive(now) if now is not None else utcnow()
        week_ago = now - dt.timedelta(days=7)

        def count(*criteria) -> int:
            stmt = select(func.count(CalendarEvent.id)).where(*criteria)
            return self.session.scalar(stmt) or 0

        by_type = dict(
            self.session.execute(
                select(CalendarEvent.type, func.count(CalendarEvent.id)).group_by(CalendarEvent.type)
            ).all()
        )
        by_status = dict(
            self.session.execute(
                select(CalendarEvent.status, func.count(CalendarEvent.id)).group_by(
                    CalendarEvent.status
                )
            ).all()
        )
        return schemas.CalendarStatsResponse(
            total_events=count(),
            upcoming_events=count(
                CalendarEvent.start_date > now,
                CalendarEvent.status == CalendarEventStatus.UPCOMING,
            ),
            overdue_events=count(
                CalendarEvent.end_date < now,
                CalendarEvent.status != CalendarEventStatus.COMPLETED,
            ),
            completed_this_week=count(
                CalendarEvent.status == CalendarEventStatus.COMPLETED,
                CalendarEvent.updated_at >= week_ago,
            ),
            critical_deadlines=count(
                CalendarEvent.priority == CalendarEventPriority.CRITICAL,
                CalendarEvent.type == CalendarEventType.DEADLINE,
                CalendarEvent.start_date > now,
            ),
            events_by_type={CalendarEventType(key).value: value for key, value in by_type.items()},
            events_by_status={
                CalendarEventStatus(key).value: value for key, value in by_status.items()
            },
        )
