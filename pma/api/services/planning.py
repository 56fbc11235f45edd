"""Timeline, sprint and timeline requirement services."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import selectinload

from ..models import (
    Project,
    Sprint,
    Timeline,
    TimelineRequirement,
    TimelineRequirementAssignment,
)
from ..schemas import planning as schemas
from .base import CrudService, Page, ensure_date_range

__all__ = ["TimelineService", "SprintService", "TimelineRequirementService"]


class TimelineService(CrudService[Timeline]):
    model = Timeline
    entity_name = "Timeline"

    def _validate(self, instance: Timeline) -> None:
        ensure_date_range(instance.start_date, instance.end_date)

    def list_timelines(self, *, page: int = 1, limit: int = 20) -> Page[Timeline]:
        stmt = select(Timeline).order_by(Timeline.start_date, Timeline.id)
        return self._paginate(stmt, page, limit)

    def by_project(self, project_id: int) -> Sequence[Timeline]:
        return self.list_all(Timeline.project_id == project_id)

    def create(self, payload: schemas.TimelineCreateRequest) -> Timeline:
        if self.session.get(Project, payload.project_id) is None:
            raise NoResultFound("Project not found")
        return super().create(payload)


class SprintService(CrudService[Sprint]):
    model = Sprint
    entity_name = "Sprint"

    def _validate(self, instance: Sprint) -> None:
        ensure_date_range(instance.start_date, instance.end_date)

    def list_sprints(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        timeline_id: Optional[int] = None,
    ) -> Page[Sprint]:
        stmt = select(Sprint)
        if timeline_id is not None:
            stmt = stmt.where(Sprint.timeline_id == timeline_id)
        return self._paginate(stmt.order_by(Sprint.start_date, Sprint.id), page, limit)

    def by_project(self, project_id: int) -> Sequence[Sprint]:
        return self.list_all(Sprint.project_id == project_id)


class TimelineRequirementService(CrudService[TimelineRequirement]):
    """Requirement blocks on a timeline with their assignees."""

    model = TimelineRequirement
    entity_name = "Timeline requirement"
    relation_fields = frozenset({"assignee_ids"})

    def _base_query(self):
        return select(TimelineRequirement).options(selectinload(TimelineRequirement.assignments))

    def _validate(self, instance: TimelineRequirement) -> None:
        ensure_date_range(instance.start_date, instance.end_date)

    @staticmethod
    def _fill_duration(instance: TimelineRequirement, explicit: Optional[int]) -> None:
        if explicit is None:
            instance.duration = max((instance.end_date - instance.start_date).days, 0)

    def _replace_assignees(self, instance: TimelineRequirement, prs_ids: Iterable[int]) -> None:
        instance.assignments.clear()
        self.session.flush()
        for prs_id in self._dedupe(prs_ids):
            instance.assignments.append(TimelineRequirementAssignment(prs_id=prs_id))

    def by_timeline(self, timeline_id: int) -> Sequence[TimelineRequirement]:
        stmt = (
            self._base_query()
            .where(TimelineRequirement.timeline_id == timeline_id)
            .order_by(TimelineRequirement.start_date, TimelineRequirement.id)
        )
        return self.session.scalars(stmt).all()

    def create(self, payload: schemas.TimelineRequirementCreateRequest) -> TimelineRequirement:
        if self.session.get(Timeline, payload.timeline_id) is None:
            raise NoResultFound("Timeline not found")
        instance = TimelineRequirement()
        self._assign(instance, self._payload_values(payload, partial=False))
        self._validate(instance)
        self._fill_duration(instance, payload.duration)
        self.session.add(instance)
        self._replace_assignees(instance, payload.assignee_ids)
        self.session.commit()
        return instance

    def update(
        self, entity_id: int, payload: schemas.TimelineRequirementUpdateRequest
    ) -> TimelineRequirement:
        instance = self._get_or_raise(entity_id)
        self._assign(instance, self._payload_values(payload, partial=True))
        self._validate(instance)
        dates_changed = {"start_date", "end_date"} & payload.model_fields_set
        if dates_changed:
            self._fill_duration(instance, payload.duration)
        if payload.assignee_ids is not None:
            self._replace_assignees(instance, payload.assignee_ids)
        self.session.commit()
        return instance
