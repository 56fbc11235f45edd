"""Timelines, sprints and timeline requirements."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..schema.enums import Priority, SprintStatus, TaskStatus
from .base import Base, IntEnumType, utcnow

__all__ = ["Timeline", "Sprint", "TimelineRequirement", "TimelineRequirementAssignment"]


class Timeline(Base):
    """Delivery timeline of a project (optionally scoped to one requirement)."""

    __tablename__ = "timelines"
    __audited__ = True

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    project_requirement_id: Mapped[int | None] = mapped_column(
        ForeignKey("project_requirements.id", ondelete="SET NULL")
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    start_date: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    sprints: Mapped[list["Sprint"]] = relationship(back_populates="timeline")
    requirements: Mapped[list["TimelineRequirement"]] = relationship(
        back_populates="timeline", cascade="all, delete-orphan"
    )


class Sprint(Base):
    """Time-boxed iteration grouping tasks."""

    __tablename__ = "sprints"
    __audited__ = True

    id: Mapped[int] = mapped_column(primary_key=True)
    timeline_id: Mapped[int | None] = mapped_column(
        ForeignKey("timelines.id", ondelete="SET NULL"), index=True
    )
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    start_date: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[SprintStatus] = mapped_column(
        IntEnumType(SprintStatus), default=SprintStatus.PLANNING, nullable=False
    )
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    timeline: Mapped[Timeline | None] = relationship(back_populates="sprints")


class TimelineRequirement(Base):
    """Requirement work item placed on a timeline."""

    __tablename__ = "timeline_requirements"

    id: Mapped[int] = mapped_column(primary_key=True)
    timeline_id: Mapped[int] = mapped_column(
        ForeignKey("timelines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    department_id: Mapped[int | None] = mapped_column(Integer)
    status_id: Mapped[TaskStatus] = mapped_column(
        IntEnumType(TaskStatus), default=TaskStatus.TODO, nullable=False
    )
    priority_id: Mapped[Priority] = mapped_column(
        IntEnumType(Priority), default=Priority.MEDIUM, nullable=False
    )
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    timeline: Mapped[Timeline] = relationship(back_populates="requirements")
    assignments: Mapped[list["TimelineRequirementAssignment"]] = relationship(
        back_populates="requirement", cascade="all, delete-orphan"
    )

    @property
    def assignee_ids(self) -> list[int]:
        return [assignment.prs_id for assignment in self.assignments]


class TimelineRequirementAssignment(Base):
    __tablename__ = "timeline_requirement_assignments"

    id: Mapped[int] = mapped_column(primary_key=True)
    timeline_requirement_id: Mapped[int] = mapped_column(
        ForeignKey("timeline_requirements.id", ondelete="CASCADE"), nullable=False
    )
    prs_id: Mapped[int] = mapped_column(Integer, nullable=False)

    requirement: Mapped[TimelineRequirement] = relationship(back_populates="assignments")
