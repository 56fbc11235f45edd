"""Calendar events and their attendees."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..schema.enums import CalendarEventPriority, CalendarEventStatus, CalendarEventType
from .base import Base, str_enum, utcnow

__all__ = ["CalendarEvent", "CalendarEventAssignment"]


class CalendarEvent(Base):
    """Meeting, deadline or milestone shown on the shared calendar."""

    __tablename__ = "calendar_events"
    __audited__ = True

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    start_date: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_date: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    type: Mapped[CalendarEventType] = mapped_column(
        str_enum(CalendarEventType), default=CalendarEventType.MEETING, nullable=False
    )
    status: Mapped[CalendarEventStatus] = mapped_column(
        str_enum(CalendarEventStatus), default=CalendarEventStatus.UPCOMING, nullable=False
    )
    priority: Mapped[CalendarEventPriority] = mapped_column(
        str_enum(CalendarEventPriority), default=CalendarEventPriority.MEDIUM, nullable=False
    )
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id", ondelete="SET NULL"), index=True
    )
    requirement_id: Mapped[int | None] = mapped_column(
        ForeignKey("project_requirements.id", ondelete="SET NULL")
    )
    sprint_id: Mapped[int | None] = mapped_column(ForeignKey("sprints.id", ondelete="SET NULL"))
    location: Mapped[str | None] = mapped_column(String(200))
    is_all_day: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_by: Mapped[int | None] = mapped_column(Integer, index=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    assignments: Mapped[list["CalendarEventAssignment"]] = relationship(
        back_populates="event", cascade="all, delete-orphan"
    )

    @property
    def attendee_ids(self) -> list[int]:
        return [assignment.prs_id for assignment in self.assignments]


class CalendarEventAssignment(Base):
    __tablename__ = "calendar_event_assignments"

    id: Mapped[int] = mapped_column(primary_key=True)
    calendar_event_id: Mapped[int] = mapped_column(
        ForeignKey("calendar_events.id", ondelete="CASCADE"), nullable=False
    )
    prs_id: Mapped[int] = mapped_column(Integer, nullable=False)

    event: Mapped[CalendarEvent] = relationship(back_populates="assignments")
