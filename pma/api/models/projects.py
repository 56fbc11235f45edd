"""Project, analyst link and project requirement models."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..schema.enums import (
    Priority,
    ProjectStatus,
    RequirementPriority,
    RequirementStatus,
    RequirementTaskStatus,
    RequirementType,
)
from .base import Base, IntEnumType, str_enum, utcnow

if TYPE_CHECKING:  # pragma: no cover
    from .organization import User

__all__ = [
    "Project",
    "ProjectAnalyst",
    "ProjectRequirement",
    "RequirementAttachment",
    "RequirementTask",
]


class Project(Base):
    """Application project tracked from study through production."""

    __tablename__ = "projects"
    __table_args__ = (Index("ix_projects_status_priority", "status", "priority"),)
    __audited__ = True

    id: Mapped[int] = mapped_column(primary_key=True)
    application_name: Mapped[str] = mapped_column(String(200), nullable=False)
    project_owner: Mapped[str | None] = mapped_column(String(200))
    alternative_owner: Mapped[str | None] = mapped_column(String(200))
    owning_unit: Mapped[str | None] = mapped_column(String(200))
    project_owner_id: Mapped[int | None] = mapped_column(Integer)
    alternative_owner_id: Mapped[int | None] = mapped_column(Integer)
    owning_unit_id: Mapped[int | None] = mapped_column(Integer)
    analysts: Mapped[str | None] = mapped_column(Text)
    start_date: Mapped[dt.datetime | None] = mapped_column(DateTime)
    expected_completion_date: Mapped[dt.datetime | None] = mapped_column(DateTime)
    description: Mapped[str | None] = mapped_column(Text)
    remarks: Mapped[str | None] = mapped_column(Text)
    status: Mapped[ProjectStatus] = mapped_column(
        IntEnumType(ProjectStatus), default=ProjectStatus.NEW, nullable=False
    )
    priority: Mapped[Priority] = mapped_column(
        IntEnumType(Priority), default=Priority.MEDIUM, nullable=False
    )
    budget: Mapped[Decimal | None] = mapped_column(Numeric(18, 2))
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    analyst_links: Mapped[list["ProjectAnalyst"]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )
    requirements: Mapped[list["ProjectRequirement"]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )

    @property
    def analyst_ids(self) -> list[int]:
        return [link.analyst_id for link in self.analyst_links]


class ProjectAnalyst(Base):
    """Many-to-many link between projects and analyst users."""

    __tablename__ = "project_analysts"

    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True
    )
    analyst_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )

    project: Mapped[Project] = relationship(back_populates="analyst_links")
    analyst: Mapped["User"] = relationship()


class ProjectRequirement(Base):
    """Requirement raised against a project and refined by an analyst."""

    __tablename__ = "project_requirements"
    __audited__ = True

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    priority: Mapped[RequirementPriority] = mapped_column(
        str_enum(RequirementPriority), default=RequirementPriority.MEDIUM, nullable=False
    )
    type: Mapped[RequirementType] = mapped_column(
        str_enum(RequirementType), default=RequirementType.NEW, nullable=False
    )
    expected_completion_date: Mapped[dt.datetime | None] = mapped_column(DateTime)
    status: Mapped[RequirementStatus] = mapped_column(
        str_enum(RequirementStatus), default=RequirementStatus.DRAFT, nullable=False
    )
    created_by: Mapped[int | None] = mapped_column(Integer)
    assigned_analyst: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    project: Mapped[Project] = relationship(back_populates="requirements")
    attachments: Mapped[list["RequirementAttachment"]] = relationship(
        back_populates="requirement", cascade="all, delete-orphan"
    )
    task: Mapped[RequirementTask | None] = relationship(
        back_populates="requirement", cascade="all, delete-orphan"
    )


class RequirementAttachment(Base):
    """File uploaded alongside a requirement."""

    __tablename__ = "requirement_attachments"

    id: Mapped[int] = mapped_column(primary_key=True)
    requirement_id: Mapped[int] = mapped_column(
        ForeignKey("project_requirements.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    content_type: Mapped[str | None] = mapped_column(String(100))
    uploaded_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    requirement: Mapped[ProjectRequirement] = relationship(back_populates="attachments")


class RequirementTask(Base):
    """Developer/QC pairing responsible for delivering a requirement."""

    __tablename__ = "requirement_tasks"

    id: Mapped[int] = mapped_column(primary_key=True)
    requirement_id: Mapped[int] = mapped_column(
        ForeignKey("project_requirements.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    developer_id: Mapped[int | None] = mapped_column(Integer)
    qc_id: Mapped[int | None] = mapped_column(Integer)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[RequirementTaskStatus] = mapped_column(
        str_enum(RequirementTaskStatus),
        default=RequirementTaskStatus.NOT_STARTED,
        nullable=False,
    )
    created_by: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    requirement: Mapped[ProjectRequirement] = relationship(back_populates="task")
