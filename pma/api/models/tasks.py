"""Task, assignment, dependency, status history and subtask models."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..schema.enums import Priority, TaskRoleType, TaskStatus
from .base import Base, IntEnumType, str_enum, utcnow
from .planning import Sprint

__all__ = ["Task", "TaskAssignment", "TaskDependency", "TaskStatusHistory", "SubTask"]


class Task(Base):
    """Unit of work scheduled inside a sprint (or ad hoc when sprint_id is null)."""

    __tablename__ = "tasks"
    __audited__ = True

    id: Mapped[int] = mapped_column(primary_key=True)
    sprint_id: Mapped[int | None] = mapped_column(
        ForeignKey("sprints.id", ondelete="SET NULL"), index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    start_date: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    status_id: Mapped[TaskStatus] = mapped_column(
        IntEnumType(TaskStatus), default=TaskStatus.TODO, nullable=False, index=True
    )
    priority_id: Mapped[Priority] = mapped_column(
        IntEnumType(Priority), default=Priority.MEDIUM, nullable=False
    )
    department_id: Mapped[int | None] = mapped_column(Integer)
    estimated_hours: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    actual_hours: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    timeline_id: Mapped[int | None] = mapped_column(
        ForeignKey("timelines.id", ondelete="SET NULL")
    )
    project_requirement_id: Mapped[int | None] = mapped_column(
        ForeignKey("project_requirements.id", ondelete="SET NULL"), index=True
    )
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    role_type: Mapped[TaskRoleType | None] = mapped_column(str_enum(TaskRoleType))
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    sprint: Mapped[Sprint | None] = relationship()
    assignments: Mapped[list["TaskAssignment"]] = relationship(
        back_populates="task", cascade="all, delete-orphan"
    )
    dependencies: Mapped[list["TaskDependency"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        foreign_keys="TaskDependency.task_id",
    )
    subtasks: Mapped[list["SubTask"]] = relationship(
        back_populates="task", cascade="all, delete-orphan"
    )
    history: Mapped[list["TaskStatusHistory"]] = relationship(
        back_populates="task", cascade="all, delete-orphan"
    )

    @property
    def assignee_ids(self) -> list[int]:
        return [assignment.prs_id for assignment in self.assignments]

    @property
    def dependency_ids(self) -> list[int]:
        return [dependency.depends_on_task_id for dependency in self.dependencies]


class TaskAssignment(Base):
    """Assignment of a person (by prs id) to a task."""

    __tablename__ = "task_assignments"
    __table_args__ = (UniqueConstraint("task_id", "prs_id", name="uq_task_assignment"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    task_id: Mapped[int] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    prs_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    assigned_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    task: Mapped[Task] = relationship(back_populates="assignments")


class TaskDependency(Base):
    """``task_id`` cannot finish before ``depends_on_task_id``."""

    __tablename__ = "task_dependencies"

    task_id: Mapped[int] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True
    )
    depends_on_task_id: Mapped[int] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True
    )

    # Reverse lookups (dependents of a task) go through explicit queries.
    task: Mapped[Task] = relationship(back_populates="dependencies", foreign_keys=[task_id])


class TaskStatusHistory(Base):
    __tablename__ = "task_status_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    task_id: Mapped[int] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    old_status: Mapped[TaskStatus] = mapped_column(IntEnumType(TaskStatus), nullable=False)
    new_status: Mapped[TaskStatus] = mapped_column(IntEnumType(TaskStatus), nullable=False)
    changed_by_prs_id: Mapped[int | None] = mapped_column(Integer)
    comment: Mapped[str | None] = mapped_column(Text)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    task: Mapped[Task] = relationship(back_populates="history")


class SubTask(Base):
    """Smaller work item owned by a single assignee."""

    __tablename__ = "subtasks"
    __audited__ = True

    id: Mapped[int] = mapped_column(primary_key=True)
    task_id: Mapped[int] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    assignee_id: Mapped[int | None] = mapped_column(Integer, index=True)
    assignee_name: Mapped[str | None] = mapped_column(String(200))
    status_id: Mapped[TaskStatus] = mapped_column(
        IntEnumType(TaskStatus), default=TaskStatus.TODO, nullable=False
    )
    priority_id: Mapped[Priority] = mapped_column(
        IntEnumType(Priority), default=Priority.MEDIUM, nullable=False
    )
    department_id: Mapped[int | None] = mapped_column(Integer)
    estimated_hours: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    actual_hours: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    task: Mapped[Task] = relationship(back_populates="subtasks")
