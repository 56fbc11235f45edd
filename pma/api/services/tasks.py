"""Task scheduling, assignment, dependency and status workflow services."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable, Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import selectinload

from ..models import (
    ProjectRequirement,
    Sprint,
    SubTask,
    Task,
    TaskAssignment,
    TaskDependency,
    TaskStatusHistory,
    as_utc_naive,
)
from ..schema.enums import Priority, TaskRoleType, TaskStatus
from ..schemas import tasks as schemas
from .base import CrudService, Page, ensure_date_range

__all__ = ["TaskService", "SubTaskService", "SEARCH_LIMIT_DEFAULT"]

logger = logging.getLogger(__name__)

SEARCH_LIMIT_DEFAULT = 25
SEARCH_LIMIT_MAX = 100


class TaskService(CrudService[Task]):
    """Tasks with member assignments, prerequisite links and status cascade."""

    model = Task
    entity_name = "Task"
    relation_fields = frozenset({"member_ids", "dep_task_ids"})

    def _base_query(self):
        return select(Task).options(
            selectinload(Task.assignments),
            selectinload(Task.dependencies),
        )

    def _validate(self, instance: Task) -> None:
        ensure_date_range(instance.start_date, instance.end_date)

    def _ensure_sprint(self, sprint_id: Optional[int]) -> None:
        if sprint_id is not None and self.session.get(Sprint, sprint_id) is None:
            raise NoResultFound("Sprint not found")

    def _replace_members(self, task: Task, member_ids: Iterable[int]) -> None:
        task.assignments.clear()
        self.session.flush()
        for prs_id in self._dedupe(member_ids):
            task.assignments.append(TaskAssignment(prs_id=prs_id))

    def _replace_dependencies(self, task: Task, dep_task_ids: Iterable[int]) -> None:
        dep_task_ids = self._dedupe(dep_task_ids)
        if task.id is not None and task.id in dep_task_ids:
            raise ValueError("A task cannot depend on itself")
        if dep_task_ids:
            found = set(self.session.scalars(select(Task.id).where(Task.id.in_(dep_task_ids))).all())
            missing = [task_id for task_id in dep_task_ids if task_id not in found]
            if missing:
                raise ValueError(f"Unknown dependency task ids: {missing}")
        task.dependencies.clear()
        self.session.flush()
        for depends_on in dep_task_ids:
            task.dependencies.append(TaskDependency(depends_on_task_id=depends_on))

    # ---------------------------- queries -----------------------------
    def get(self, task_id: int) -> Task:
        task = self.session.scalars(self._base_query().where(Task.id == task_id)).first()
        if task is None:
            raise NoResultFound("Task not found")
        return task

    def list_tasks(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        sprint_id: Optional[int] = None,
        project_id: Optional[int] = None,
        assignee_id: Optional[int] = None,
        status_id: Optional[TaskStatus] = None,
    ) -> Page[Task]:
        stmt = self._base_query()
        if sprint_id is not None:
            stmt = stmt.where(Task.sprint_id == sprint_id)
        if project_id is not None:
            stmt = stmt.where(
                Task.project_requirement_id.in_(
                    select(ProjectRequirement.id).where(ProjectRequirement.project_id == project_id)
                )
            )
        if assignee_id is not None:
            stmt = stmt.where(
                Task.id.in_(select(TaskAssignment.task_id).where(TaskAssignment.prs_id == assignee_id))
            )
        if status_id is not None:
            stmt = stmt.where(Task.status_id == status_id)
        stmt = stmt.order_by(Task.start_date, Task.id)
        return self._paginate(stmt, page, limit)

    def by_sprint(self, sprint_id: int) -> Sequence[Task]:
        stmt = self._base_query().where(Task.sprint_id == sprint_id).order_by(Task.start_date, Task.id)
        return self.session.scalars(stmt).all()

    def by_assignee(self, prs_id: int) -> Sequence[Task]:
        stmt = (
            self._base_query()
            .where(Task.id.in_(select(TaskAssignment.task_id).where(TaskAssignment.prs_id == prs_id)))
            .order_by(Task.start_date, Task.id)
        )
        return self.session.scalars(stmt).all()

    def search(
        self,
        query: str = "",
        *,
        timeline_id: Optional[int] = None,
        limit: int = SEARCH_LIMIT_DEFAULT,
    ) -> Sequence[Task]:
        limit = min(max(limit, 1), SEARCH_LIMIT_MAX)
        stmt = self._base_query()
        if query and query.strip():
            pattern = f"%{query.strip()}%"
            stmt = stmt.where(or_(Task.name.ilike(pattern), Task.description.ilike(pattern)))
        if timeline_id is not None:
            stmt = stmt.where(Task.timeline_id == timeline_id)
        return self.session.scalars(stmt.order_by(Task.name, Task.id).limit(limit)).all()

    def history(self, task_id: int) -> Sequence[TaskStatusHistory]:
        self._get_or_raise(task_id)
        stmt = (
            select(TaskStatusHistory)
            .where(TaskStatusHistory.task_id == task_id)
            .order_by(TaskStatusHistory.updated_at.desc(), TaskStatusHistory.id.desc())
        )
        return self.session.scalars(stmt).all()

    # ---------------------------- mutations -----------------------------
    def create(self, payload: schemas.TaskCreateRequest) -> Task:
        self._ensure_sprint(payload.sprint_id)
        task = Task()
        self._assign(task, self._payload_values(payload, partial=False))
        self._validate(task)
        self.session.add(task)
        self.session.flush()
        self._replace_members(task, payload.member_ids)
        self._replace_dependencies(task, payload.dep_task_ids)
        self.session.commit()
        logger.info("Created task %s (%s)", task.id, task.name)
        return task

    def update(
        self,
        task_id: int,
        payload: schemas.TaskUpdateRequest,
        changed_by: Optional[int] = None,
    ) -> Task:
        task = self._get_or_raise(task_id)
        if "sprint_id" in payload.model_fields_set:
            self._ensure_sprint(payload.sprint_id)
        old_status = task.status_id
        self._assign(task, self._payload_values(payload, partial=True))
        self._validate(task)
        if payload.member_ids is not None:
            self._replace_members(task, payload.member_ids)
        if payload.dep_task_ids is not None:
            self._replace_dependencies(task, payload.dep_task_ids)
        if task.status_id != old_status:
            self._record(task, old_status, task.status_id, changed_by, None)
            self._cascade(task, changed_by)
        self.session.commit()
        return task

    def delete(self, task_id: int) -> None:
        task = self._get_or_raise(task_id)
        for link in self.session.scalars(
            select(TaskDependency).where(TaskDependency.depends_on_task_id == task_id)
        ).all():
            self.session.delete(link)
        self.session.delete(task)
        self.session.commit()
        logger.info("Deleted task %s", task_id)

    def move(self, task_id: int, move_days: int) -> Task:
        if move_days == 0:
            raise ValueError("moveDays must not be zero")
        task = self._get_or_raise(task_id)
        shift = dt.timedelta(days=move_days)
        task.start_date = task.start_date + shift
        task.end_date = task.end_date + shift
        self.session.commit()
        return task

    def move_to_sprint(self, task_id: int, target_sprint_id: int) -> Task:
        task = self._get_or_raise(task_id)
        self._ensure_sprint(target_sprint_id)
        if task.sprint_id == target_sprint_id:
            raise ValueError("Task is already in the target sprint")
        task.sprint_id = target_sprint_id
        self.session.commit()
        return task

    def create_adhoc(self, payload: schemas.AdhocTaskRequest) -> Task:
        task = Task(
            name=payload.name,
            description=payload.description,
            start_date=as_utc_naive(payload.start_date),
            end_date=as_utc_naive(payload.end_date),
            status_id=TaskStatus.TODO,
            priority_id=Priority.MEDIUM,
            progress=0,
        )
        self._validate(task)
        self.session.add(task)
        self.session.flush()
        self._replace_members(task, payload.assigned_members)
        self.session.commit()
        return task

    def update_status(
        self,
        task_id: int,
        payload: schemas.TaskStatusUpdateRequest,
        changed_by: Optional[int] = None,
    ) -> Task:
        """Change a task's status, record it and propagate to linked tasks."""

        task = self._get_or_raise(task_id)
        old_status = task.status_id
        task.status_id = payload.status_id
        task.progress = (
            payload.progress if payload.progress is not None else payload.status_id.default_progress()
        )
        self._record(task, old_status, payload.status_id, changed_by, payload.comment)
        self._cascade(task, changed_by)
        self.session.commit()
        logger.info(
            "Task %s status %s -> %s", task.id, old_status.name, payload.status_id.name
        )
        return task

    # ---------------------------- cascade -----------------------------
    def _record(
        self,
        task: Task,
        old_status: TaskStatus,
        new_status: TaskStatus,
        changed_by: Optional[int],
        comment: Optional[str],
    ) -> None:
        self.session.add(
            TaskStatusHistory(
                task_id=task.id,
                old_status=old_status,
                new_status=new_status,
                changed_by_prs_id=changed_by,
                comment=comment,
            )
        )

    def _dependents(self, task: Task) -> Sequence[Task]:
        stmt = select(Task).where(
            Task.id.in_(
                select(TaskDependency.task_id).where(TaskDependency.depends_on_task_id == task.id)
            ),
            Task.id != task.id,
        )
        return self.session.scalars(stmt).all()

    def _prerequisites(self, task: Task) -> Sequence[Task]:
        ids = [dep_id for dep_id in task.dependency_ids if dep_id != task.id]
        if not ids:
            return []
        return self.session.scalars(select(Task).where(Task.id.in_(ids))).all()

    def _set_linked(
        self,
        linked: Task,
        status: TaskStatus,
        progress: int,
        changed_by: Optional[int],
        comment: str,
    ) -> None:
        old_status = linked.status_id
        linked.status_id = status
        linked.progress = progress
        self._record(linked, old_status, status, changed_by, comment)

    def _cascade(self, task: Task, changed_by: Optional[int]) -> None:
        status = task.status_id
        if task.role_type == TaskRoleType.DEVELOPER:
            qc_tasks = [t for t in self._dependents(task) if t.role_type == TaskRoleType.QC]
            if status == TaskStatus.IN_REVIEW:
                for qc_task in qc_tasks:
                    self._set_linked(
                        qc_task,
                        TaskStatus.IN_REVIEW,
                        0,
                        changed_by,
                        "Status automatically changed to In Review because the developer task moved to In Review",
                    )
            elif status in (TaskStatus.TODO, TaskStatus.IN_PROGRESS):
                for qc_task in qc_tasks:
                    self._set_linked(
                        qc_task,
                        TaskStatus.BLOCKED,
                        0,
                        changed_by,
                        f"Status automatically changed to Blocked because the developer task moved back to {status.name}",
                    )
        elif task.role_type == TaskRoleType.QC:
            prerequisites = self._prerequisites(task)
            if status == TaskStatus.COMPLETED:
                for prereq in prerequisites:
                    self._set_linked(
                        prereq,
                        TaskStatus.COMPLETED,
                        100,
                        changed_by,
                        "Status automatically changed to Completed because the dependent task was completed",
                    )
            elif status == TaskStatus.REWORK:
                for prereq in prerequisites:
                    self._set_linked(
                        prereq,
                        TaskStatus.IN_PROGRESS,
                        25,
                        changed_by,
                        "Status automatically changed to In Progress because the dependent task moved to Rework",
                    )
            elif status == TaskStatus.IN_REVIEW:
                for prereq in prerequisites:
                    if prereq.role_type == TaskRoleType.DEVELOPER:
                        self._set_linked(
                            prereq,
                            TaskStatus.IN_REVIEW,
                            0,
                            changed_by,
                            "Status automatically changed to In Review because the QC task moved to In Review",
                        )


class SubTaskService(CrudService[SubTask]):
    model = SubTask
    entity_name = "Subtask"

    def list_subtasks(self, *, page: int = 1, limit: int = 20) -> Page[SubTask]:
        return self._paginate(select(SubTask).order_by(SubTask.id), page, limit)

    def by_task(self, task_id: int) -> Sequence[SubTask]:
        return self.list_all(SubTask.task_id == task_id)

    def by_assignee(self, assignee_id: int) -> Sequence[SubTask]:
        return self.list_all(SubTask.assignee_id == assignee_id)

    def create(self, payload: schemas.SubTaskCreateRequest) -> SubTask:
        if self.session.get(Task, payload.task_id) is None:
            raise NoResultFound("Task not found")
        return super().create(payload)
