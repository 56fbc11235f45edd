"""Database side of the workload dashboards.

Each view loads its people once, attaches their assigned tasks in a single
query and hands the samples to the matching policy in :mod:`.engine`.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections import defaultdict
from statistics import fmean
from typing import Iterable, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session, selectinload

from ..database import PmaSettings
from ..models import (
    Department,
    Employee,
    Project,
    ProjectAnalyst,
    ProjectRequirement,
    Task,
    TaskAssignment,
    Team,
    User,
    as_utc_naive,
    utcnow,
)
from ..schema.enums import ProjectStatus, RequirementStatus, TaskStatus
from ..schemas import workload as schemas
from ..services.base import Page, validate_paging
from .engine import (
    DesignerPolicy,
    DeveloperPolicy,
    PersonSample,
    QcPolicy,
    TaskSample,
    TeamPolicy,
    WorkloadPolicy,
    WorkloadResult,
    evaluate_all,
    filter_by_status,
    paginate,
    sort_results,
    summarize,
)

__all__ = ["WorkloadService", "ACTIVE_PROJECT_STATUSES"]

logger = logging.getLogger(__name__)

ACTIVE_PROJECT_STATUSES = (
    ProjectStatus.NEW,
    ProjectStatus.UNDER_STUDY,
    ProjectStatus.UNDER_DEVELOPMENT,
    ProjectStatus.UNDER_TESTING,
)
RECENT_TASKS = 5


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def _to_sample(task: Task, assigned_at: Optional[dt.datetime] = None) -> TaskSample:
    return TaskSample(
        task_id=task.id,
        name=task.name,
        status=task.status_id,
        priority=task.priority_id,
        start_date=task.start_date,
        end_date=task.end_date,
        estimated_hours=_as_float(task.estimated_hours),
        actual_hours=_as_float(task.actual_hours),
        progress=task.progress,
        assigned_at=assigned_at,
    )


def _like(term: str) -> str:
    return f"%{term.strip()}%"


class WorkloadService:
    """Builds workload listings, metrics and per-person breakdowns."""

    def __init__(self, session: Session, settings: PmaSettings, *, now: Optional[dt.datetime] = None):
        self.session = session
        self.settings = settings
        self._now = as_utc_naive(now) if now is not None else None

    @property
    def now(self) -> dt.datetime:
        return self._now or utcnow()

    # ---------------------------- samples -----------------------------
    def _tasks_by_person(self, prs_ids: Iterable[Optional[int]]) -> dict[int, list[TaskSample]]:
        wanted = {prs_id for prs_id in prs_ids if prs_id is not None}
        samples: dict[int, list[TaskSample]] = defaultdict(list)
        if not wanted:
            return samples
        rows = self.session.execute(
            select(TaskAssignment.prs_id, TaskAssignment.assigned_at, Task)
            .join(Task, Task.id == TaskAssignment.task_id)
            .where(TaskAssignment.prs_id.in_(wanted))
            .order_by(Task.id)
        ).all()
        for prs_id, assigned_at, task in rows:
            samples[prs_id].append(_to_sample(task, assigned_at))
        return samples

    def _attach(self, people: list[PersonSample]) -> list[PersonSample]:
        tasks = self._tasks_by_person(person.person_id for person in people)
        for person in people:
            person.tasks = list(tasks.get(person.person_id, ()))
        return people

    def designer_people(self, search: Optional[str] = None) -> list[PersonSample]:
        stmt = select(User).where(
            User.department_id == self.settings.design_department_id,
            User.is_visible.is_(True),
        )
        if search and search.strip():
            pattern = _like(search)
            stmt = stmt.where(
                or_(
                    User.full_name.ilike(pattern),
                    User.military_number.ilike(pattern),
                    User.grade_name.ilike(pattern),
                )
            )
        people = [
            PersonSample(
                person_id=user.prs_id,
                name=user.full_name or user.user_name,
                grade_name=user.grade_name,
                military_number=user.military_number,
                department_id=user.department_id,
                email=user.email,
            )
            for user in self.session.scalars(stmt.order_by(User.full_name, User.id)).all()
        ]
        return self._attach(people)

    def qc_people(self, search: Optional[str] = None) -> list[PersonSample]:
        stmt = (
            select(Team, Employee)
            .outerjoin(Employee, Employee.id == Team.prs_id)
            .where(Team.department_id == self.settings.qc_department_id, Team.is_active.is_(True))
        )
        if search and search.strip():
            pattern = _like(search)
            stmt = stmt.where(
                or_(
                    Team.full_name.ilike(pattern),
                    Employee.military_number.ilike(pattern),
                    Employee.grade_name.ilike(pattern),
                )
            )
        people = [
            PersonSample(
                person_id=member.prs_id,
                name=member.full_name or (employee.full_name if employee else "") or "",
                grade_name=employee.grade_name if employee else None,
                military_number=employee.military_number if employee else None,
                department_id=member.department_id,
            )
            for member, employee in self.session.execute(stmt.order_by(Team.full_name, Team.id)).all()
        ]
        return self._attach(people)

    def developer_people(
        self, search: Optional[str] = None, department_id: Optional[int] = None
    ) -> list[PersonSample]:
        stmt = (
            select(Team, Employee, Department)
            .join(Employee, Employee.id == Team.prs_id)
            .join(Department, Department.id == Team.department_id)
            .where(Team.is_active.is_(True))
        )
        if department_id is not None:
            stmt = stmt.where(Team.department_id == department_id)
        if search and search.strip():
            pattern = _like(search)
            stmt = stmt.where(
                or_(
                    Employee.full_name.ilike(pattern),
                    Employee.military_number.ilike(pattern),
                    Employee.grade_name.ilike(pattern),
                )
            )
        people: dict[int, PersonSample] = {}
        for member, employee, department in self.session.execute(
            stmt.order_by(Employee.full_name, Team.id)
        ).all():
            people.setdefault(
                employee.id,
                PersonSample(
                    person_id=employee.id,
                    name=employee.full_name,
                    grade_name=employee.grade_name,
                    military_number=employee.military_number,
                    department=department.name,
                    department_id=department.id,
                ),
            )
        return self._attach(list(people.values()))

    def _team_users(self, department_id: Optional[int] = None) -> list[tuple[User, PersonSample]]:
        stmt = select(User).options(selectinload(User.department))
        if department_id is not None:
            stmt = stmt.where(User.department_id == department_id)
        users = self.session.scalars(stmt.order_by(User.full_name, User.id)).all()
        tasks = self._tasks_by_person(user.prs_id for user in users)
        pairs = []
        for user in users:
            person = PersonSample(
                person_id=user.id,
                name=user.full_name or user.user_name,
                grade_name=user.grade_name,
                military_number=user.military_number,
                department=user.department.name if user.department else None,
                department_id=user.department_id,
                email=user.email,
                tasks=list(tasks.get(user.prs_id, ())) if user.prs_id is not None else [],
            )
            pairs.append((user, person))
        return pairs

    # ---------------------------- designer / QC -----------------------------
    @staticmethod
    def _member_row(result: WorkloadResult) -> schemas.MemberWorkloadResponse:
        person = result.person
        return schemas.MemberWorkloadResponse(
            prs_id=person.person_id,
            name=person.name,
            grade_name=person.grade_name,
            military_number=person.military_number,
            current_tasks_count=result.current_tasks,
            completed_tasks_count=result.completed_tasks,
            average_task_completion_time=result.average_completion_time,
            efficiency=result.efficiency,
            workload_percentage=result.workload,
            available_hours=result.available_hours,
            status=result.status,
        )

    def _member_listing(
        self,
        policy: WorkloadPolicy,
        people: Sequence[PersonSample],
        *,
        page: int,
        page_size: int,
        status_filter: Optional[str],
        sort_by: Optional[str],
        sort_order: Optional[str],
    ) -> schemas.MemberWorkloadListResponse:
        results = evaluate_all(policy, people, self.now)
        results = sort_results(filter_by_status(results, status_filter), sort_by, sort_order)
        items, total, pages = paginate(results, page, page_size)
        return schemas.MemberWorkloadListResponse(
            members=[self._member_row(result) for result in items],
            pagination=schemas.WorkloadPagination(
                current_page=page, page_size=page_size, total_items=total, total_pages=pages
            ),
        )

    def designer_workload(
        self,
        *,
        page: int = 1,
        page_size: int = 5,
        search_query: Optional[str] = None,
        status_filter: Optional[str] = None,
        sort_by: Optional[str] = "efficiency",
        sort_order: Optional[str] = "desc",
    ) -> schemas.MemberWorkloadListResponse:
        return self._member_listing(
            DesignerPolicy(),
            self.designer_people(search_query),
            page=page,
            page_size=page_size,
            status_filter=status_filter,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    def qc_workload(
        self,
        *,
        page: int = 1,
        page_size: int = 5,
        search_query: Optional[str] = None,
        status_filter: Optional[str] = None,
        sort_by: Optional[str] = "efficiency",
        sort_order: Optional[str] = "desc",
    ) -> schemas.MemberWorkloadListResponse:
        return self._member_listing(
            QcPolicy(),
            self.qc_people(search_query),
            page=page,
            page_size=page_size,
            status_filter=status_filter,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    def _metrics(self, policy: WorkloadPolicy, people: Sequence[PersonSample]) -> schemas.TeamMetricsResponse:
        summary = summarize(evaluate_all(policy, people, self.now))
        return schemas.TeamMetricsResponse(
            total_members=summary.total_members,
            active_members=summary.active_members,
            average_efficiency=summary.average_efficiency,
            total_tasks_completed=summary.total_tasks_completed,
            total_tasks_in_progress=summary.total_tasks_in_progress,
            average_task_completion_time=summary.average_task_completion_time,
        )

    def designer_metrics(self) -> schemas.TeamMetricsResponse:
        return self._metrics(DesignerPolicy(), self.designer_people())

    def qc_metrics(self) -> schemas.TeamMetricsResponse:
        return self._metrics(QcPolicy(), self.qc_people())

    # ---------------------------- developers -----------------------------
    def developer_workload(
        self,
        *,
        page: int = 1,
        page_size: int = 10,
        status: Optional[str] = None,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        current_user: Optional[User] = None,
    ) -> schemas.DeveloperWorkloadListResponse:
        if department_id is None and current_user is not None:
            department_id = current_user.department_id

        results = evaluate_all(DeveloperPolicy(), self.developer_people(search, department_id), self.now)
        results = filter_by_status(results, status)
        # Available developers first, then the busiest.
        results.sort(key=lambda result: (result.status != "available", -result.current_tasks))
        items, total, pages = paginate(results, page, page_size)

        return schemas.DeveloperWorkloadListResponse(
            developers=[
                schemas.DeveloperWorkloadResponse(
                    prs_id=result.person.person_id,
                    developer_name=result.person.name,
                    grade_name=result.person.grade_name,
                    military_number=result.person.military_number,
                    department=result.person.department,
                    current_tasks=result.current_tasks,
                    completed_tasks=result.completed_tasks,
                    total_tasks=result.total_tasks,
                    overdue_tasks=result.overdue_tasks,
                    average_task_completion_time=result.average_completion_time,
                    efficiency=result.efficiency,
                    workload_percentage=result.workload,
                    active_days_remaining=result.active_days_remaining,
                    total_active_days=result.total_active_days,
                    busy_until=result.busy_until,
                    status=result.status,
                )
                for result in items
            ],
            pagination=schemas.DeveloperPagination(
                current_page=page,
                page_size=page_size,
                total_items=total,
                total_pages=pages,
                has_next_page=page * page_size < total,
                has_previous_page=page > 1,
            ),
        )

    def developer_performance(self, prs_id: int) -> schemas.DeveloperPerformanceResponse:
        employee = self.session.get(Employee, prs_id)
        if employee is None:
            raise NoResultFound("Developer not found")

        tasks = self._tasks_by_person([prs_id]).get(prs_id, [])
        completed = [task for task in tasks if task.is_completed]
        in_progress = [task for task in tasks if task.status == TaskStatus.IN_PROGRESS]
        recent = sorted(
            tasks,
            key=lambda task: (task.assigned_at or dt.datetime.min, task.task_id),
            reverse=True,
        )[:RECENT_TASKS]

        return schemas.DeveloperPerformanceResponse(
            prs_id=employee.id,
            developer_name=employee.full_name,
            total_tasks=len(tasks),
            completed_tasks=len(completed),
            in_progress_tasks=len(in_progress),
            average_completion_time=round(fmean(t.span_days for t in completed), 2) if completed else 0.0,
            efficiency=round(len(completed) * 100 / len(tasks), 2) if tasks else 0.0,
            recent_tasks=[
                schemas.RecentTaskResponse(
                    task_id=task.task_id,
                    task_name=task.name,
                    status_id=task.status,
                    priority_id=task.priority,
                    assigned_at=task.assigned_at,
                )
                for task in recent
            ],
        )

    # ---------------------------- team -----------------------------
    def _project_counts(self) -> dict[int, int]:
        rows = self.session.execute(
            select(ProjectAnalyst.analyst_id, func.count(ProjectAnalyst.project_id))
            .join(Project, Project.id == ProjectAnalyst.project_id)
            .where(Project.status.in_(ACTIVE_PROJECT_STATUSES))
            .group_by(ProjectAnalyst.analyst_id)
        ).all()
        return dict(rows)

    def _requirement_counts(self) -> dict[int, int]:
        rows = self.session.execute(
            select(ProjectRequirement.assigned_analyst, func.count(ProjectRequirement.id))
            .where(
                ProjectRequirement.assigned_analyst.is_not(None),
                ProjectRequirement.status != RequirementStatus.COMPLETED,
            )
            .group_by(ProjectRequirement.assigned_analyst)
        ).all()
        return dict(rows)

    def team_performance(
        self,
        *,
        department_id: Optional[int] = None,
        busy_status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[schemas.TeamMemberPerformanceResponse]:
        validate_paging(page, limit)
        pairs = self._team_users(department_id)
        results = evaluate_all(TeamPolicy(), [person for _, person in pairs], self.now)
        results = filter_by_status(results, busy_status)
        items, total, _ = paginate(results, page, limit)

        projects = self._project_counts()
        requirements = self._requirement_counts()
        rows = [
            schemas.TeamMemberPerformanceResponse(
                user_id=result.person.person_id,
                full_name=result.person.name,
                email=result.person.email,
                department=result.person.department or "N/A",
                department_id=result.person.department_id,
                busy_status=result.status,
                busy_until=result.busy_until,
                metrics=schemas.TeamMemberMetrics(
                    workload=result.workload,
                    performance=result.performance,
                    tasks_assigned=result.current_tasks,
                    tasks_completed=result.completed_tasks,
                    tasks_overdue=result.overdue_tasks,
                    projects_assigned=projects.get(result.person.person_id, 0),
                    requirements_assigned=requirements.get(result.person.person_id, 0),
                    estimated_hours=result.estimated_hours,
                    actual_hours=result.actual_hours,
                ),
            )
            for result in items
        ]
        return Page(items=rows, total=total, page=page, limit=limit)

    def team_summary(self) -> schemas.TeamSummaryResponse:
        now = self.now
        today_start = dt.datetime.combine(now.date(), dt.time.min)
        results = evaluate_all(TeamPolicy(), [person for _, person in self._team_users()], now)
        busy = sum(
            1 for result in results if result.busy_until is not None and result.busy_until >= today_start
        )

        open_tasks = Task.status_id != TaskStatus.COMPLETED
        total_active = self.session.scalar(select(func.count(Task.id)).where(open_tasks)) or 0
        total_overdue = (
            self.session.scalar(
                select(func.count(Task.id)).where(open_tasks, Task.end_date < today_start)
            )
            or 0
        )
        per_person = self.session.scalars(
            select(func.count(TaskAssignment.id))
            .join(Task, Task.id == TaskAssignment.task_id)
            .where(open_tasks)
            .group_by(TaskAssignment.prs_id)
        ).all()

        return schemas.TeamSummaryResponse(
            total_team_members=len(results),
            busy_members_count=busy,
            available_members_count=len(results) - busy,
            total_active_tasks=total_active,
            total_overdue_tasks=total_overdue,
            average_tasks_per_member=round(fmean(per_person), 2) if per_person else 0.0,
        )

    def team_member(self, user_id: int) -> schemas.TeamMemberDetailResponse:
        user = self.session.get(User, user_id)
        if user is None:
            raise NoResultFound("User not found")

        today = self.now.date()
        tasks = self._tasks_by_person([user.prs_id]).get(user.prs_id, []) if user.prs_id else []
        open_tasks = sorted(
            (task for task in tasks if not task.is_completed), key=lambda task: task.end_date
        )
        assigned = [
            schemas.MemberTaskResponse(
                task_id=task.task_id,
                task_name=task.name,
                status_id=task.status,
                priority_id=task.priority,
                start_date=task.start_date,
                end_date=task.end_date,
                progress=task.progress,
                estimated_hours=task.estimated_hours,
                actual_hours=task.actual_hours,
                is_overdue=task.end_date.date() < today,
            )
            for task in open_tasks
        ]
        projects = [
            schemas.MemberProjectResponse(
                project_id=project.id,
                project_name=project.application_name,
                status=project.status,
                start_date=project.start_date,
                expected_completion_date=project.expected_completion_date,
            )
            for project in self.session.scalars(
                select(Project)
                .join(ProjectAnalyst, ProjectAnalyst.project_id == Project.id)
                .where(
                    ProjectAnalyst.analyst_id == user.id,
                    Project.status.in_(ACTIVE_PROJECT_STATUSES),
                )
                .order_by(Project.application_name)
            ).all()
        ]
        busy_until = max((task.end_date for task in open_tasks), default=None)

        return schemas.TeamMemberDetailResponse(
            user_id=user.id,
            full_name=user.full_name or user.user_name,
            email=user.email,
            department=user.department.name if user.department else "N/A",
            busy_status=TeamPolicy().busy_status(busy_until, today),
            assigned_tasks=assigned,
            assigned_projects=projects,
            summary=schemas.MemberWorkloadSummary(
                total_assigned_tasks=len(assigned),
                overdue_tasks=sum(1 for item in assigned if item.is_overdue),
                total_projects=len(projects),
                total_estimated_hours=sum(task.estimated_hours or 0.0 for task in open_tasks),
                total_actual_hours=sum(task.actual_hours or 0.0 for task in open_tasks),
            ),
        )
