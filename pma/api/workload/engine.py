"""Workload evaluation shared by the designer, QC, developer and team views.

A *sample* is one person plus the tasks assigned to them. A *policy* turns a
sample into a :class:`WorkloadResult` using its own capacity constants and
status thresholds. Everything after evaluation (status filtering, sorting,
paging and team metrics) is policy independent and lives at module level.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass, field
from statistics import fmean
from typing import Callable, Iterable, Optional, Sequence

from ..schema.enums import Priority, TaskStatus

__all__ = [
    "TaskSample",
    "PersonSample",
    "WorkloadResult",
    "WorkloadPolicy",
    "DesignerPolicy",
    "QcPolicy",
    "DeveloperPolicy",
    "TeamPolicy",
    "ACTIVE_STATUSES",
    "evaluate_all",
    "filter_by_status",
    "sort_results",
    "paginate",
    "summarize",
    "TeamSummary",
]

ACTIVE_STATUSES = frozenset(
    {
        TaskStatus.TODO,
        TaskStatus.IN_PROGRESS,
        TaskStatus.IN_REVIEW,
        TaskStatus.REWORK,
        TaskStatus.BLOCKED,
    }
)


@dataclass(slots=True)
class TaskSample:
    task_id: int
    name: str
    status: TaskStatus
    start_date: dt.datetime
    end_date: dt.datetime
    priority: Priority = Priority.MEDIUM
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    progress: int = 0
    assigned_at: Optional[dt.datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def span_days(self) -> float:
        """Fractional days between start and end."""

        return (self.end_date - self.start_date).total_seconds() / 86400

    @property
    def calendar_days(self) -> int:
        """Day boundaries crossed between start and end."""

        return (self.end_date.date() - self.start_date.date()).days


@dataclass(slots=True)
class PersonSample:
    # None for users without a personnel id; such people carry no tasks
    person_id: Optional[int]
    name: str
    grade_name: Optional[str] = None
    military_number: Optional[str] = None
    department: Optional[str] = None
    department_id: Optional[int] = None
    email: Optional[str] = None
    tasks: list[TaskSample] = field(default_factory=list)


@dataclass(slots=True)
class WorkloadResult:
    person: PersonSample
    status: str
    workload: float
    efficiency: float
    current_tasks: int
    completed_tasks: int
    average_completion_time: float = 0.0
    completion_samples: int = 0
    # unrounded mean behind average_completion_time
    raw_completion_time: float = 0.0
    available_hours: float = 0.0
    overdue_tasks: int = 0
    busy_until: Optional[dt.datetime] = None
    active_days_remaining: int = 0
    total_active_days: float = 0.0
    completion_rate: int = 0
    overdue_rate: int = 0
    performance: int = 0
    estimated_hours: float = 0.0
    actual_hours: float = 0.0

    @property
    def total_tasks(self) -> int:
        return self.current_tasks + self.completed_tasks


class WorkloadPolicy:
    """Base class: subclasses implement :meth:`evaluate`."""

    name = "base"
    digits = 1

    def evaluate(self, person: PersonSample, now: dt.datetime) -> WorkloadResult:
        raise NotImplementedError

    def _round(self, value: float) -> float:
        return round(value, self.digits)


class DesignerPolicy(WorkloadPolicy):
    """Hours based load against a monthly capacity."""

    name = "designer"
    capacity_hours = 160.0
    busy_threshold = 70.0

    def evaluate(self, person: PersonSample, now: dt.datetime) -> WorkloadResult:
        current = [task for task in person.tasks if not task.is_completed]
        completed = [task for task in person.tasks if task.is_completed]
        durations = [task.actual_hours for task in completed if task.actual_hours is not None]

        total = len(person.tasks)
        efficiency = len(completed) / total * 100 if total else 0.0
        estimated = sum(task.estimated_hours or 0.0 for task in current)
        workload = min(estimated / self.capacity_hours * 100, 100.0)

        return WorkloadResult(
            person=person,
            status="Busy" if workload >= self.busy_threshold else "Available",
            workload=self._round(workload),
            efficiency=self._round(efficiency),
            current_tasks=len(current),
            completed_tasks=len(completed),
            average_completion_time=self._round(fmean(durations)) if durations else 0.0,
            completion_samples=len(durations),
            raw_completion_time=fmean(durations) if durations else 0.0,
            available_hours=self._round(max(self.capacity_hours - estimated, 0.0)),
            estimated_hours=estimated,
        )


class QcPolicy(WorkloadPolicy):
    """Date-span based load against a monthly day capacity."""

    name = "qc"
    capacity_days = 30.0
    hours_per_day = 8.0
    max_penalty = 30
    penalty_per_task = 10

    def _efficiency(self, total: int, current: int, completed: int) -> float:
        if total == 0 or current == 0:
            return 100.0
        penalty = min(current * self.penalty_per_task, self.max_penalty)
        return max(completed / total * 100 - penalty, 0.0)

    @staticmethod
    def _status(current: int, workload: float) -> str:
        if current == 0:
            return "available"
        if current == 1 and workload < 50:
            return "light"
        if workload >= 90:
            return "overloaded"
        if workload >= 70 or current >= 3:
            return "busy"
        return "light"

    def evaluate(self, person: PersonSample, now: dt.datetime) -> WorkloadResult:
        current = [task for task in person.tasks if not task.is_completed]
        completed = [task for task in person.tasks if task.is_completed]
        spans = [task.span_days for task in completed]

        days = sum(max(task.span_days, 1.0) for task in current)
        workload = min(days / self.capacity_days * 100, 100.0)
        available = max(self.capacity_days - days, 0.0) * self.hours_per_day

        return WorkloadResult(
            person=person,
            status=self._status(len(current), workload),
            workload=self._round(workload),
            efficiency=self._round(self._efficiency(len(person.tasks), len(current), len(completed))),
            current_tasks=len(current),
            completed_tasks=len(completed),
            average_completion_time=self._round(fmean(spans)) if spans else 0.0,
            completion_samples=len(spans),
            raw_completion_time=fmean(spans) if spans else 0.0,
            available_hours=self._round(available),
        )


class DeveloperPolicy(WorkloadPolicy):
    """Working-day load combined with the peak number of parallel tasks."""

    name = "developer"
    digits = 2
    working_days = 22.0
    horizon_days = 60
    max_workload = 200.0

    def peak_overlap(self, tasks: Sequence[TaskSample], today: dt.date) -> int:
        if not tasks:
            return 0
        days_ahead = (max(task.end_date.date() for task in tasks) - today).days
        if days_ahead <= 0:
            return 0
        peak = 0
        for offset in range(min(days_ahead, self.horizon_days) + 1):
            day = today + dt.timedelta(days=offset)
            overlapping = sum(
                1 for task in tasks if task.start_date.date() <= day <= task.end_date.date()
            )
            peak = max(peak, overlapping)
        return peak

    @staticmethod
    def _status(active: int, workload: float) -> str:
        if active == 0:
            return "available"
        if workload > 120:
            return "overloaded"
        if workload > 80:
            return "busy"
        return "light"

    def evaluate(self, person: PersonSample, now: dt.datetime) -> WorkloadResult:
        active = [task for task in person.tasks if task.status in ACTIVE_STATUSES]
        completed = [task for task in person.tasks if task.is_completed]
        overdue = [
            task for task in active if task.status != TaskStatus.BLOCKED and task.end_date < now
        ]
        completion_days = [task.calendar_days for task in completed]

        considered = len(active) + len(completed)
        efficiency = len(completed) * 100 / considered if considered else 0.0

        workload = 0.0
        total_active_days = float(sum(task.calendar_days for task in active))
        busy_until = None
        remaining = 0
        if active:
            busy_until = max(task.end_date for task in active)
            remaining = max(0, (busy_until - now).days)
            workload = max(
                total_active_days / self.working_days * 100,
                self.peak_overlap(active, now.date()) * 100.0,
            )
        workload = min(workload, self.max_workload)

        return WorkloadResult(
            person=person,
            status=self._status(len(active), workload),
            workload=self._round(workload),
            efficiency=self._round(efficiency),
            current_tasks=len(active),
            completed_tasks=len(completed),
            average_completion_time=self._round(fmean(completion_days)) if completion_days else 0.0,
            completion_samples=len(completion_days),
            raw_completion_time=fmean(completion_days) if completion_days else 0.0,
            overdue_tasks=len(overdue),
            busy_until=busy_until,
            active_days_remaining=remaining,
            total_active_days=self._round(total_active_days),
        )


class TeamPolicy(WorkloadPolicy):
    """Task-count load with completion-based performance and busy buckets."""

    name = "team"
    per_task_load = 10
    busy_buckets = ((7, "Very Busy"), (3, "Busy"), (0, "Moderately Busy"))

    def busy_status(self, busy_until: Optional[dt.datetime], today: dt.date) -> str:
        if busy_until is None:
            return "Available"
        days_until_free = (busy_until.date() - today).days
        for threshold, label in self.busy_buckets:
            if days_until_free > threshold:
                return label
        return "Available"

    def evaluate(self, person: PersonSample, now: dt.datetime) -> WorkloadResult:
        today = now.date()
        assigned = [task for task in person.tasks if not task.is_completed]
        completed = [task for task in person.tasks if task.is_completed]
        overdue = [task for task in assigned if task.end_date.date() < today]

        total = len(assigned) + len(completed)
        completion_rate = len(completed) * 100 // total if total else 100
        overdue_rate = len(overdue) * 100 // len(assigned) if assigned else 0
        busy_until = max((task.end_date for task in assigned), default=None)

        return WorkloadResult(
            person=person,
            status=self.busy_status(busy_until, today),
            workload=float(min(len(assigned) * self.per_task_load, 100)),
            efficiency=float(completion_rate),
            current_tasks=len(assigned),
            completed_tasks=len(completed),
            overdue_tasks=len(overdue),
            busy_until=busy_until,
            completion_rate=completion_rate,
            overdue_rate=overdue_rate,
            performance=max(0, completion_rate - overdue_rate),
            estimated_hours=sum(task.estimated_hours or 0.0 for task in assigned),
            actual_hours=sum(task.actual_hours or 0.0 for task in completed),
        )


# ---------------------------------------------------------------------------
# Policy independent helpers
# ---------------------------------------------------------------------------


def evaluate_all(
    policy: WorkloadPolicy, people: Iterable[PersonSample], now: dt.datetime
) -> list[WorkloadResult]:
    return [policy.evaluate(person, now) for person in people]


def filter_by_status(results: Iterable[WorkloadResult], status: Optional[str]) -> list[WorkloadResult]:
    """Keep results whose status matches, ignoring case; blank or ``all`` keeps everything."""

    if not status or status.strip().lower() == "all":
        return list(results)
    wanted = status.strip().lower()
    return [result for result in results if result.status.lower() == wanted]


_SORT_KEYS: dict[str, Callable[[WorkloadResult], object]] = {
    "name": lambda result: (result.person.name or "").lower(),
    "workload": lambda result: result.workload,
    "efficiency": lambda result: result.efficiency,
}


def sort_results(
    results: Iterable[WorkloadResult],
    sort_by: Optional[str] = "efficiency",
    sort_order: Optional[str] = "desc",
) -> list[WorkloadResult]:
    key = _SORT_KEYS.get((sort_by or "").lower(), _SORT_KEYS["efficiency"])
    descending = (sort_order or "desc").lower() == "desc"
    return sorted(results, key=key, reverse=descending)


def paginate(items: Sequence, page: int, page_size: int) -> tuple[list, int, int]:
    """Return ``(page_items, total_items, total_pages)``."""

    if page < 1:
        raise ValueError("page must be greater than or equal to 1")
    if page_size < 1 or page_size > 100:
        raise ValueError("pageSize must be between 1 and 100")
    total = len(items)
    start = (page - 1) * page_size
    return list(items[start : start + page_size]), total, math.ceil(total / page_size)


@dataclass(slots=True)
class TeamSummary:
    total_members: int
    active_members: int
    average_efficiency: float
    total_tasks_completed: int
    total_tasks_in_progress: int
    average_task_completion_time: float


def summarize(results: Sequence[WorkloadResult], digits: int = 1) -> TeamSummary:
    """Team level figures; efficiency is the plain completion ratio per member."""

    efficiencies = 0.0
    active = 0
    for result in results:
        if result.total_tasks:
            efficiencies += result.completed_tasks / result.total_tasks * 100
            if result.current_tasks:
                active += 1
    timed = [result.raw_completion_time for result in results if result.completion_samples]
    count = len(results)
    return TeamSummary(
        total_members=count,
        active_members=active,
        average_efficiency=round(efficiencies / count, digits) if count else 0.0,
        total_tasks_completed=sum(result.completed_tasks for result in results),
        total_tasks_in_progress=sum(result.current_tasks for result in results),
        average_task_completion_time=round(fmean(timed), digits) if timed else 0.0,
    )
