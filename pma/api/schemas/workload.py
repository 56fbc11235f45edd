"""Response shapes for the workload dashboards."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import Field

from ..schema.enums import Priority, ProjectStatus, TaskStatus
from .common import ApiModel

__all__ = [
    "WorkloadPagination",
    "DeveloperPagination",
    "MemberWorkloadResponse",
    "MemberWorkloadListResponse",
    "TeamMetricsResponse",
    "DeveloperWorkloadResponse",
    "DeveloperWorkloadListResponse",
    "RecentTaskResponse",
    "DeveloperPerformanceResponse",
    "TeamMemberMetrics",
    "TeamMemberPerformanceResponse",
    "TeamSummaryResponse",
    "MemberTaskResponse",
    "MemberProjectResponse",
    "MemberWorkloadSummary",
    "TeamMemberDetailResponse",
]


class WorkloadPagination(ApiModel):
    current_page: int
    page_size: int
    total_items: int
    total_pages: int


class DeveloperPagination(WorkloadPagination):
    has_next_page: bool
    has_previous_page: bool


# ============================================================================
# 디자이너 / QC
# ============================================================================


class MemberWorkloadResponse(ApiModel):
    prs_id: Optional[int]
    name: str
    grade_name: Optional[str] = None
    military_number: Optional[str] = None
    current_tasks_count: int
    completed_tasks_count: int
    average_task_completion_time: float
    efficiency: float
    workload_percentage: float
    available_hours: float
    status: str


class MemberWorkloadListResponse(ApiModel):
    members: List[MemberWorkloadResponse]
    pagination: WorkloadPagination


class TeamMetricsResponse(ApiModel):
    total_members: int
    active_members: int
    average_efficiency: float
    total_tasks_completed: int
    total_tasks_in_progress: int
    average_task_completion_time: float


# ============================================================================
# 개발자
# ============================================================================


class DeveloperWorkloadResponse(ApiModel):
    prs_id: int
    developer_name: str
    grade_name: Optional[str] = None
    military_number: Optional[str] = None
    department: Optional[str] = None
    current_tasks: int
    completed_tasks: int
    total_tasks: int
    overdue_tasks: int
    average_task_completion_time: float
    efficiency: float
    workload_percentage: float
    active_days_remaining: int
    total_active_days: float
    busy_until: Optional[dt.datetime] = None
    status: str


class DeveloperWorkloadListResponse(ApiModel):
    developers: List[DeveloperWorkloadResponse]
    pagination: DeveloperPagination


class RecentTaskResponse(ApiModel):
    task_id: int
    task_name: str
    status_id: TaskStatus
    priority_id: Priority
    assigned_at: Optional[dt.datetime] = None


class DeveloperPerformanceResponse(ApiModel):
    prs_id: int
    developer_name: str
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    average_completion_time: float
    efficiency: float
    recent_tasks: List[RecentTaskResponse] = Field(default_factory=list)


# ============================================================================
# 팀
# ============================================================================


class TeamMemberMetrics(ApiModel):
    workload: float
    performance: int
    tasks_assigned: int
    tasks_completed: int
    tasks_overdue: int
    projects_assigned: int
    requirements_assigned: int
    estimated_hours: float
    actual_hours: float


class TeamMemberPerformanceResponse(ApiModel):
    user_id: int
    full_name: str
    email: Optional[str] = None
    department: Optional[str] = None
    department_id: Optional[int] = None
    busy_status: str
    busy_until: Optional[dt.datetime] = None
    metrics: TeamMemberMetrics


class TeamSummaryResponse(ApiModel):
    total_team_members: int
    busy_members_count: int
    available_members_count: int
    total_active_tasks: int
    total_overdue_tasks: int
    average_tasks_per_member: float


class MemberTaskResponse(ApiModel):
    task_id: int
    task_name: str
    status_id: TaskStatus
    priority_id: Priority
    start_date: dt.datetime
    end_date: dt.datetime
    progress: int
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    is_overdue: bool


class MemberProjectResponse(ApiModel):
    project_id: int
    project_name: str
    status: ProjectStatus
    start_date: Optional[dt.datetime] = None
    expected_completion_date: Optional[dt.datetime] = None


class MemberWorkloadSummary(ApiModel):
    total_assigned_tasks: int
    overdue_tasks: int
    total_projects: int
    total_estimated_hours: float
    total_actual_hours: float


class TeamMemberDetailResponse(ApiModel):
    user_id: int
    full_name: str
    email: Optional[str] = None
    department: Optional[str] = None
    busy_status: str
    assigned_tasks: List[MemberTaskResponse]
    assigned_projects: List[MemberProjectResponse]
    summary: MemberWorkloadSummary
