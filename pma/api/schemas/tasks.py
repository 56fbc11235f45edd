"""Task, subtask and status history schemas."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import Field

from ..schema.enums import Priority, TaskRoleType, TaskStatus
from .common import ApiModel

__all__ = [
    "TaskCreateRequest",
    "TaskUpdateRequest",
    "TaskResponse",
    "TaskMoveRequest",
    "TaskMoveToSprintRequest",
    "AdhocTaskRequest",
    "TaskStatusUpdateRequest",
    "TaskStatusHistoryResponse",
    "SubTaskCreateRequest",
    "SubTaskUpdateRequest",
    "SubTaskResponse",
]


class TaskCreateRequest(ApiModel):
    """태스크 생성 요청."""

    sprint_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: dt.datetime
    end_date: dt.datetime
    status_id: TaskStatus = TaskStatus.TODO
    priority_id: Priority = Priority.MEDIUM
    department_id: Optional[int] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)
    timeline_id: Optional[int] = None
    project_requirement_id: Optional[int] = None
    progress: int = Field(0, ge=0, le=100)
    role_type: Optional[TaskRoleType] = None
    member_ids: List[int] = Field(default_factory=list)
    dep_task_ids: List[int] = Field(default_factory=list)


class TaskUpdateRequest(ApiModel):
    """태스크 수정 요청; memberIds/depTaskIds는 보낸 경우에만 교체."""

    sprint_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[dt.datetime] = None
    end_date: Optional[dt.datetime] = None
    status_id: Optional[TaskStatus] = None
    priority_id: Optional[Priority] = None
    department_id: Optional[int] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)
    timeline_id: Optional[int] = None
    project_requirement_id: Optional[int] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    role_type: Optional[TaskRoleType] = None
    member_ids: Optional[List[int]] = None
    dep_task_ids: Optional[List[int]] = None


class TaskResponse(ApiModel):
    id: int
    sprint_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    start_date: dt.datetime
    end_date: dt.datetime
    status_id: TaskStatus
    priority_id: Priority
    department_id: Optional[int] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    timeline_id: Optional[int] = None
    project_requirement_id: Optional[int] = None
    progress: int
    role_type: Optional[TaskRoleType] = None
    assignee_ids: List[int] = Field(default_factory=list)
    dependency_ids: List[int] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: dt.datetime


class TaskMoveRequest(ApiModel):
    move_days: int


class TaskMoveToSprintRequest(ApiModel):
    target_sprint_id: int


class AdhocTaskRequest(ApiModel):
    """스프린트 없이 바로 배정하는 임시 태스크."""

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: dt.datetime
    end_date: dt.datetime
    assigned_members: List[int] = Field(..., min_length=1)


class TaskStatusUpdateRequest(ApiModel):
    status_id: TaskStatus
    comment: Optional[str] = None
    progress: Optional[int] = Field(None, ge=0, le=100)


class TaskStatusHistoryResponse(ApiModel):
    id: int
    task_id: int
    old_status: TaskStatus
    new_status: TaskStatus
    changed_by_prs_id: Optional[int] = None
    comment: Optional[str] = None
    updated_at: dt.datetime


class SubTaskCreateRequest(ApiModel):
    task_id: int
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    assignee_id: Optional[int] = None
    assignee_name: Optional[str] = None
    status_id: TaskStatus = TaskStatus.TODO
    priority_id: Priority = Priority.MEDIUM
    department_id: Optional[int] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)
    progress: int = Field(0, ge=0, le=100)


class SubTaskUpdateRequest(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    assignee_id: Optional[int] = None
    assignee_name: Optional[str] = None
    status_id: Optional[TaskStatus] = None
    priority_id: Optional[Priority] = None
    department_id: Optional[int] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)
    progress: Optional[int] = Field(None, ge=0, le=100)


class SubTaskResponse(ApiModel):
    id: int
    task_id: int
    name: str
    description: Optional[str] = None
    assignee_id: Optional[int] = None
    assignee_name: Optional[str] = None
    status_id: TaskStatus
    priority_id: Priority
    department_id: Optional[int] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    progress: int
    created_at: dt.datetime
    updated_at: dt.datetime
