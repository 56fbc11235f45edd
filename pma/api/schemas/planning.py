"""Timeline, sprint and timeline requirement schemas."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import Field

from ..schema.enums import Priority, SprintStatus, TaskStatus
from .common import ApiModel

__all__ = [
    "TimelineCreateRequest",
    "TimelineUpdateRequest",
    "TimelineResponse",
    "SprintCreateRequest",
    "SprintUpdateRequest",
    "SprintResponse",
    "TimelineRequirementCreateRequest",
    "TimelineRequirementUpdateRequest",
    "TimelineRequirementResponse",
]


class TimelineCreateRequest(ApiModel):
    project_id: int
    project_requirement_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: dt.datetime
    end_date: dt.datetime


class TimelineUpdateRequest(ApiModel):
    project_requirement_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[dt.datetime] = None
    end_date: Optional[dt.datetime] = None


class TimelineResponse(ApiModel):
    id: int
    project_id: int
    project_requirement_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    start_date: dt.datetime
    end_date: dt.datetime
    created_at: dt.datetime
    updated_at: dt.datetime


class SprintCreateRequest(ApiModel):
    timeline_id: Optional[int] = None
    project_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: dt.datetime
    end_date: dt.datetime
    status: SprintStatus = SprintStatus.PLANNING


class SprintUpdateRequest(ApiModel):
    timeline_id: Optional[int] = None
    project_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[dt.datetime] = None
    end_date: Optional[dt.datetime] = None
    status: Optional[SprintStatus] = None


class SprintResponse(ApiModel):
    id: int
    timeline_id: Optional[int] = None
    project_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    start_date: dt.datetime
    end_date: dt.datetime
    status: SprintStatus
    created_at: dt.datetime
    updated_at: dt.datetime


class TimelineRequirementCreateRequest(ApiModel):
    """타임라인 요구사항; duration을 생략하면 날짜로 계산."""

    timeline_id: int
    name: str = Field(..., min_length=1, max_length=200)
    start_date: dt.datetime
    end_date: dt.datetime
    duration: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    department_id: Optional[int] = None
    status_id: TaskStatus = TaskStatus.TODO
    priority_id: Priority = Priority.MEDIUM
    progress: int = Field(0, ge=0, le=100)
    assignee_ids: List[int] = Field(default_factory=list)


class TimelineRequirementUpdateRequest(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    start_date: Optional[dt.datetime] = None
    end_date: Optional[dt.datetime] = None
    duration: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    department_id: Optional[int] = None
    status_id: Optional[TaskStatus] = None
    priority_id: Optional[Priority] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    assignee_ids: Optional[List[int]] = None


class TimelineRequirementResponse(ApiModel):
    id: int
    timeline_id: int
    name: str
    start_date: dt.datetime
    end_date: dt.datetime
    duration: int
    notes: Optional[str] = None
    department_id: Optional[int] = None
    status_id: TaskStatus
    priority_id: Priority
    progress: int
    assignee_ids: List[int] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: dt.datetime
