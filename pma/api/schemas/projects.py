"""Project and project requirement schemas."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import Field

from ..schema.enums import (
    Priority,
    ProjectStatus,
    RequirementPriority,
    RequirementStatus,
    RequirementTaskStatus,
    RequirementType,
)
from .common import ApiModel

__all__ = [
    "ProjectCreateRequest",
    "ProjectUpdateRequest",
    "ProjectResponse",
    "ProjectStatsResponse",
    "RequirementCreateRequest",
    "RequirementUpdateRequest",
    "RequirementResponse",
    "AttachmentResponse",
    "RequirementTaskRequest",
    "RequirementTaskResponse",
    "AssignedProjectResponse",
]


# ============================================================================
# 프로젝트
# ============================================================================


class ProjectCreateRequest(ApiModel):
    """프로젝트 생성 요청."""

    application_name: str = Field(..., min_length=1, max_length=200)
    project_owner: Optional[str] = Field(None, max_length=200)
    alternative_owner: Optional[str] = Field(None, max_length=200)
    owning_unit: Optional[str] = Field(None, max_length=200)
    project_owner_id: Optional[int] = None
    alternative_owner_id: Optional[int] = None
    owning_unit_id: Optional[int] = None
    analysts: Optional[str] = None
    analyst_ids: Optional[List[int]] = None
    start_date: Optional[dt.datetime] = None
    expected_completion_date: Optional[dt.datetime] = None
    description: Optional[str] = None
    remarks: Optional[str] = None
    status: ProjectStatus = ProjectStatus.NEW
    priority: Priority = Priority.MEDIUM
    budget: Optional[float] = Field(None, ge=0)
    progress: int = Field(0, ge=0, le=100)


class ProjectUpdateRequest(ApiModel):
    """프로젝트 수정 요청 (보낸 필드만 반영)."""

    application_name: Optional[str] = Field(None, min_length=1, max_length=200)
    project_owner: Optional[str] = Field(None, max_length=200)
    alternative_owner: Optional[str] = Field(None, max_length=200)
    owning_unit: Optional[str] = Field(None, max_length=200)
    project_owner_id: Optional[int] = None
    alternative_owner_id: Optional[int] = None
    owning_unit_id: Optional[int] = None
    analysts: Optional[str] = None
    analyst_ids: Optional[List[int]] = None
    start_date: Optional[dt.datetime] = None
    expected_completion_date: Optional[dt.datetime] = None
    description: Optional[str] = None
    remarks: Optional[str] = None
    status: Optional[ProjectStatus] = None
    priority: Optional[Priority] = None
    budget: Optional[float] = Field(None, ge=0)
    progress: Optional[int] = Field(None, ge=0, le=100)


class ProjectResponse(ApiModel):
    id: int
    application_name: str
    project_owner: Optional[str] = None
    alternative_owner: Optional[str] = None
    owning_unit: Optional[str] = None
    project_owner_id: Optional[int] = None
    alternative_owner_id: Optional[int] = None
    owning_unit_id: Optional[int] = None
    analysts: Optional[str] = None
    analyst_ids: List[int] = Field(default_factory=list)
    start_date: Optional[dt.datetime] = None
    expected_completion_date: Optional[dt.datetime] = None
    description: Optional[str] = None
    remarks: Optional[str] = None
    status: ProjectStatus
    priority: Priority
    budget: Optional[float] = None
    progress: int
    created_at: dt.datetime
    updated_at: dt.datetime


class ProjectStatsResponse(ApiModel):
    total: int = 0
    new: int = 0
    under_study: int = 0
    under_development: int = 0
    under_testing: int = 0
    production: int = 0
    delayed: int = 0


# ============================================================================
# 요구사항
# ============================================================================


class RequirementCreateRequest(ApiModel):
    project_id: int
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    priority: RequirementPriority = RequirementPriority.MEDIUM
    type: RequirementType = RequirementType.NEW
    expected_completion_date: Optional[dt.datetime] = None
    status: RequirementStatus = RequirementStatus.DRAFT
    created_by: Optional[int] = None
    assigned_analyst: Optional[int] = None


class RequirementUpdateRequest(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    priority: Optional[RequirementPriority] = None
    type: Optional[RequirementType] = None
    expected_completion_date: Optional[dt.datetime] = None
    status: Optional[RequirementStatus] = None
    assigned_analyst: Optional[int] = None


class AttachmentResponse(ApiModel):
    id: int
    requirement_id: int
    file_name: str
    original_name: str
    file_size: int
    content_type: Optional[str] = None
    uploaded_at: dt.datetime


class RequirementTaskRequest(ApiModel):
    developer_id: Optional[int] = None
    qc_id: Optional[int] = None
    description: Optional[str] = None
    status: RequirementTaskStatus = RequirementTaskStatus.NOT_STARTED


class RequirementTaskResponse(ApiModel):
    id: int
    requirement_id: int
    developer_id: Optional[int] = None
    qc_id: Optional[int] = None
    description: Optional[str] = None
    status: RequirementTaskStatus
    created_by: Optional[int] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class RequirementResponse(ApiModel):
    id: int
    project_id: int
    name: str
    description: Optional[str] = None
    priority: RequirementPriority
    type: RequirementType
    expected_completion_date: Optional[dt.datetime] = None
    status: RequirementStatus
    created_by: Optional[int] = None
    assigned_analyst: Optional[int] = None
    created_at: dt.datetime
    updated_at: dt.datetime
    attachments: List[AttachmentResponse] = Field(default_factory=list)
    task: Optional[RequirementTaskResponse] = None


class AssignedProjectResponse(ApiModel):
    """분석가에게 배정된 프로젝트와 요구사항 수."""

    id: int
    application_name: str
    status: ProjectStatus
    priority: Priority
    requirements_count: int
