"""Department, unit, user, employee, role and action schemas."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import Field

from .common import ApiModel

__all__ = [
    "DepartmentCreateRequest",
    "DepartmentUpdateRequest",
    "DepartmentResponse",
    "TeamMemberCreateRequest",
    "TeamMemberUpdateRequest",
    "TeamMemberResponse",
    "UnitCreateRequest",
    "UnitUpdateRequest",
    "UnitResponse",
    "UnitTreeNode",
    "UserCreateRequest",
    "UserUpdateRequest",
    "UserResponse",
    "UserRolesRequest",
    "EmployeeResponse",
    "RoleCreateRequest",
    "RoleUpdateRequest",
    "RoleResponse",
    "RoleActionsRequest",
    "ActionCreateRequest",
    "ActionResponse",
]


# ============================================================================
# 부서
# ============================================================================


class DepartmentCreateRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    is_active: bool = True


class DepartmentUpdateRequest(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class DepartmentResponse(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    is_active: bool
    created_at: dt.datetime
    updated_at: dt.datetime


class TeamMemberCreateRequest(ApiModel):
    prs_id: int
    user_name: Optional[str] = Field(None, max_length=100)
    full_name: Optional[str] = Field(None, max_length=200)


class TeamMemberUpdateRequest(ApiModel):
    user_name: Optional[str] = Field(None, max_length=100)
    full_name: Optional[str] = Field(None, max_length=200)
    is_active: Optional[bool] = None


class TeamMemberResponse(ApiModel):
    id: int
    prs_id: int
    department_id: int
    join_date: dt.datetime
    user_name: Optional[str] = None
    full_name: Optional[str] = None
    is_active: bool
    created_by: Optional[str] = None


# ============================================================================
# 조직 단위
# ============================================================================


class UnitCreateRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: bool = True


class UnitUpdateRequest(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: Optional[bool] = None


class UnitResponse(ApiModel):
    id: int
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[int] = None
    level: int
    path: Optional[str] = None
    is_active: bool
    created_at: dt.datetime
    updated_at: dt.datetime


class UnitTreeNode(ApiModel):
    id: int
    name: str
    code: Optional[str] = None
    level: int
    path: Optional[str] = None
    is_active: bool
    children: List["UnitTreeNode"] = Field(default_factory=list)


# ============================================================================
# 사용자 / 직원
# ============================================================================


class UserCreateRequest(ApiModel):
    user_name: str = Field(..., min_length=1, max_length=100)
    prs_id: Optional[int] = None
    full_name: Optional[str] = Field(None, max_length=200)
    military_number: Optional[str] = Field(None, max_length=50)
    grade_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    department_id: Optional[int] = None
    is_active: bool = True
    is_visible: bool = True
    role_ids: List[int] = Field(default_factory=list)


class UserUpdateRequest(ApiModel):
    user_name: Optional[str] = Field(None, min_length=1, max_length=100)
    prs_id: Optional[int] = None
    full_name: Optional[str] = Field(None, max_length=200)
    military_number: Optional[str] = Field(None, max_length=50)
    grade_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    department_id: Optional[int] = None
    is_active: Optional[bool] = None
    is_visible: Optional[bool] = None
    role_ids: Optional[List[int]] = None


class UserResponse(ApiModel):
    id: int
    user_name: str
    prs_id: Optional[int] = None
    full_name: Optional[str] = None
    military_number: Optional[str] = None
    grade_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    department_id: Optional[int] = None
    is_active: bool
    is_visible: bool
    role_ids: List[int] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: dt.datetime


class UserRolesRequest(ApiModel):
    role_ids: List[int]


class EmployeeResponse(ApiModel):
    id: int
    user_name: Optional[str] = None
    full_name: str
    military_number: Optional[str] = None
    grade_name: Optional[str] = None
    status_id: int


# ============================================================================
# 역할 / 권한
# ============================================================================


class RoleCreateRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: bool = True
    role_order: int = 0
    action_ids: List[int] = Field(default_factory=list)


class RoleUpdateRequest(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    role_order: Optional[int] = None
    action_ids: Optional[List[int]] = None


class RoleResponse(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    is_active: bool
    role_order: int
    action_ids: List[int] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: dt.datetime


class RoleActionsRequest(ApiModel):
    action_ids: List[int]


class ActionCreateRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    is_active: bool = True


class ActionResponse(ApiModel):
    id: int
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
