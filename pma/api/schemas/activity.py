"""Notification, calendar, lookup and audit log schemas."""

from __future__ import annotations

import datetime as dt
from typing import Dict, List, Optional

from pydantic import Field

from ..schema.enums import (
    CalendarEventPriority,
    CalendarEventStatus,
    CalendarEventType,
    NotificationPriority,
    NotificationType,
)
from .common import ApiModel

__all__ = [
    "NotificationCreateRequest",
    "NotificationUpdateRequest",
    "NotificationResponse",
    "CalendarEventCreateRequest",
    "CalendarEventUpdateRequest",
    "CalendarEventResponse",
    "CalendarStatsResponse",
    "LookupCreateRequest",
    "LookupUpdateRequest",
    "LookupResponse",
    "ChangeItemResponse",
    "ChangeGroupResponse",
    "CleanupResponse",
]


# ============================================================================
# 알림
# ============================================================================


class NotificationCreateRequest(ApiModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.INFO
    priority: NotificationPriority = NotificationPriority.MEDIUM
    user_id: int
    related_entity_type: Optional[str] = Field(None, max_length=100)
    related_entity_id: Optional[int] = None


class NotificationUpdateRequest(ApiModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    message: Optional[str] = Field(None, min_length=1)
    type: Optional[NotificationType] = None
    priority: Optional[NotificationPriority] = None
    is_read: Optional[bool] = None


class NotificationResponse(ApiModel):
    id: int
    title: str
    message: str
    type: NotificationType
    priority: NotificationPriority
    user_id: int
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[int] = None
    is_read: bool
    read_at: Optional[dt.datetime] = None
    created_at: dt.datetime


# ============================================================================
# 캘린더
# ============================================================================


class CalendarEventCreateRequest(ApiModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: dt.datetime
    end_date: dt.datetime
    type: CalendarEventType = CalendarEventType.MEETING
    status: CalendarEventStatus = CalendarEventStatus.UPCOMING
    priority: CalendarEventPriority = CalendarEventPriority.MEDIUM
    project_id: Optional[int] = None
    requirement_id: Optional[int] = None
    sprint_id: Optional[int] = None
    location: Optional[str] = Field(None, max_length=200)
    is_all_day: bool = False
    created_by: Optional[int] = None
    attendee_ids: List[int] = Field(default_factory=list)


class CalendarEventUpdateRequest(ApiModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[dt.datetime] = None
    end_date: Optional[dt.datetime] = None
    type: Optional[CalendarEventType] = None
    status: Optional[CalendarEventStatus] = None
    priority: Optional[CalendarEventPriority] = None
    project_id: Optional[int] = None
    requirement_id: Optional[int] = None
    sprint_id: Optional[int] = None
    location: Optional[str] = Field(None, max_length=200)
    is_all_day: Optional[bool] = None
    attendee_ids: Optional[List[int]] = None


class CalendarEventResponse(ApiModel):
    id: int
    title: str
    description: Optional[str] = None
    start_date: dt.datetime
    end_date: dt.datetime
    type: CalendarEventType
    status: CalendarEventStatus
    priority: CalendarEventPriority
    project_id: Optional[int] = None
    requirement_id: Optional[int] = None
    sprint_id: Optional[int] = None
    location: Optional[str] = None
    is_all_day: bool
    created_by: Optional[int] = None
    attendee_ids: List[int] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: dt.datetime


class CalendarStatsResponse(ApiModel):
    total_events: int = 0
    upcoming_events: int = 0
    overdue_events: int = 0
    completed_this_week: int = 0
    critical_deadlines: int = 0
    events_by_type: Dict[str, int] = Field(default_factory=dict)
    events_by_status: Dict[str, int] = Field(default_factory=dict)


# ============================================================================
# 코드 값
# ============================================================================


class LookupCreateRequest(ApiModel):
    code: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    name_ar: Optional[str] = Field(None, max_length=200)
    value: int = 0
    is_active: bool = True


class LookupUpdateRequest(ApiModel):
    code: Optional[str] = Field(None, min_length=1, max_length=100)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    name_ar: Optional[str] = Field(None, max_length=200)
    value: Optional[int] = None
    is_active: Optional[bool] = None


class LookupResponse(ApiModel):
    id: int
    code: str
    name: str
    name_ar: Optional[str] = None
    value: int
    is_active: bool


# ============================================================================
# 변경 이력
# ============================================================================


class ChangeItemResponse(ApiModel):
    id: int
    field_name: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None


class ChangeGroupResponse(ApiModel):
    id: int
    entity_type: str
    entity_id: int
    changed_by: str
    changed_at: dt.datetime
    items: List[ChangeItemResponse] = Field(default_factory=list)


class CleanupResponse(ApiModel):
    deleted_count: int
    older_than_days: int
