"""Notification, calendar, lookup and audit log routes."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..deps import service_dependency
from ..schema.enums import CalendarEventStatus, CalendarEventType
from ..schemas import activity as schemas
from ..schemas.common import ApiResponse, MessageResponse
from ..services.audit_logs import DEFAULT_RECENT_LIMIT, DEFAULT_RETENTION_DAYS, AuditLogService
from ..services.calendar import CalendarService
from ..services.lookups import LookupService
from ..services.notifications import NotificationService
from .common import coerce_enum, deleted, ok, ok_list, ok_page

__all__ = ["notifications_router", "calendar_router", "lookups_router", "auditlogs_router"]

notifications_router = APIRouter(prefix="/api/notifications", tags=["notifications"])
calendar_router = APIRouter(prefix="/api/calendar", tags=["calendar"])
lookups_router = APIRouter(prefix="/api/lookups", tags=["lookups"])
auditlogs_router = APIRouter(prefix="/api/auditlogs", tags=["auditlogs"])

get_notification_service = service_dependency(NotificationService)
get_calendar_service = service_dependency(CalendarService)
get_lookup_service = service_dependency(LookupService)
get_audit_service = service_dependency(AuditLogService)


# ============================================================================
# 알림
# ============================================================================


@notifications_router.get("", response_model=ApiResponse[List[schemas.NotificationResponse]])
def list_notifications(
    page: int = Query(1),
    limit: int = Query(20),
    user_id: Optional[int] = Query(None, alias="userId"),
    is_read: Optional[bool] = Query(None, alias="isRead"),
    service: NotificationService = Depends(get_notification_service),
):
    result = service.list_notifications(page=page, limit=limit, user_id=user_id, is_read=is_read)
    return ok_page(schemas.NotificationResponse, result)


@notifications_router.get("/user/{user_id}", response_model=ApiResponse[List[schemas.NotificationResponse]])
def notifications_for_user(user_id: int, service: NotificationService = Depends(get_notification_service)):
    return ok_list(schemas.NotificationResponse, service.for_user(user_id))


@notifications_router.get(
    "/user/{user_id}/unread", response_model=ApiResponse[List[schemas.NotificationResponse]]
)
def unread_notifications(user_id: int, service: NotificationService = Depends(get_notification_service)):
    return ok_list(schemas.NotificationResponse, service.for_user(user_id, unread_only=True))


@notifications_router.patch("/user/{user_id}/read-all", response_model=ApiResponse[int])
def mark_all_read(user_id: int, service: NotificationService = Depends(get_notification_service)):
    count = service.mark_all_read(user_id)
    return ApiResponse(data=count, message=f"{count} notification(s) marked as read")


@notifications_router.get("/{notification_id}", response_model=ApiResponse[schemas.NotificationResponse])
def get_notification(notification_id: int, service: NotificationService = Depends(get_notification_service)):
    return ok(schemas.NotificationResponse, service.get(notification_id))


@notifications_router.post(
    "",
    response_model=ApiResponse[schemas.NotificationResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_notification(
    body: schemas.NotificationCreateRequest,
    service: NotificationService = Depends(get_notification_service),
):
    return ok(schemas.NotificationResponse, service.create(body), "Notification created successfully")


@notifications_router.put("/{notification_id}", response_model=ApiResponse[schemas.NotificationResponse])
def update_notification(
    notification_id: int,
    body: schemas.NotificationUpdateRequest,
    service: NotificationService = Depends(get_notification_service),
):
    return ok(schemas.NotificationResponse, service.update(notification_id, body))


@notifications_router.patch(
    "/{notification_id}/read", response_model=ApiResponse[schemas.NotificationResponse]
)
def mark_read(notification_id: int, service: NotificationService = Depends(get_notification_service)):
    return ok(schemas.NotificationResponse, service.mark_read(notification_id), "Notification marked as read")


@notifications_router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(notification_id: int, service: NotificationService = Depends(get_notification_service)):
    service.delete(notification_id)
    return deleted("Notification")


# ============================================================================
# 캘린더
# ============================================================================


@calendar_router.get("/events", response_model=ApiResponse[List[schemas.CalendarEventResponse]])
@calendar_router.get("", response_model=ApiResponse[List[schemas.CalendarEventResponse]])
def list_events(
    page: int = Query(1),
    limit: int = Query(20),
    start_date: Optional[dt.datetime] = Query(None, alias="startDate"),
    end_date: Optional[dt.datetime] = Query(None, alias="endDate"),
    event_type: Optional[str] = Query(None, alias="type"),
    status_: Optional[str] = Query(None, alias="status"),
    service: CalendarService = Depends(get_calendar_service),
):
    result = service.list_events(
        page=page,
        limit=limit,
        start_date=start_date,
        end_date=end_date,
        event_type=coerce_enum(CalendarEventType, event_type),
        status=coerce_enum(CalendarEventStatus, status_),
    )
    return ok_page(schemas.CalendarEventResponse, result)


@calendar_router.get("/stats", response_model=ApiResponse[schemas.CalendarStatsResponse])
def calendar_stats(service: CalendarService = Depends(get_calendar_service)):
    return ApiResponse(data=service.stats())


@calendar_router.get(
    "/project/{project_id}", response_model=ApiResponse[List[schemas.CalendarEventResponse]]
)
def events_by_project(project_id: int, service: CalendarService = Depends(get_calendar_service)):
    return ok_list(schemas.CalendarEventResponse, service.by_project(project_id))


@calendar_router.get(
    "/creator/{creator_id}", response_model=ApiResponse[List[schemas.CalendarEventResponse]]
)
def events_by_creator(creator_id: int, service: CalendarService = Depends(get_calendar_service)):
    return ok_list(schemas.CalendarEventResponse, service.by_creator(creator_id))


@calendar_router.get("/{event_id}", response_model=ApiResponse[schemas.CalendarEventResponse])
def get_event(event_id: int, service: CalendarService = Depends(get_calendar_service)):
    return ok(schemas.CalendarEventResponse, service.get(event_id))


@calendar_router.post(
    "",
    response_model=ApiResponse[schemas.CalendarEventResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_event(
    body: schemas.CalendarEventCreateRequest,
    service: CalendarService = Depends(get_calendar_service),
):
    return ok(schemas.CalendarEventResponse, service.create(body), "Event created successfully")


@calendar_router.put("/{event_id}", response_model=ApiResponse[schemas.CalendarEventResponse])
def update_event(
    event_id: int,
    body: schemas.CalendarEventUpdateRequest,
    service: CalendarService = Depends(get_calendar_service),
):
    return ok(schemas.CalendarEventResponse, service.update(event_id, body))


@calendar_router.delete("/{event_id}", response_model=MessageResponse)
def delete_event(event_id: int, service: CalendarService = Depends(get_calendar_service)):
    service.delete(event_id)
    return deleted("Event")


# ============================================================================
# 코드 값
# ============================================================================


@lookups_router.get("", response_model=ApiResponse[List[schemas.LookupResponse]])
def list_lookups(
    code: Optional[str] = Query(None),
    service: LookupService = Depends(get_lookup_service),
):
    return ok_list(schemas.LookupResponse, service.list_lookups(code))


@lookups_router.get("/code/{code}", response_model=ApiResponse[List[schemas.LookupResponse]])
def lookups_by_code(code: str, service: LookupService = Depends(get_lookup_service)):
    return ok_list(schemas.LookupResponse, service.by_code(code))


@lookups_router.get("/{lookup_id}", response_model=ApiResponse[schemas.LookupResponse])
def get_lookup(lookup_id: int, service: LookupService = Depends(get_lookup_service)):
    return ok(schemas.LookupResponse, service.get(lookup_id))


@lookups_router.post(
    "", response_model=ApiResponse[schemas.LookupResponse], status_code=status.HTTP_201_CREATED
)
def create_lookup(body: schemas.LookupCreateRequest, service: LookupService = Depends(get_lookup_service)):
    return ok(schemas.LookupResponse, service.create(body), "Lookup created successfully")


@lookups_router.put("/{lookup_id}", response_model=ApiResponse[schemas.LookupResponse])
def update_lookup(
    lookup_id: int,
    body: schemas.LookupUpdateRequest,
    service: LookupService = Depends(get_lookup_service),
):
    return ok(schemas.LookupResponse, service.update(lookup_id, body))


@lookups_router.delete("/{lookup_id}", response_model=MessageResponse)
def delete_lookup(lookup_id: int, service: LookupService = Depends(get_lookup_service)):
    service.delete(lookup_id)
    return deleted("Lookup")


# ============================================================================
# 변경 이력
# ============================================================================


@auditlogs_router.get(
    "/entity/{entity_type}/{entity_id}", response_model=ApiResponse[List[schemas.ChangeGroupResponse]]
)
def entity_history(
    entity_type: str,
    entity_id: int,
    service: AuditLogService = Depends(get_audit_service),
):
    return ok_list(schemas.ChangeGroupResponse, service.for_entity(entity_type, entity_id))


@auditlogs_router.get(
    "/entity/{entity_type}/{entity_id}/range",
    response_model=ApiResponse[List[schemas.ChangeGroupResponse]],
)
def entity_history_in_range(
    entity_type: str,
    entity_id: int,
    start_date: dt.datetime = Query(..., alias="startDate"),
    end_date: dt.datetime = Query(..., alias="endDate"),
    service: AuditLogService = Depends(get_audit_service),
):
    groups = service.for_entity_in_range(entity_type, entity_id, start_date, end_date)
    return ok_list(schemas.ChangeGroupResponse, groups)


@auditlogs_router.get("/recent", response_model=ApiResponse[List[schemas.ChangeGroupResponse]])
def recent_changes(
    limit: int = Query(DEFAULT_RECENT_LIMIT),
    service: AuditLogService = Depends(get_audit_service),
):
    return ok_list(schemas.ChangeGroupResponse, service.recent(limit))


@auditlogs_router.get("/user/{username}", response_model=ApiResponse[List[schemas.ChangeGroupResponse]])
def changes_by_user(username: str, service: AuditLogService = Depends(get_audit_service)):
    return ok_list(schemas.ChangeGroupResponse, service.by_user(username))


@auditlogs_router.delete("/cleanup", response_model=ApiResponse[schemas.CleanupResponse])
def cleanup_changes(
    older_than_days: int = Query(DEFAULT_RETENTION_DAYS, alias="olderThanDays"),
    service: AuditLogService = Depends(get_audit_service),
):
    days = service.retention_days(older_than_days)
    count = service.cleanup(days)
    return ApiResponse(
        data=schemas.CleanupResponse(deleted_count=count, older_than_days=days),
        message=f"Deleted {count} audit log(s) older than {days} days",
    )
