import datetime as dt

import pytest
from sqlalchemy.exc import NoResultFound

from factories import add_user
from pma.api.models import ChangeGroup, ChangeItem, Project, utcnow
from pma.api.schema.enums import (
    CalendarEventPriority,
    CalendarEventStatus,
    CalendarEventType,
)
from pma.api.schemas import activity as schemas
from pma.api.schemas import planning as planning_schemas
from pma.api.schemas import projects as project_schemas
from pma.api.services.audit_logs import AuditLogService
from pma.api.services.calendar import CalendarService
from pma.api.services.lookups import LookupService
from pma.api.services.notifications import NotificationService
from pma.api.services.planning import TimelineRequirementService, TimelineService
from pma.api.services.projects import ProjectService

# ============================================================================
# 알림
# ============================================================================


def test_notification_requires_known_user(session, settings):
    service = NotificationService(session, settings)

    with pytest.raises(ValueError, match="Unknown user id"):
        service.create(schemas.NotificationCreateRequest(title="Hi", message="There", user_id=5))


def test_notification_read_state(session, settings):
    service = NotificationService(session, settings)
    user = add_user(session, "reader")
    first = service.create(schemas.NotificationCreateRequest(title="One", message="m", user_id=user.id))
    service.create(schemas.NotificationCreateRequest(title="Two", message="m", user_id=user.id))
    service.create(schemas.NotificationCreateRequest(title="Three", message="m", user_id=user.id))

    service.mark_read(first.id)
    assert first.is_read is True
    assert first.read_at is not None
    assert len(service.for_user(user.id, unread_only=True)) == 2

    assert service.mark_all_read(user.id) == 2
    assert service.for_user(user.id, unread_only=True) == []

    service.update(first.id, schemas.NotificationUpdateRequest(is_read=False))
    assert first.read_at is None
    assert service.list_notifications(user_id=user.id, is_read=False).total == 1


# ============================================================================
# 캘린더
# ============================================================================


def _event(service: CalendarService, title: str, start: dt.datetime, end: dt.datetime, **fields):
    return service.create(
        schemas.CalendarEventCreateRequest(title=title, start_date=start, end_date=end, **fields)
    )


def test_calendar_stats(session, settings):
    service = CalendarService(session, settings)
    now = utcnow()
    day = dt.timedelta(days=1)
    _event(service, "Kickoff", now + 2 * day, now + 2 * day, type=CalendarEventType.MEETING)
    _event(
        service,
        "Late milestone",
        now - 3 * day,
        now - day,
        type=CalendarEventType.MILESTONE,
        status=CalendarEventStatus.IN_PROGRESS,
    )
    _event(
        service,
        "Shipped",
        now - 4 * day,
        now - 2 * day,
        type=CalendarEventType.PROJECT,
        status=CalendarEventStatus.COMPLETED,
    )
    _event(
        service,
        "Go live",
        now + 3 * day,
        now + 3 * day,
        type=CalendarEventType.DEADLINE,
        priority=CalendarEventPriority.CRITICAL,
    )

    stats = service.stats(now)

    assert stats.total_events == 4
    assert stats.upcoming_events == 2
    assert stats.overdue_events == 1
    assert stats.completed_this_week == 1
    assert stats.critical_deadlines == 1
    assert stats.events_by_type == {"meeting": 1, "milestone": 1, "project": 1, "deadline": 1}
    assert stats.events_by_status == {"upcoming": 2, "in-progress": 1, "completed": 1}


def test_calendar_listing_uses_overlap_window(session, settings):
    service = CalendarService(session, settings)
    _event(service, "March", dt.datetime(2024, 3, 1), dt.datetime(2024, 3, 31), attendee_ids=[1, 2, 1])
    _event(service, "May", dt.datetime(2024, 5, 1), dt.datetime(2024, 5, 2))

    page = service.list_events(start_date=dt.datetime(2024, 3, 15), end_date=dt.datetime(2024, 4, 15))

    assert [event.title for event in page.items] == ["March"]
    assert page.items[0].attendee_ids == [1, 2]
    with pytest.raises(ValueError):
        service.list_events(start_date=dt.datetime(2024, 5, 1), end_date=dt.datetime(2024, 4, 1))


def test_calendar_event_dates_are_validated(session, settings):
    service = CalendarService(session, settings)

    with pytest.raises(ValueError):
        _event(service, "Backwards", dt.datetime(2024, 3, 2), dt.datetime(2024, 3, 1))


# ============================================================================
# 코드 값 / 계획
# ============================================================================


def test_lookups_by_code_skip_inactive(session, settings):
    service = LookupService(session, settings)
    service.create(schemas.LookupCreateRequest(code="grade", name="Senior", value=2))
    service.create(schemas.LookupCreateRequest(code="grade", name="Junior", value=1))
    service.create(schemas.LookupCreateRequest(code="grade", name="Retired", value=3, is_active=False))
    service.create(schemas.LookupCreateRequest(code="other", name="Other"))

    assert [lookup.name for lookup in service.by_code("grade")] == ["Junior", "Senior"]
    assert len(service.list_lookups("grade")) == 3
    assert len(service.list_lookups()) == 4


def test_timeline_requirement_duration_and_assignees(session, settings):
    project = Project(application_name="Plan")
    session.add(project)
    session.commit()
    timelines = TimelineService(session, settings)
    requirements = TimelineRequirementService(session, settings)

    with pytest.raises(NoResultFound):
        timelines.create(
            planning_schemas.TimelineCreateRequest(
                project_id=999, name="Nope", start_date=dt.datetime(2024, 1, 1), end_date=dt.datetime(2024, 2, 1)
            )
        )

    timeline = timelines.create(
        planning_schemas.TimelineCreateRequest(
            project_id=project.id, name="Q1", start_date=dt.datetime(2024, 1, 1), end_date=dt.datetime(2024, 3, 31)
        )
    )
    block = requirements.create(
        planning_schemas.TimelineRequirementCreateRequest(
            timeline_id=timeline.id,
            name="Design",
            start_date=dt.datetime(2024, 1, 1),
            end_date=dt.datetime(2024, 1, 11),
            assignee_ids=[4, 5],
        )
    )
    assert block.duration == 10
    assert block.assignee_ids == [4, 5]

    requirements.update(
        block.id, planning_schemas.TimelineRequirementUpdateRequest(end_date=dt.datetime(2024, 1, 21))
    )
    assert block.duration == 20
    assert [item.id for item in requirements.by_timeline(timeline.id)] == [block.id]


# ============================================================================
# 변경 이력
# ============================================================================


def test_changes_are_captured_per_entity(session, settings):
    projects = ProjectService(session, settings)
    audit = AuditLogService(session, settings)
    project = projects.create(project_schemas.ProjectCreateRequest(application_name="Audited"))

    projects.update(project.id, project_schemas.ProjectUpdateRequest(application_name="Renamed"))

    groups = audit.for_entity("Project", project.id)
    assert len(groups) == 2
    assert all(group.changed_by == "tester" for group in groups)
    latest = {item.field_name: item for item in groups[0].items}
    assert latest["application_name"].old_value == "Audited"
    assert latest["application_name"].new_value == "Renamed"
    assert "updated_at" not in latest
    created = {item.field_name: item for item in groups[1].items}
    assert created["application_name"].old_value is None
    assert created["status"].new_value == "1"

    assert len(audit.by_user("tester")) >= 2
    assert audit.for_entity("Project", project.id + 1) == []


def test_changes_in_range_validate_window(session, settings):
    audit = AuditLogService(session, settings)

    with pytest.raises(ValueError):
        audit.for_entity_in_range("Project", 1, dt.datetime(2024, 2, 1), dt.datetime(2024, 1, 1))


def test_cleanup_removes_only_stale_groups(session, settings):
    audit = AuditLogService(session, settings)
    session.add_all(
        [
            ChangeGroup(
                entity_type="Project",
                entity_id=1,
                changed_by="old",
                changed_at=utcnow() - dt.timedelta(days=120),
                items=[ChangeItem(field_name="name", old_value="a", new_value="b")],
            ),
            ChangeGroup(entity_type="Project", entity_id=1, changed_by="new", changed_at=utcnow()),
        ]
    )
    session.commit()

    assert audit.cleanup(90) == 1
    assert [group.changed_by for group in audit.recent()] == ["new"]
    assert session.query(ChangeItem).count() == 0


def test_retention_days_out_of_range_use_default():
    assert AuditLogService.retention_days(0) == 90
    assert AuditLogService.retention_days(5000) == 90
    assert AuditLogService.retention_days(30) == 30
