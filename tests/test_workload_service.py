import datetime as dt

import pytest
from sqlalchemy.exc import NoResultFound

from factories import add_department, add_member, add_task, add_user
from pma.api.models import Project, ProjectAnalyst
from pma.api.schema.enums import ProjectStatus, TaskStatus
from pma.api.workload import WorkloadService

NOW = dt.datetime(2024, 6, 10, 12, 0)
DAY = dt.timedelta(days=1)


def _build_service(session, settings) -> WorkloadService:
    return WorkloadService(session, settings, now=NOW)


def test_designer_workload_lists_design_department_users(session, settings):
    add_department(session, "Design", department_id=settings.design_department_id)
    add_department(session, "Other", department_id=99)
    add_user(session, "busy", prs_id=100, department_id=settings.design_department_id, full_name="Busy Designer")
    add_user(session, "idle", prs_id=101, department_id=settings.design_department_id, full_name="Idle Designer")
    add_user(session, "outsider", prs_id=102, department_id=99)
    add_task(session, "Mockups", NOW, NOW + 5 * DAY, assignees=[100], estimated_hours=150)

    listing = _build_service(session, settings).designer_workload(sort_by="workload", sort_order="desc")

    assert [member.name for member in listing.members] == ["Busy Designer", "Idle Designer"]
    assert listing.members[0].status == "Busy"
    assert listing.members[0].current_tasks_count == 1
    assert listing.pagination.total_items == 2
    assert listing.pagination.total_pages == 1

    filtered = _build_service(session, settings).designer_workload(status_filter="available")
    assert [member.prs_id for member in filtered.members] == [101]


def test_designers_without_personnel_id_carry_no_tasks(session, settings):
    add_department(session, "Design", department_id=settings.design_department_id)
    add_user(session, "first", department_id=settings.design_department_id, full_name="First Newcomer")
    add_user(session, "second", department_id=settings.design_department_id, full_name="Second Newcomer")
    add_task(session, "Stray", NOW, NOW + DAY, assignees=[0], estimated_hours=150)

    listing = _build_service(session, settings).designer_workload(sort_by="name", sort_order="asc")

    assert [member.name for member in listing.members] == ["First Newcomer", "Second Newcomer"]
    assert [member.prs_id for member in listing.members] == [None, None]
    assert [member.current_tasks_count for member in listing.members] == [0, 0]
    assert all(member.status == "Available" for member in listing.members)


def test_qc_metrics(session, settings):
    add_department(session, "QC", department_id=settings.qc_department_id)
    add_member(session, settings.qc_department_id, 200, "Tester One")
    add_member(session, settings.qc_department_id, 201, "Tester Two")
    add_task(session, "Check", NOW - 3 * DAY, NOW - DAY, assignees=[200], status=TaskStatus.COMPLETED)
    add_task(session, "Recheck", NOW, NOW + 2 * DAY, assignees=[200])

    metrics = _build_service(session, settings).qc_metrics()

    assert metrics.total_members == 2
    assert metrics.active_members == 1
    assert metrics.total_tasks_completed == 1
    assert metrics.total_tasks_in_progress == 1
    assert metrics.average_efficiency == 25.0
    assert metrics.average_task_completion_time == 2.0


def test_developer_workload_defaults_to_current_user_department(session, settings):
    backend = add_department(session, "Backend")
    frontend = add_department(session, "Frontend")
    add_member(session, backend.id, 300, "Back Dev")
    add_member(session, frontend.id, 301, "Front Dev")
    add_task(session, "API", NOW, NOW + 3 * DAY, assignees=[300], status=TaskStatus.IN_PROGRESS)
    viewer = add_user(session, "lead", department_id=frontend.id)
    service = _build_service(session, settings)

    mine = service.developer_workload(current_user=viewer)
    everyone = service.developer_workload()

    assert [dev.developer_name for dev in mine.developers] == ["Front Dev"]
    assert mine.developers[0].status == "available"
    assert [dev.prs_id for dev in everyone.developers] == [301, 300]
    assert everyone.developers[1].department == "Backend"
    assert everyone.pagination.has_next_page is False


def test_developer_performance(session, settings):
    department = add_department(session, "Backend")
    add_member(session, department.id, 400, "Perf Dev")
    add_task(session, "Done", NOW - 4 * DAY, NOW - 2 * DAY, assignees=[400], status=TaskStatus.COMPLETED)
    add_task(session, "Doing", NOW, NOW + DAY, assignees=[400], status=TaskStatus.IN_PROGRESS)
    service = _build_service(session, settings)

    performance = service.developer_performance(400)

    assert performance.total_tasks == 2
    assert performance.completed_tasks == 1
    assert performance.in_progress_tasks == 1
    assert performance.efficiency == 50.0
    assert performance.average_completion_time == 2.0
    assert len(performance.recent_tasks) == 2
    with pytest.raises(NoResultFound):
        service.developer_performance(401)


def test_team_performance_and_member_detail(session, settings):
    department = add_department(session, "Analysis")
    analyst = add_user(session, "analyst", prs_id=500, department_id=department.id, full_name="Ann Analyst")
    add_user(session, "spare", prs_id=501, department_id=department.id, full_name="Sam Spare")
    add_task(session, "Late", NOW - 5 * DAY, NOW - 2 * DAY, assignees=[500])
    add_task(session, "Long", NOW, NOW + 10 * DAY, assignees=[500], estimated_hours=12)
    project = Project(application_name="Active", status=ProjectStatus.UNDER_DEVELOPMENT)
    project.analyst_links = [ProjectAnalyst(analyst_id=analyst.id)]
    session.add(project)
    session.commit()
    service = _build_service(session, settings)

    page = service.team_performance(department_id=department.id, page=1, limit=10)
    rows = {row.full_name: row for row in page.items}

    assert page.total == 2
    assert rows["Ann Analyst"].busy_status == "Very Busy"
    assert rows["Ann Analyst"].metrics.tasks_overdue == 1
    assert rows["Ann Analyst"].metrics.projects_assigned == 1
    assert rows["Sam Spare"].busy_status == "Available"

    very_busy = service.team_performance(busy_status="Very Busy")
    assert [row.user_id for row in very_busy.items] == [analyst.id]

    detail = service.team_member(analyst.id)
    assert [task.task_name for task in detail.assigned_tasks] == ["Late", "Long"]
    assert detail.assigned_tasks[0].is_overdue is True
    assert detail.summary.total_projects == 1
    assert detail.summary.total_estimated_hours == 12
    assert detail.department == "Analysis"


def test_team_summary(session, settings):
    add_user(session, "one", prs_id=600)
    add_user(session, "two", prs_id=601)
    add_task(session, "Open", NOW - 3 * DAY, NOW - DAY, assignees=[600])
    add_task(session, "Future", NOW, NOW + 2 * DAY, assignees=[600])
    add_task(session, "Closed", NOW - 3 * DAY, NOW - DAY, assignees=[601], status=TaskStatus.COMPLETED)

    summary = _build_service(session, settings).team_summary()

    assert summary.total_team_members == 2
    assert summary.busy_members_count == 1
    assert summary.available_members_count == 1
    assert summary.total_active_tasks == 2
    assert summary.total_overdue_tasks == 1
    assert summary.average_tasks_per_member == 2.0
