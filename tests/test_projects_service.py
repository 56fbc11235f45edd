import datetime as dt
import io
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.exc import NoResultFound

from factories import add_user
from pma.api.models import Notification
from pma.api.schema.enums import Priority, ProjectStatus, RequirementTaskStatus
from pma.api.schemas import projects as schemas
from pma.api.services.projects import REVIEW_NOTIFICATION_TITLE, ProjectService, RequirementService


def _build_services(session, settings):
    return ProjectService(session, settings), RequirementService(session, settings)


def test_create_project_sets_defaults(session, settings):
    projects, _ = _build_services(session, settings)

    project = projects.create(schemas.ProjectCreateRequest(application_name="Payroll"))

    assert project.id is not None
    assert project.status == ProjectStatus.NEW
    assert project.priority == Priority.MEDIUM
    assert project.progress == 0
    assert project.analyst_ids == []


def test_create_project_rejects_inverted_dates(session, settings):
    projects, _ = _build_services(session, settings)

    with pytest.raises(ValueError):
        projects.create(
            schemas.ProjectCreateRequest(
                application_name="Backwards",
                start_date=dt.datetime(2024, 5, 1),
                expected_completion_date=dt.datetime(2024, 4, 1),
            )
        )


def test_create_project_rejects_unknown_analysts(session, settings):
    projects, _ = _build_services(session, settings)

    with pytest.raises(ValueError, match="Unknown analyst ids"):
        projects.create(schemas.ProjectCreateRequest(application_name="Ghost", analyst_ids=[404]))


def test_update_replaces_analysts_only_when_sent(session, settings):
    projects, _ = _build_services(session, settings)
    first = add_user(session, "first")
    second = add_user(session, "second")
    project = projects.create(
        schemas.ProjectCreateRequest(application_name="Portal", analyst_ids=[first.id, first.id])
    )
    assert project.analyst_ids == [first.id]

    projects.update(project.id, schemas.ProjectUpdateRequest(description="Renamed"))
    assert project.analyst_ids == [first.id]

    projects.update(project.id, schemas.ProjectUpdateRequest(analyst_ids=[second.id]))
    assert project.analyst_ids == [second.id]


def test_list_projects_filters_and_pages(session, settings):
    projects, _ = _build_services(session, settings)
    for index in range(5):
        projects.create(
            schemas.ProjectCreateRequest(
                application_name=f"App {index}",
                priority=Priority.HIGH if index % 2 else Priority.LOW,
            )
        )

    page = projects.list_projects(page=1, limit=2, priority=Priority.LOW)
    assert page.total == 3
    assert len(page.items) == 2

    searched = projects.list_projects(search="app 3")
    assert [project.application_name for project in searched.items] == ["App 3"]

    with pytest.raises(ValueError):
        projects.list_projects(page=0)


def test_search_requires_query(session, settings):
    projects, _ = _build_services(session, settings)

    with pytest.raises(ValueError):
        projects.search_projects("   ")


def test_stats_counts_every_status(session, settings):
    projects, _ = _build_services(session, settings)
    projects.create(schemas.ProjectCreateRequest(application_name="A"))
    projects.create(schemas.ProjectCreateRequest(application_name="B", status=ProjectStatus.DELAYED))
    projects.create(schemas.ProjectCreateRequest(application_name="C", status=ProjectStatus.DELAYED))

    stats = projects.stats()

    assert stats.total == 3
    assert stats.new == 1
    assert stats.delayed == 2
    assert stats.production == 0


def test_send_for_review_notifies_analysts_and_owner_once(session, settings):
    projects, _ = _build_services(session, settings)
    analyst = add_user(session, "analyst")
    owner = add_user(session, "owner")
    project = projects.create(
        schemas.ProjectCreateRequest(
            application_name="Review me",
            analyst_ids=[analyst.id, owner.id],
            project_owner_id=owner.id,
        )
    )

    reviewed = projects.send_for_review(project.id)

    assert reviewed.status == ProjectStatus.UNDER_STUDY
    notifications = session.scalars(select(Notification).order_by(Notification.user_id)).all()
    assert [n.user_id for n in notifications] == sorted([analyst.id, owner.id])
    assert all(n.title == REVIEW_NOTIFICATION_TITLE for n in notifications)
    assert all(n.related_entity_id == project.id for n in notifications)


def test_send_for_review_missing_project(session, settings):
    projects, _ = _build_services(session, settings)

    with pytest.raises(NoResultFound):
        projects.send_for_review(999)


def test_requirement_needs_existing_project(session, settings):
    _, requirements = _build_services(session, settings)

    with pytest.raises(NoResultFound):
        requirements.create(schemas.RequirementCreateRequest(project_id=1, name="Login"))


def test_assigned_projects_counts_requirements(session, settings):
    projects, requirements = _build_services(session, settings)
    analyst = add_user(session, "analyst")
    project = projects.create(
        schemas.ProjectCreateRequest(application_name="Mine", analyst_ids=[analyst.id])
    )
    projects.create(schemas.ProjectCreateRequest(application_name="Not mine"))
    requirements.create(schemas.RequirementCreateRequest(project_id=project.id, name="R1"))
    requirements.create(schemas.RequirementCreateRequest(project_id=project.id, name="R2"))

    assigned = requirements.assigned_projects(analyst.id)

    assert len(assigned) == 1
    assert assigned[0].id == project.id
    assert assigned[0].requirements_count == 2


def test_attachment_lifecycle(session, settings):
    projects, requirements = _build_services(session, settings)
    project = projects.create(schemas.ProjectCreateRequest(application_name="Docs"))
    requirement = requirements.create(
        schemas.RequirementCreateRequest(project_id=project.id, name="Data sheet")
    )

    attachment = requirements.add_attachment(
        requirement.id,
        original_name="../notes.txt",
        content_type="text/plain",
        stream=io.BytesIO(b"hello world"),
    )

    stored = Path(attachment.file_path)
    assert attachment.original_name == "notes.txt"
    assert attachment.file_size == 11
    assert stored.read_bytes() == b"hello world"
    assert stored.parent == Path(settings.upload_dir) / "requirements" / str(requirement.id)
    assert [a.id for a in requirements.list_attachments(requirement.id)] == [attachment.id]

    with pytest.raises(NoResultFound):
        requirements.delete_attachment(requirement.id + 1, attachment.id)

    requirements.delete_attachment(requirement.id, attachment.id)
    assert not stored.exists()


def test_set_task_creates_then_updates_pairing(session, settings):
    projects, requirements = _build_services(session, settings)
    developer = add_user(session, "dev")
    qc = add_user(session, "qc")
    project = projects.create(schemas.ProjectCreateRequest(application_name="Pair"))
    requirement = requirements.create(
        schemas.RequirementCreateRequest(project_id=project.id, name="Export")
    )

    task = requirements.set_task(
        requirement.id,
        schemas.RequirementTaskRequest(developer_id=developer.id, qc_id=qc.id),
        created_by=77,
    )
    again = requirements.set_task(
        requirement.id,
        schemas.RequirementTaskRequest(
            developer_id=developer.id, status=RequirementTaskStatus.TESTING
        ),
    )

    assert again.id == task.id
    assert again.qc_id is None
    assert again.status == RequirementTaskStatus.TESTING
    assert again.created_by == 77

    with pytest.raises(ValueError, match="Unknown developer id"):
        requirements.set_task(requirement.id, schemas.RequirementTaskRequest(developer_id=999))
