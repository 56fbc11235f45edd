import datetime as dt

import pytest
from sqlalchemy.exc import NoResultFound

from pma.api.models import Sprint
from pma.api.schema.enums import TaskRoleType, TaskStatus
from pma.api.schemas import tasks as schemas
from pma.api.services.tasks import SubTaskService, TaskService

START = dt.datetime(2024, 3, 1, 9, 0)
END = dt.datetime(2024, 3, 5, 18, 0)


def _build_service(session, settings) -> TaskService:
    return TaskService(session, settings)


def _create(service: TaskService, name: str, **fields):
    return service.create(
        schemas.TaskCreateRequest(name=name, start_date=START, end_date=END, **fields)
    )


def _dev_qc_pair(service: TaskService):
    dev = _create(service, "Build", role_type=TaskRoleType.DEVELOPER)
    qc = _create(service, "Verify", role_type=TaskRoleType.QC, dep_task_ids=[dev.id])
    return dev, qc


def test_create_task_with_members_and_dependencies(session, settings):
    service = _build_service(session, settings)
    first = _create(service, "First", member_ids=[10, 11, 10])
    second = _create(service, "Second", dep_task_ids=[first.id])

    fetched = service.get(second.id)

    assert first.assignee_ids == [10, 11]
    assert fetched.dependency_ids == [first.id]
    assert fetched.status_id == TaskStatus.TODO


def test_create_task_validates_sprint_and_dependencies(session, settings):
    service = _build_service(session, settings)

    with pytest.raises(NoResultFound, match="Sprint not found"):
        _create(service, "Orphan", sprint_id=42)
    with pytest.raises(ValueError, match="Unknown dependency task ids"):
        _create(service, "Dangling", dep_task_ids=[999])


def test_update_rejects_self_dependency(session, settings):
    service = _build_service(session, settings)
    task = _create(service, "Loop")

    with pytest.raises(ValueError, match="cannot depend on itself"):
        service.update(task.id, schemas.TaskUpdateRequest(dep_task_ids=[task.id]))


def test_update_status_records_history_and_default_progress(session, settings):
    service = _build_service(session, settings)
    task = _create(service, "Solo")

    service.update_status(
        task.id, schemas.TaskStatusUpdateRequest(status_id=TaskStatus.IN_PROGRESS, comment="go"), changed_by=5
    )

    assert task.status_id == TaskStatus.IN_PROGRESS
    assert task.progress == 25
    history = service.history(task.id)
    assert len(history) == 1
    assert history[0].old_status == TaskStatus.TODO
    assert history[0].new_status == TaskStatus.IN_PROGRESS
    assert history[0].changed_by_prs_id == 5
    assert history[0].comment == "go"


def test_developer_in_review_moves_qc_to_in_review(session, settings):
    service = _build_service(session, settings)
    dev, qc = _dev_qc_pair(service)

    service.update_status(dev.id, schemas.TaskStatusUpdateRequest(status_id=TaskStatus.IN_REVIEW))

    assert qc.status_id == TaskStatus.IN_REVIEW
    assert qc.progress == 0
    assert "In Review" in service.history(qc.id)[0].comment


def test_developer_back_to_in_progress_blocks_qc(session, settings):
    service = _build_service(session, settings)
    dev, qc = _dev_qc_pair(service)
    service.update_status(dev.id, schemas.TaskStatusUpdateRequest(status_id=TaskStatus.IN_REVIEW))

    service.update_status(dev.id, schemas.TaskStatusUpdateRequest(status_id=TaskStatus.IN_PROGRESS))

    assert qc.status_id == TaskStatus.BLOCKED
    assert [entry.new_status for entry in service.history(qc.id)] == [
        TaskStatus.BLOCKED,
        TaskStatus.IN_REVIEW,
    ]


def test_qc_completed_completes_prerequisites(session, settings):
    service = _build_service(session, settings)
    dev, qc = _dev_qc_pair(service)

    service.update_status(qc.id, schemas.TaskStatusUpdateRequest(status_id=TaskStatus.COMPLETED))

    assert qc.progress == 100
    assert dev.status_id == TaskStatus.COMPLETED
    assert dev.progress == 100


def test_qc_rework_reopens_prerequisites(session, settings):
    service = _build_service(session, settings)
    dev, qc = _dev_qc_pair(service)

    service.update_status(qc.id, schemas.TaskStatusUpdateRequest(status_id=TaskStatus.REWORK))

    assert dev.status_id == TaskStatus.IN_PROGRESS
    assert dev.progress == 25


def test_status_change_through_update_also_cascades(session, settings):
    service = _build_service(session, settings)
    dev, qc = _dev_qc_pair(service)

    service.update(dev.id, schemas.TaskUpdateRequest(status_id=TaskStatus.IN_REVIEW), changed_by=9)

    assert qc.status_id == TaskStatus.IN_REVIEW
    assert service.history(dev.id)[0].changed_by_prs_id == 9


def test_tasks_without_role_do_not_cascade(session, settings):
    service = _build_service(session, settings)
    plain = _create(service, "Plain")
    follower = _create(service, "Follower", dep_task_ids=[plain.id])

    service.update_status(plain.id, schemas.TaskStatusUpdateRequest(status_id=TaskStatus.IN_REVIEW))

    assert follower.status_id == TaskStatus.TODO
    assert service.history(follower.id) == []


def test_move_shifts_both_dates(session, settings):
    service = _build_service(session, settings)
    task = _create(service, "Shift")

    service.move(task.id, -2)

    assert task.start_date == START - dt.timedelta(days=2)
    assert task.end_date == END - dt.timedelta(days=2)
    with pytest.raises(ValueError):
        service.move(task.id, 0)


def test_move_to_sprint(session, settings):
    service = _build_service(session, settings)
    sprint = Sprint(name="Sprint 1", start_date=START, end_date=END)
    session.add(sprint)
    session.commit()
    task = _create(service, "Carry over")

    service.move_to_sprint(task.id, sprint.id)

    assert task.sprint_id == sprint.id
    with pytest.raises(ValueError, match="already in the target sprint"):
        service.move_to_sprint(task.id, sprint.id)
    with pytest.raises(NoResultFound):
        service.move_to_sprint(task.id, sprint.id + 100)


def test_adhoc_task_defaults(session, settings):
    service = _build_service(session, settings)

    task = service.create_adhoc(
        schemas.AdhocTaskRequest(name="Hotfix", start_date=START, end_date=END, assigned_members=[3, 4])
    )

    assert task.sprint_id is None
    assert task.status_id == TaskStatus.TODO
    assert task.assignee_ids == [3, 4]


def test_list_filters_by_assignee_and_search(session, settings):
    service = _build_service(session, settings)
    _create(service, "Alpha report", member_ids=[1])
    _create(service, "Beta report", member_ids=[2])
    _create(service, "Gamma", member_ids=[1])

    assert service.list_tasks(assignee_id=1).total == 2
    assert [task.name for task in service.search("report")] == ["Alpha report", "Beta report"]
    assert len(service.search("", limit=1)) == 1
    assert [task.name for task in service.by_assignee(2)] == ["Beta report"]


def test_delete_removes_incoming_dependency_links(session, settings):
    service = _build_service(session, settings)
    base = _create(service, "Base")
    follower = _create(service, "Follower", dep_task_ids=[base.id])

    service.delete(base.id)
    session.expire_all()

    assert service.get(follower.id).dependency_ids == []
    with pytest.raises(NoResultFound):
        service.get(base.id)


def test_subtask_requires_parent_task(session, settings):
    service = SubTaskService(session, settings)

    with pytest.raises(NoResultFound, match="Task not found"):
        service.create(schemas.SubTaskCreateRequest(task_id=1, name="Child"))

    parent = _create(_build_service(session, settings), "Parent")
    child = service.create(schemas.SubTaskCreateRequest(task_id=parent.id, name="Child", assignee_id=8))
    assert [subtask.id for subtask in service.by_assignee(8)] == [child.id]
