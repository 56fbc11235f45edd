"""Deleting a parent row cleans up or detaches its children."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from pma.api import PmaSettings, create_app
from pma.api.database import init_engine
from pma.api.models import Notification

WINDOW = {"startDate": "2024-04-01T00:00:00", "endDate": "2024-04-15T00:00:00"}


def _create_client(**overrides) -> TestClient:
    settings = PmaSettings(database_url="sqlite+pysqlite:///:memory:", **overrides)
    return TestClient(create_app(settings))


def _post(client: TestClient, path: str, payload: dict) -> dict:
    response = client.post(path, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_sqlite_connections_enforce_foreign_keys(settings, session) -> None:
    engine = init_engine(settings)
    with engine.connect() as connection:
        assert connection.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
    engine.dispose()

    session.add(Notification(title="Lost", message="No owner", user_id=999))
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()


def test_deleting_sprint_detaches_its_tasks() -> None:
    client = _create_client()
    sprint = _post(client, "/api/sprints", {"name": "S1", **WINDOW})
    task = _post(client, "/api/tasks", {"name": "Plan", "sprintId": sprint["id"], **WINDOW})
    assert task["sprintId"] == sprint["id"]

    assert client.delete(f"/api/sprints/{sprint['id']}").status_code == 200

    fetched = client.get(f"/api/tasks/{task['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["data"]["sprintId"] is None


def test_deleting_project_removes_planning_rows() -> None:
    client = _create_client()
    project = _post(client, "/api/projects", {"applicationName": "Portal"})
    timeline = _post(client, "/api/timelines", {"projectId": project["id"], "name": "Q2", **WINDOW})
    _post(client, "/api/sprints", {"name": "S1", "projectId": project["id"], **WINDOW})
    event = _post(
        client,
        "/api/calendar",
        {
            "title": "Kick-off",
            "startDate": "2024-04-01T10:00:00",
            "endDate": "2024-04-01T11:00:00",
            "projectId": project["id"],
        },
    )

    assert client.delete(f"/api/projects/{project['id']}").status_code == 200

    assert client.get(f"/api/timelines/project/{project['id']}").json()["data"] == []
    assert client.get(f"/api/timelines/{timeline['id']}").status_code == 404
    assert client.get(f"/api/sprints/project/{project['id']}").json()["data"] == []
    detached = client.get(f"/api/calendar/{event['id']}").json()["data"]
    assert detached["projectId"] is None


def test_deleting_user_removes_notifications_and_analyst_links() -> None:
    client = _create_client()
    user = _post(client, "/api/users", {"userName": "analyst", "fullName": "An Alyst"})
    project = _post(client, "/api/projects", {"applicationName": "Portal", "analystIds": [user["id"]]})
    _post(client, "/api/notifications", {"title": "Hello", "message": "Welcome", "userId": user["id"]})

    assert client.delete(f"/api/users/{user['id']}").status_code == 200

    assert client.get(f"/api/notifications/user/{user['id']}").json()["data"] == []
    assert client.get("/api/notifications").json()["pagination"]["totalCount"] == 0
    assert client.get(f"/api/projects/{project['id']}").json()["data"]["analystIds"] == []


def test_deleting_requirement_removes_uploaded_files(tmp_path) -> None:
    client = _create_client(upload_dir=str(tmp_path))
    project = _post(client, "/api/projects", {"applicationName": "Portal"})
    requirement = _post(client, "/api/project-requirements", {"projectId": project["id"], "name": "Forms"})
    uploaded = client.post(
        f"/api/project-requirements/{requirement['id']}/attachments",
        files={"file": ("brief.pdf", b"%PDF-1.4", "application/pdf")},
    )
    assert uploaded.status_code == 201
    folder = tmp_path / "requirements" / str(requirement["id"])
    assert any(folder.iterdir())

    assert client.delete(f"/api/project-requirements/{requirement['id']}").status_code == 200

    assert not folder.exists()
    assert client.get(f"/api/project-requirements/{requirement['id']}").status_code == 404


def test_deleting_project_removes_requirement_uploads(tmp_path) -> None:
    client = _create_client(upload_dir=str(tmp_path))
    project = _post(client, "/api/projects", {"applicationName": "Portal"})
    requirement = _post(client, "/api/project-requirements", {"projectId": project["id"], "name": "Forms"})
    client.post(
        f"/api/project-requirements/{requirement['id']}/attachments",
        files={"file": ("notes.txt", b"notes", "text/plain")},
    )
    folder = tmp_path / "requirements" / str(requirement["id"])
    assert folder.exists()

    assert client.delete(f"/api/projects/{project['id']}").status_code == 200

    assert not folder.exists()
