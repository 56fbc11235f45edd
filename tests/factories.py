"""Row builders used by the service and API tests."""

from __future__ import annotations

import datetime as dt

from pma.api.models import Department, Employee, Task, TaskAssignment, Team, User
from pma.api.schema.enums import Priority, TaskStatus


def add_user(session, user_name: str, *, prs_id=None, department_id=None, full_name=None, **extra) -> User:
    user = User(
        user_name=user_name,
        prs_id=prs_id,
        department_id=department_id,
        full_name=full_name or user_name.title(),
        **extra,
    )
    session.add(user)
    session.commit()
    return user


def add_department(session, name: str, department_id=None) -> Department:
    department = Department(id=department_id, name=name)
    session.add(department)
    session.commit()
    return department


def add_member(session, department_id: int, prs_id: int, full_name: str, **employee) -> Team:
    if session.get(Employee, prs_id) is None:
        session.add(Employee(id=prs_id, full_name=full_name, **employee))
    member = Team(department_id=department_id, prs_id=prs_id, full_name=full_name)
    session.add(member)
    session.commit()
    return member


def add_task(
    session,
    name: str,
    start: dt.datetime,
    end: dt.datetime,
    *,
    assignees=(),
    status: TaskStatus = TaskStatus.TODO,
    priority: Priority = Priority.MEDIUM,
    **extra,
) -> Task:
    task = Task(
        name=name,
        start_date=start,
        end_date=end,
        status_id=status,
        priority_id=priority,
        **extra,
    )
    task.assignments = [TaskAssignment(prs_id=prs_id) for prs_id in assignees]
    session.add(task)
    session.commit()
    return task
