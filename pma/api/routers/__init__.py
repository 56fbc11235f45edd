"""HTTP routers for the PMA API, one per resource."""

from __future__ import annotations

from fastapi import APIRouter

from . import activity, ai, organization, planning, projects, tasks, workload

__all__ = ["API_ROUTERS"]

API_ROUTERS: tuple[APIRouter, ...] = (
    projects.router,
    projects.requirements_router,
    tasks.router,
    tasks.subtasks_router,
    planning.timelines_router,
    planning.sprints_router,
    planning.timeline_requirements_router,
    organization.departments_router,
    organization.units_router,
    organization.users_router,
    organization.employees_router,
    organization.roles_router,
    organization.actions_router,
    activity.notifications_router,
    activity.calendar_router,
    activity.lookups_router,
    activity.auditlogs_router,
    workload.designers_router,
    workload.qc_router,
    workload.developer_router,
    workload.team_router,
    ai.router,
)
