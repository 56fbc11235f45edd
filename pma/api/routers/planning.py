"""Timeline, sprint and timeline requirement routes."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..deps import service_dependency
from ..schemas import planning as schemas
from ..schemas.common import ApiResponse, MessageResponse
from ..services.planning import SprintService, TimelineRequirementService, TimelineService
from .common import deleted, ok, ok_list, ok_page

__all__ = ["timelines_router", "sprints_router", "timeline_requirements_router"]

timelines_router = APIRouter(prefix="/api/timelines", tags=["timelines"])
sprints_router = APIRouter(prefix="/api/sprints", tags=["sprints"])
timeline_requirements_router = APIRouter(
    prefix="/api/timeline-requirements", tags=["timeline-requirements"]
)

get_timeline_service = service_dependency(TimelineService)
get_sprint_service = service_dependency(SprintService)
get_timeline_requirement_service = service_dependency(TimelineRequirementService)


# ============================================================================
# 타임라인
# ============================================================================


@timelines_router.get("", response_model=ApiResponse[List[schemas.TimelineResponse]])
def list_timelines(
    page: int = Query(1),
    limit: int = Query(20),
    service: TimelineService = Depends(get_timeline_service),
):
    return ok_page(schemas.TimelineResponse, service.list_timelines(page=page, limit=limit))


@timelines_router.get("/project/{project_id}", response_model=ApiResponse[List[schemas.TimelineResponse]])
def timelines_by_project(project_id: int, service: TimelineService = Depends(get_timeline_service)):
    return ok_list(schemas.TimelineResponse, service.by_project(project_id))


@timelines_router.get("/{timeline_id}", response_model=ApiResponse[schemas.TimelineResponse])
def get_timeline(timeline_id: int, service: TimelineService = Depends(get_timeline_service)):
    return ok(schemas.TimelineResponse, service.get(timeline_id))


@timelines_router.post(
    "", response_model=ApiResponse[schemas.TimelineResponse], status_code=status.HTTP_201_CREATED
)
def create_timeline(body: schemas.TimelineCreateRequest, service: TimelineService = Depends(get_timeline_service)):
    return ok(schemas.TimelineResponse, service.create(body), "Timeline created successfully")


@timelines_router.put("/{timeline_id}", response_model=ApiResponse[schemas.TimelineResponse])
def update_timeline(
    timeline_id: int,
    body: schemas.TimelineUpdateRequest,
    service: TimelineService = Depends(get_timeline_service),
):
    return ok(schemas.TimelineResponse, service.update(timeline_id, body))


@timelines_router.delete("/{timeline_id}", response_model=MessageResponse)
def delete_timeline(timeline_id: int, service: TimelineService = Depends(get_timeline_service)):
    service.delete(timeline_id)
    return deleted("Timeline")


# ============================================================================
# 스프린트
# ============================================================================


@sprints_router.get("", response_model=ApiResponse[List[schemas.SprintResponse]])
def list_sprints(
    page: int = Query(1),
    limit: int = Query(20),
    timeline_id: Optional[int] = Query(None, alias="timelineId"),
    service: SprintService = Depends(get_sprint_service),
):
    result = service.list_sprints(page=page, limit=limit, timeline_id=timeline_id)
    return ok_page(schemas.SprintResponse, result)


@sprints_router.get("/project/{project_id}", response_model=ApiResponse[List[schemas.SprintResponse]])
def sprints_by_project(project_id: int, service: SprintService = Depends(get_sprint_service)):
    return ok_list(schemas.SprintResponse, service.by_project(project_id))


@sprints_router.get("/{sprint_id}", response_model=ApiResponse[schemas.SprintResponse])
def get_sprint(sprint_id: int, service: SprintService = Depends(get_sprint_service)):
    return ok(schemas.SprintResponse, service.get(sprint_id))


@sprints_router.post(
    "", response_model=ApiResponse[schemas.SprintResponse], status_code=status.HTTP_201_CREATED
)
def create_sprint(body: schemas.SprintCreateRequest, service: SprintService = Depends(get_sprint_service)):
    return ok(schemas.SprintResponse, service.create(body), "Sprint created successfully")


@sprints_router.put("/{sprint_id}", response_model=ApiResponse[schemas.SprintResponse])
def update_sprint(
    sprint_id: int,
    body: schemas.SprintUpdateRequest,
    service: SprintService = Depends(get_sprint_service),
):
    return ok(schemas.SprintResponse, service.update(sprint_id, body))


@sprints_router.delete("/{sprint_id}", response_model=MessageResponse)
def delete_sprint(sprint_id: int, service: SprintService = Depends(get_sprint_service)):
    service.delete(sprint_id)
    return deleted("Sprint")


# ============================================================================
# 타임라인 요구사항
# ============================================================================


@timeline_requirements_router.get(
    "", response_model=ApiResponse[List[schemas.TimelineRequirementResponse]]
)
def list_timeline_requirements(service: TimelineRequirementService = Depends(get_timeline_requirement_service)):
    return ok_list(schemas.TimelineRequirementResponse, service.list_all())


@timeline_requirements_router.get(
    "/timeline/{timeline_id}", response_model=ApiResponse[List[schemas.TimelineRequirementResponse]]
)
def timeline_requirements_by_timeline(
    timeline_id: int,
    service: TimelineRequirementService = Depends(get_timeline_requirement_service),
):
    return ok_list(schemas.TimelineRequirementResponse, service.by_timeline(timeline_id))


@timeline_requirements_router.get(
    "/{requirement_id}", response_model=ApiResponse[schemas.TimelineRequirementResponse]
)
def get_timeline_requirement(
    requirement_id: int,
    service: TimelineRequirementService = Depends(get_timeline_requirement_service),
):
    return ok(schemas.TimelineRequirementResponse, service.get(requirement_id))


@timeline_requirements_router.post(
    "",
    response_model=ApiResponse[schemas.TimelineRequirementResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_timeline_requirement(
    body: schemas.TimelineRequirementCreateRequest,
    service: TimelineRequirementService = Depends(get_timeline_requirement_service),
):
    return ok(schemas.TimelineRequirementResponse, service.create(body))


@timeline_requirements_router.put(
    "/{requirement_id}", response_model=ApiResponse[schemas.TimelineRequirementResponse]
)
def update_timeline_requirement(
    requirement_id: int,
    body: schemas.TimelineRequirementUpdateRequest,
    service: TimelineRequirementService = Depends(get_timeline_requirement_service),
):
    return ok(schemas.TimelineRequirementResponse, service.update(requirement_id, body))


@timeline_requirements_router.delete("/{requirement_id}", response_model=MessageResponse)
def delete_timeline_requirement(
    requirement_id: int,
    service: TimelineRequirementService = Depends(get_timeline_requirement_service),
):
    service.delete(requirement_id)
    return deleted("Timeline requirement")
