"""Project and project requirement routes."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from ..deps import get_actor_prs_id, service_dependency
from ..schema.enums import Priority, ProjectStatus, RequirementPriority, RequirementStatus
from ..schemas import projects as schemas
from ..schemas.common import ApiResponse, MessageResponse
from ..services.projects import ProjectService, RequirementService
from .common import coerce_enum, deleted, ok, ok_list, ok_page

__all__ = ["router", "requirements_router"]

router = APIRouter(prefix="/api/projects", tags=["projects"])
requirements_router = APIRouter(prefix="/api/project-requirements", tags=["project-requirements"])

get_project_service = service_dependency(ProjectService)
get_requirement_service = service_dependency(RequirementService)


# ============================================================================
# 프로젝트
# ============================================================================


@router.get("", response_model=ApiResponse[List[schemas.ProjectResponse]])
def list_projects(
    page: int = Query(1),
    limit: int = Query(20),
    search: Optional[str] = Query(None),
    status_: Optional[int] = Query(None, alias="status"),
    priority: Optional[int] = Query(None),
    service: ProjectService = Depends(get_project_service),
):
    result = service.list_projects(
        page=page,
        limit=limit,
        search=search,
        status=coerce_enum(ProjectStatus, status_),
        priority=coerce_enum(Priority, priority),
    )
    return ok_page(schemas.ProjectResponse, result)


@router.get("/stats", response_model=ApiResponse[schemas.ProjectStatsResponse])
def project_stats(service: ProjectService = Depends(get_project_service)):
    return ApiResponse(data=service.stats())


@router.get("/search", response_model=ApiResponse[List[schemas.ProjectResponse]])
def search_projects(
    q: str = Query(""),
    status_: Optional[int] = Query(None, alias="status"),
    priority: Optional[int] = Query(None),
    service: ProjectService = Depends(get_project_service),
):
    projects = service.search_projects(
        q,
        status=coerce_enum(ProjectStatus, status_),
        priority=coerce_enum(Priority, priority),
    )
    return ok_list(schemas.ProjectResponse, projects)


@router.get("/{project_id}", response_model=ApiResponse[schemas.ProjectResponse])
def get_project(project_id: int, service: ProjectService = Depends(get_project_service)):
    return ok(schemas.ProjectResponse, service.get(project_id))


@router.post(
    "",
    response_model=ApiResponse[schemas.ProjectResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_project(
    body: schemas.ProjectCreateRequest,
    service: ProjectService = Depends(get_project_service),
):
    return ok(schemas.ProjectResponse, service.create(body), "Project created successfully")


@router.put("/{project_id}", response_model=ApiResponse[schemas.ProjectResponse])
def update_project(
    project_id: int,
    body: schemas.ProjectUpdateRequest,
    service: ProjectService = Depends(get_project_service),
):
    return ok(schemas.ProjectResponse, service.update(project_id, body), "Project updated successfully")


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(project_id: int, service: ProjectService = Depends(get_project_service)):
    service.delete(project_id)
    return deleted("Project")


@router.post("/{project_id}/send-for-review", response_model=ApiResponse[schemas.ProjectResponse])
def send_for_review(project_id: int, service: ProjectService = Depends(get_project_service)):
    """검토 요청: 상태를 UnderStudy로 바꾸고 분석가/소유자에게 알림."""
    project = service.send_for_review(project_id)
    return ok(schemas.ProjectResponse, project, "Project sent for review")


# ============================================================================
# 요구사항
# ============================================================================


@requirements_router.get("", response_model=ApiResponse[List[schemas.RequirementResponse]])
def list_requirements(
    page: int = Query(1),
    limit: int = Query(20),
    project_id: Optional[int] = Query(None, alias="projectId"),
    status_: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    service: RequirementService = Depends(get_requirement_service),
):
    result = service.list_requirements(
        page=page,
        limit=limit,
        project_id=project_id,
        status=coerce_enum(RequirementStatus, status_),
        priority=coerce_enum(RequirementPriority, priority),
        search=search,
    )
    return ok_page(schemas.RequirementResponse, result)


@requirements_router.get(
    "/assigned-projects", response_model=ApiResponse[List[schemas.AssignedProjectResponse]]
)
def assigned_projects(
    analyst_id: int = Query(..., alias="analystId"),
    service: RequirementService = Depends(get_requirement_service),
):
    return ApiResponse(data=service.assigned_projects(analyst_id))


@requirements_router.get(
    "/project/{project_id}", response_model=ApiResponse[List[schemas.RequirementResponse]]
)
def requirements_for_project(
    project_id: int, service: RequirementService = Depends(get_requirement_service)
):
    return ok_list(schemas.RequirementResponse, service.list_for_project(project_id))


@requirements_router.get("/{requirement_id}", response_model=ApiResponse[schemas.RequirementResponse])
def get_requirement(requirement_id: int, service: RequirementService = Depends(get_requirement_service)):
    return ok(schemas.RequirementResponse, service.get(requirement_id))


@requirements_router.post(
    "",
    response_model=ApiResponse[schemas.RequirementResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_requirement(
    body: schemas.RequirementCreateRequest,
    service: RequirementService = Depends(get_requirement_service),
):
    return ok(schemas.RequirementResponse, service.create(body), "Requirement created successfully")


@requirements_router.put("/{requirement_id}", response_model=ApiResponse[schemas.RequirementResponse])
def update_requirement(
    requirement_id: int,
    body: schemas.RequirementUpdateRequest,
    service: RequirementService = Depends(get_requirement_service),
):
    return ok(schemas.RequirementResponse, service.update(requirement_id, body))


@requirements_router.delete("/{requirement_id}", response_model=MessageResponse)
def delete_requirement(
    requirement_id: int, service: RequirementService = Depends(get_requirement_service)
):
    service.delete(requirement_id)
    return deleted("Requirement")


@requirements_router.post(
    "/{requirement_id}/attachments",
    response_model=ApiResponse[schemas.AttachmentResponse],
    status_code=status.HTTP_201_CREATED,
)
def upload_attachment(
    requirement_id: int,
    file: UploadFile = File(...),
    service: RequirementService = Depends(get_requirement_service),
):
    try:
        attachment = service.add_attachment(
            requirement_id,
            original_name=file.filename or "",
            content_type=file.content_type,
            stream=file.file,
        )
    finally:
        file.file.close()
    return ok(schemas.AttachmentResponse, attachment, "File uploaded successfully")


@requirements_router.get(
    "/{requirement_id}/attachments", response_model=ApiResponse[List[schemas.AttachmentResponse]]
)
def list_attachments(requirement_id: int, service: RequirementService = Depends(get_requirement_service)):
    return ok_list(schemas.AttachmentResponse, service.list_attachments(requirement_id))


@requirements_router.delete(
    "/{requirement_id}/attachments/{attachment_id}", response_model=MessageResponse
)
def delete_attachment(
    requirement_id: int,
    attachment_id: int,
    service: RequirementService = Depends(get_requirement_service),
):
    service.delete_attachment(requirement_id, attachment_id)
    return deleted("Attachment")


@requirements_router.post(
    "/{requirement_id}/tasks", response_model=ApiResponse[schemas.RequirementTaskResponse]
)
def set_requirement_task(
    requirement_id: int,
    body: schemas.RequirementTaskRequest,
    actor_prs_id: Optional[int] = Depends(get_actor_prs_id),
    service: RequirementService = Depends(get_requirement_service),
):
    task = service.set_task(requirement_id, body, created_by=actor_prs_id)
    return ok(schemas.RequirementTaskResponse, task, "Requirement task saved")
