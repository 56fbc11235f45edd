"""Task and subtask routes."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..deps import get_actor_prs_id, service_dependency
from ..schema.enums import TaskStatus
from ..schemas import tasks as schemas
from ..schemas.common import ApiResponse, MessageResponse
from ..services.tasks import SEARCH_LIMIT_DEFAULT, SubTaskService, TaskService
from .common import coerce_enum, deleted, ok, ok_list, ok_page

__all__ = ["router", "subtasks_router"]

router = APIRouter(prefix="/api/tasks", tags=["tasks"])
subtasks_router = APIRouter(prefix="/api/subtasks", tags=["subtasks"])

get_task_service = service_dependency(TaskService)
get_subtask_service = service_dependency(SubTaskService)


# ============================================================================
# 조회
# ============================================================================


@router.get("", response_model=ApiResponse[List[schemas.TaskResponse]])
def list_tasks(
    page: int = Query(1),
    limit: int = Query(20),
    sprint_id: Optional[int] = Query(None, alias="sprintId"),
    project_id: Optional[int] = Query(None, alias="projectId"),
    assignee_id: Optional[int] = Query(None, alias="assigneeId"),
    status_id: Optional[int] = Query(None, alias="statusId"),
    service: TaskService = Depends(get_task_service),
):
    result = service.list_tasks(
        page=page,
        limit=limit,
        sprint_id=sprint_id,
        project_id=project_id,
        assignee_id=assignee_id,
        status_id=coerce_enum(TaskStatus, status_id),
    )
    return ok_page(schemas.TaskResponse, result)


@router.get("/searchTasks", response_model=ApiResponse[List[schemas.TaskResponse]])
def search_tasks(
    query: str = Query(""),
    timeline_id: Optional[int] = Query(None, alias="timelineId"),
    limit: int = Query(SEARCH_LIMIT_DEFAULT),
    service: TaskService = Depends(get_task_service),
):
    return ok_list(schemas.TaskResponse, service.search(query, timeline_id=timeline_id, limit=limit))


@router.get("/sprint/{sprint_id}", response_model=ApiResponse[List[schemas.TaskResponse]])
def tasks_by_sprint(sprint_id: int, service: TaskService = Depends(get_task_service)):
    return ok_list(schemas.TaskResponse, service.by_sprint(sprint_id))


@router.get("/assignee/{prs_id}", response_model=ApiResponse[List[schemas.TaskResponse]])
def tasks_by_assignee(prs_id: int, service: TaskService = Depends(get_task_service)):
    return ok_list(schemas.TaskResponse, service.by_assignee(prs_id))


@router.get("/{task_id}", response_model=ApiResponse[schemas.TaskResponse])
def get_task(task_id: int, service: TaskService = Depends(get_task_service)):
    return ok(schemas.TaskResponse, service.get(task_id))


@router.get("/{task_id}/history", response_model=ApiResponse[List[schemas.TaskStatusHistoryResponse]])
def task_history(task_id: int, service: TaskService = Depends(get_task_service)):
    return ok_list(schemas.TaskStatusHistoryResponse, service.history(task_id))


# ============================================================================
# 변경
# ============================================================================


@router.post(
    "/adhoc",
    response_model=ApiResponse[schemas.TaskResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_adhoc_task(body: schemas.AdhocTaskRequest, service: TaskService = Depends(get_task_service)):
    return ok(schemas.TaskResponse, service.create_adhoc(body), "Ad-hoc task created successfully")


@router.post(
    "",
    response_model=ApiResponse[schemas.TaskResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_task(body: schemas.TaskCreateRequest, service: TaskService = Depends(get_task_service)):
    return ok(schemas.TaskResponse, service.create(body), "Task created successfully")


@router.put("/{task_id}", response_model=ApiResponse[schemas.TaskResponse])
def update_task(
    task_id: int,
    body: schemas.TaskUpdateRequest,
    actor_prs_id: Optional[int] = Depends(get_actor_prs_id),
    service: TaskService = Depends(get_task_service),
):
    task = service.update(task_id, body, changed_by=actor_prs_id)
    return ok(schemas.TaskResponse, task, "Task updated successfully")


@router.patch("/{task_id}", response_model=ApiResponse[schemas.TaskResponse])
def update_task_status(
    task_id: int,
    body: schemas.TaskStatusUpdateRequest,
    actor_prs_id: Optional[int] = Depends(get_actor_prs_id),
    service: TaskService = Depends(get_task_service),
):
    """상태 변경 + 이력 기록 + 연결된 작업 상태 전파."""
    task = service.update_status(task_id, body, changed_by=actor_prs_id)
    return ok(schemas.TaskResponse, task, "Task status updated successfully")


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: int, service: TaskService = Depends(get_task_service)):
    service.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{task_id}/move", response_model=ApiResponse[schemas.TaskResponse])
def move_task(
    task_id: int,
    body: schemas.TaskMoveRequest,
    service: TaskService = Depends(get_task_service),
):
    return ok(schemas.TaskResponse, service.move(task_id, body.move_days), "Task moved successfully")


@router.post("/{task_id}/move-to-sprint", response_model=ApiResponse[schemas.TaskResponse])
def move_task_to_sprint(
    task_id: int,
    body: schemas.TaskMoveToSprintRequest,
    service: TaskService = Depends(get_task_service),
):
    task = service.move_to_sprint(task_id, body.target_sprint_id)
    return ok(schemas.TaskResponse, task, "Task moved to sprint successfully")


# ============================================================================
# 하위 작업
# ============================================================================


@subtasks_router.get("", response_model=ApiResponse[List[schemas.SubTaskResponse]])
def list_subtasks(
    page: int = Query(1),
    limit: int = Query(20),
    service: SubTaskService = Depends(get_subtask_service),
):
    return ok_page(schemas.SubTaskResponse, service.list_subtasks(page=page, limit=limit))


@subtasks_router.get("/task/{task_id}", response_model=ApiResponse[List[schemas.SubTaskResponse]])
def subtasks_by_task(task_id: int, service: SubTaskService = Depends(get_subtask_service)):
    return ok_list(schemas.SubTaskResponse, service.by_task(task_id))


@subtasks_router.get(
    "/assignee/{assignee_id}", response_model=ApiResponse[List[schemas.SubTaskResponse]]
)
def subtasks_by_assignee(assignee_id: int, service: SubTaskService = Depends(get_subtask_service)):
    return ok_list(schemas.SubTaskResponse, service.by_assignee(assignee_id))


@subtasks_router.get("/{subtask_id}", response_model=ApiResponse[schemas.SubTaskResponse])
def get_subtask(subtask_id: int, service: SubTaskService = Depends(get_subtask_service)):
    return ok(schemas.SubTaskResponse, service.get(subtask_id))


@subtasks_router.post(
    "",
    response_model=ApiResponse[schemas.SubTaskResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_subtask(body: schemas.SubTaskCreateRequest, service: SubTaskService = Depends(get_subtask_service)):
    return ok(schemas.SubTaskResponse, service.create(body), "Subtask created successfully")


@subtasks_router.put("/{subtask_id}", response_model=ApiResponse[schemas.SubTaskResponse])
def update_subtask(
    subtask_id: int,
    body: schemas.SubTaskUpdateRequest,
    service: SubTaskService = Depends(get_subtask_service),
):
    return ok(schemas.SubTaskResponse, service.update(subtask_id, body))


@subtasks_router.delete("/{subtask_id}", response_model=MessageResponse)
def delete_subtask(subtask_id: int, service: SubTaskService = Depends(get_subtask_service)):
    service.delete(subtask_id)
    return deleted("Subtask")
