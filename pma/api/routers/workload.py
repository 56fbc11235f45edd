"""Workload dashboard routes (designers, QC, developers, team)."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_current_user, service_dependency
from ..models import User
from ..schemas import workload as schemas
from ..schemas.common import ApiResponse, PaginationInfo
from ..workload import WorkloadService

__all__ = ["designers_router", "qc_router", "developer_router", "team_router"]

designers_router = APIRouter(prefix="/api/designers", tags=["workload"])
qc_router = APIRouter(prefix="/api/qc", tags=["workload"])
developer_router = APIRouter(prefix="/api/developer-workload", tags=["workload"])
team_router = APIRouter(prefix="/api/team-workload", tags=["workload"])

get_workload_service = service_dependency(WorkloadService)


# ============================================================================
# 디자이너 / QC
# ============================================================================


@designers_router.get("/workload", response_model=ApiResponse[schemas.MemberWorkloadListResponse])
def designer_workload(
    page: int = Query(1),
    page_size: int = Query(5, alias="pageSize"),
    search_query: Optional[str] = Query(None, alias="searchQuery"),
    status_filter: Optional[str] = Query(None, alias="statusFilter"),
    sort_by: str = Query("efficiency", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    service: WorkloadService = Depends(get_workload_service),
):
    listing = service.designer_workload(
        page=page,
        page_size=page_size,
        search_query=search_query,
        status_filter=status_filter,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ApiResponse(data=listing)


@designers_router.get("/metrics", response_model=ApiResponse[schemas.TeamMetricsResponse])
def designer_metrics(service: WorkloadService = Depends(get_workload_service)):
    return ApiResponse(data=service.designer_metrics())


@qc_router.get("/workload", response_model=ApiResponse[schemas.MemberWorkloadListResponse])
def qc_workload(
    page: int = Query(1),
    page_size: int = Query(5, alias="pageSize"),
    search_query: Optional[str] = Query(None, alias="searchQuery"),
    status_filter: Optional[str] = Query(None, alias="statusFilter"),
    sort_by: str = Query("efficiency", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    service: WorkloadService = Depends(get_workload_service),
):
    listing = service.qc_workload(
        page=page,
        page_size=page_size,
        search_query=search_query,
        status_filter=status_filter,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ApiResponse(data=listing)


@qc_router.get("/metrics", response_model=ApiResponse[schemas.TeamMetricsResponse])
def qc_metrics(service: WorkloadService = Depends(get_workload_service)):
    return ApiResponse(data=service.qc_metrics())


# ============================================================================
# 개발자
# ============================================================================


@developer_router.get("", response_model=ApiResponse[schemas.DeveloperWorkloadListResponse])
def developer_workload(
    page: int = Query(1),
    page_size: int = Query(10, alias="pageSize"),
    status_: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    department_id: Optional[int] = Query(None, alias="departmentId"),
    current_user: Optional[User] = Depends(get_current_user),
    service: WorkloadService = Depends(get_workload_service),
):
    listing = service.developer_workload(
        page=page,
        page_size=page_size,
        status=status_,
        search=search,
        department_id=department_id,
        current_user=current_user,
    )
    return ApiResponse(data=listing)


@developer_router.get(
    "/performance/{prs_id}", response_model=ApiResponse[schemas.DeveloperPerformanceResponse]
)
def developer_performance(prs_id: int, service: WorkloadService = Depends(get_workload_service)):
    return ApiResponse(data=service.developer_performance(prs_id))


# ============================================================================
# 팀
# ============================================================================


@team_router.get(
    "/performance", response_model=ApiResponse[List[schemas.TeamMemberPerformanceResponse]]
)
def team_performance(
    department_id: Optional[int] = Query(None, alias="departmentId"),
    busy_status: Optional[str] = Query(None, alias="busyStatus"),
    page: int = Query(1),
    limit: int = Query(10),
    service: WorkloadService = Depends(get_workload_service),
):
    result = service.team_performance(
        department_id=department_id, busy_status=busy_status, page=page, limit=limit
    )
    return ApiResponse(
        data=list(result.items),
        pagination=PaginationInfo.build(result.page, result.limit, result.total),
    )


@team_router.get("/summary", response_model=ApiResponse[schemas.TeamSummaryResponse])
def team_summary(service: WorkloadService = Depends(get_workload_service)):
    return ApiResponse(data=service.team_summary())


@team_router.get("/member/{user_id}", response_model=ApiResponse[schemas.TeamMemberDetailResponse])
def team_member(user_id: int, service: WorkloadService = Depends(get_workload_service)):
    return ApiResponse(data=service.team_member(user_id))
