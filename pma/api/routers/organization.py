"""Department, unit, user, employee, role and action routes."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import NoResultFound

from ..deps import get_actor, get_current_user, service_dependency
from ..models import User
from ..schemas import organization as schemas
from ..schemas.common import ApiResponse, MessageResponse
from ..services.organization import (
    ActionService,
    DepartmentService,
    EmployeeService,
    RoleService,
    UnitService,
    UserService,
)
from .common import deleted, ok, ok_list, ok_page

__all__ = [
    "departments_router",
    "units_router",
    "users_router",
    "employees_router",
    "roles_router",
    "actions_router",
]

departments_router = APIRouter(prefix="/api/departments", tags=["departments"])
units_router = APIRouter(prefix="/api/units", tags=["units"])
users_router = APIRouter(prefix="/api/users", tags=["users"])
employees_router = APIRouter(prefix="/api/employees", tags=["employees"])
roles_router = APIRouter(prefix="/api/roles", tags=["roles"])
actions_router = APIRouter(prefix="/api/actions", tags=["actions"])

get_department_service = service_dependency(DepartmentService)
get_unit_service = service_dependency(UnitService)
get_user_service = service_dependency(UserService)
get_employee_service = service_dependency(EmployeeService)
get_role_service = service_dependency(RoleService)
get_action_service = service_dependency(ActionService)


# ============================================================================
# 부서
# ============================================================================


@departments_router.get("", response_model=ApiResponse[List[schemas.DepartmentResponse]])
def list_departments(
    page: int = Query(1),
    limit: int = Query(20),
    search: Optional[str] = Query(None),
    service: DepartmentService = Depends(get_department_service),
):
    result = service.list_departments(page=page, limit=limit, search=search)
    return ok_page(schemas.DepartmentResponse, result)


@departments_router.get("/{department_id}", response_model=ApiResponse[schemas.DepartmentResponse])
def get_department(department_id: int, service: DepartmentService = Depends(get_department_service)):
    return ok(schemas.DepartmentResponse, service.get(department_id))


@departments_router.post(
    "", response_model=ApiResponse[schemas.DepartmentResponse], status_code=status.HTTP_201_CREATED
)
def create_department(
    body: schemas.DepartmentCreateRequest,
    service: DepartmentService = Depends(get_department_service),
):
    return ok(schemas.DepartmentResponse, service.create(body), "Department created successfully")


@departments_router.put("/{department_id}", response_model=ApiResponse[schemas.DepartmentResponse])
def update_department(
    department_id: int,
    body: schemas.DepartmentUpdateRequest,
    service: DepartmentService = Depends(get_department_service),
):
    return ok(schemas.DepartmentResponse, service.update(department_id, body))


@departments_router.delete("/{department_id}", response_model=MessageResponse)
def delete_department(department_id: int, service: DepartmentService = Depends(get_department_service)):
    service.delete(department_id)
    return deleted("Department")


@departments_router.get(
    "/{department_id}/members", response_model=ApiResponse[List[schemas.TeamMemberResponse]]
)
def department_members(department_id: int, service: DepartmentService = Depends(get_department_service)):
    return ok_list(schemas.TeamMemberResponse, service.members(department_id))


@departments_router.post(
    "/{department_id}/members",
    response_model=ApiResponse[schemas.TeamMemberResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_department_member(
    department_id: int,
    body: schemas.TeamMemberCreateRequest,
    actor: str = Depends(get_actor),
    service: DepartmentService = Depends(get_department_service),
):
    member = service.add_member(department_id, body, created_by=actor)
    return ok(schemas.TeamMemberResponse, member, "Member added successfully")


@departments_router.put(
    "/{department_id}/members/{member_id}", response_model=ApiResponse[schemas.TeamMemberResponse]
)
def update_department_member(
    department_id: int,
    member_id: int,
    body: schemas.TeamMemberUpdateRequest,
    service: DepartmentService = Depends(get_department_service),
):
    return ok(schemas.TeamMemberResponse, service.update_member(department_id, member_id, body))


@departments_router.delete("/{department_id}/members/{member_id}", response_model=MessageResponse)
def remove_department_member(
    department_id: int,
    member_id: int,
    service: DepartmentService = Depends(get_department_service),
):
    service.remove_member(department_id, member_id)
    return MessageResponse(message="Member removed successfully")


# ============================================================================
# 조직 단위
# ============================================================================


@units_router.get("", response_model=ApiResponse[List[schemas.UnitResponse]])
def list_units(
    search: Optional[str] = Query(None),
    service: UnitService = Depends(get_unit_service),
):
    return ok_list(schemas.UnitResponse, service.list_units(search=search))


@units_router.get("/tree", response_model=ApiResponse[List[schemas.UnitTreeNode]])
def unit_tree(service: UnitService = Depends(get_unit_service)):
    return ApiResponse(data=service.tree())


@units_router.get("/{unit_id}", response_model=ApiResponse[schemas.UnitResponse])
def get_unit(unit_id: int, service: UnitService = Depends(get_unit_service)):
    return ok(schemas.UnitResponse, service.get(unit_id))


@units_router.get("/{unit_id}/path", response_model=ApiResponse[List[schemas.UnitResponse]])
def unit_path(unit_id: int, service: UnitService = Depends(get_unit_service)):
    return ok_list(schemas.UnitResponse, service.ancestry(unit_id))


@units_router.post(
    "", response_model=ApiResponse[schemas.UnitResponse], status_code=status.HTTP_201_CREATED
)
def create_unit(body: schemas.UnitCreateRequest, service: UnitService = Depends(get_unit_service)):
    return ok(schemas.UnitResponse, service.create(body), "Unit created successfully")


@units_router.put("/{unit_id}", response_model=ApiResponse[schemas.UnitResponse])
def update_unit(
    unit_id: int,
    body: schemas.UnitUpdateRequest,
    service: UnitService = Depends(get_unit_service),
):
    return ok(schemas.UnitResponse, service.update(unit_id, body))


@units_router.delete("/{unit_id}", response_model=MessageResponse)
def delete_unit(unit_id: int, service: UnitService = Depends(get_unit_service)):
    service.delete(unit_id)
    return deleted("Unit")


# ============================================================================
# 사용자 / 직원
# ============================================================================


@users_router.get("", response_model=ApiResponse[List[schemas.UserResponse]])
def list_users(
    page: int = Query(1),
    limit: int = Query(20),
    search: Optional[str] = Query(None),
    department_id: Optional[int] = Query(None, alias="departmentId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    service: UserService = Depends(get_user_service),
):
    result = service.list_users(
        page=page, limit=limit, search=search, department_id=department_id, is_active=is_active
    )
    return ok_page(schemas.UserResponse, result)


@users_router.get("/me", response_model=ApiResponse[schemas.UserResponse])
def current_user(user: Optional[User] = Depends(get_current_user)):
    if user is None:
        raise NoResultFound("User not found")
    return ok(schemas.UserResponse, user)


@users_router.get("/by-username/{user_name}", response_model=ApiResponse[schemas.UserResponse])
def user_by_username(user_name: str, service: UserService = Depends(get_user_service)):
    return ok(schemas.UserResponse, service.by_username(user_name))


@users_router.get("/{user_id}", response_model=ApiResponse[schemas.UserResponse])
def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    return ok(schemas.UserResponse, service.get(user_id))


@users_router.post(
    "", response_model=ApiResponse[schemas.UserResponse], status_code=status.HTTP_201_CREATED
)
def create_user(body: schemas.UserCreateRequest, service: UserService = Depends(get_user_service)):
    return ok(schemas.UserResponse, service.create(body), "User created successfully")


@users_router.put("/{user_id}", response_model=ApiResponse[schemas.UserResponse])
def update_user(
    user_id: int,
    body: schemas.UserUpdateRequest,
    service: UserService = Depends(get_user_service),
):
    return ok(schemas.UserResponse, service.update(user_id, body))


@users_router.put("/{user_id}/roles", response_model=ApiResponse[schemas.UserResponse])
def set_user_roles(
    user_id: int,
    body: schemas.UserRolesRequest,
    service: UserService = Depends(get_user_service),
):
    return ok(schemas.UserResponse, service.set_roles(user_id, body.role_ids), "Roles updated")


@users_router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, service: UserService = Depends(get_user_service)):
    service.delete(user_id)
    return deleted("User")


@employees_router.get("/search", response_model=ApiResponse[List[schemas.EmployeeResponse]])
def search_employees(
    q: str = Query(""),
    service: EmployeeService = Depends(get_employee_service),
):
    return ok_list(schemas.EmployeeResponse, service.search(q))


@employees_router.get("/{employee_id}", response_model=ApiResponse[schemas.EmployeeResponse])
def get_employee(employee_id: int, service: EmployeeService = Depends(get_employee_service)):
    return ok(schemas.EmployeeResponse, service.get(employee_id))


# ============================================================================
# 역할 / 권한
# ============================================================================


@roles_router.get("", response_model=ApiResponse[List[schemas.RoleResponse]])
def list_roles(service: RoleService = Depends(get_role_service)):
    return ok_list(schemas.RoleResponse, service.list_roles())


@roles_router.get("/{role_id}", response_model=ApiResponse[schemas.RoleResponse])
def get_role(role_id: int, service: RoleService = Depends(get_role_service)):
    return ok(schemas.RoleResponse, service.get(role_id))


@roles_router.post(
    "", response_model=ApiResponse[schemas.RoleResponse], status_code=status.HTTP_201_CREATED
)
def create_role(body: schemas.RoleCreateRequest, service: RoleService = Depends(get_role_service)):
    return ok(schemas.RoleResponse, service.create(body), "Role created successfully")


@roles_router.put("/{role_id}", response_model=ApiResponse[schemas.RoleResponse])
def update_role(
    role_id: int,
    body: schemas.RoleUpdateRequest,
    service: RoleService = Depends(get_role_service),
):
    return ok(schemas.RoleResponse, service.update(role_id, body))


@roles_router.put("/{role_id}/actions", response_model=ApiResponse[schemas.RoleResponse])
def set_role_actions(
    role_id: int,
    body: schemas.RoleActionsRequest,
    service: RoleService = Depends(get_role_service),
):
    return ok(schemas.RoleResponse, service.set_actions(role_id, body.action_ids), "Actions updated")


@roles_router.delete("/{role_id}", response_model=MessageResponse)
def delete_role(role_id: int, service: RoleService = Depends(get_role_service)):
    service.delete(role_id)
    return deleted("Role")


@actions_router.get("", response_model=ApiResponse[List[schemas.ActionResponse]])
def list_actions(service: ActionService = Depends(get_action_service)):
    return ok_list(schemas.ActionResponse, service.list_actions())


@actions_router.get("/{action_id}", response_model=ApiResponse[schemas.ActionResponse])
def get_action(action_id: int, service: ActionService = Depends(get_action_service)):
    return ok(schemas.ActionResponse, service.get(action_id))


@actions_router.post(
    "", response_model=ApiResponse[schemas.ActionResponse], status_code=status.HTTP_201_CREATED
)
def create_action(body: schemas.ActionCreateRequest, service: ActionService = Depends(get_action_service)):
    return ok(schemas.ActionResponse, service.create(body), "Action created successfully")
