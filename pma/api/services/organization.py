"""Departments, units, users, employees, roles and actions."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import selectinload

from ..models import Action, Department, Employee, Role, Team, Unit, User
from ..schemas import organization as schemas
from .base import CrudService, Page

__all__ = [
    "DepartmentService",
    "UnitService",
    "UserService",
    "EmployeeService",
    "RoleService",
    "ActionService",
    "EMPLOYEE_SEARCH_LIMIT",
]

logger = logging.getLogger(__name__)

EMPLOYEE_SEARCH_LIMIT = 20


class DepartmentService(CrudService[Department]):
    """Departments and their Team membership rows."""

    model = Department
    entity_name = "Department"

    def list_departments(
        self, *, page: int = 1, limit: int = 20, search: Optional[str] = None
    ) -> Page[Department]:
        stmt = select(Department)
        if search and search.strip():
            stmt = stmt.where(Department.name.ilike(f"%{search.strip()}%"))
        return self._paginate(stmt.order_by(Department.name), page, limit)

    def members(self, department_id: int) -> Sequence[Team]:
        self._get_or_raise(department_id)
        stmt = select(Team).where(Team.department_id == department_id).order_by(Team.id)
        return self.session.scalars(stmt).all()

    def _get_member(self, department_id: int, member_id: int) -> Team:
        member = self.session.get(Team, member_id)
        if member is None or member.department_id != department_id:
            raise NoResultFound("Team member not found")
        return member

    def add_member(
        self,
        department_id: int,
        payload: schemas.TeamMemberCreateRequest,
        created_by: Optional[str] = None,
    ) -> Team:
        self._get_or_raise(department_id)
        # Duplicates hit uq_team_member and surface as IntegrityError (409).
        member = Team(
            department_id=department_id,
            prs_id=payload.prs_id,
            user_name=payload.user_name,
            full_name=payload.full_name,
            created_by=created_by,
        )
        self.session.add(member)
        self.session.commit()
        logger.info("Added prs %s to department %s", payload.prs_id, department_id)
        return member

    def update_member(
        self, department_id: int, member_id: int, payload: schemas.TeamMemberUpdateRequest
    ) -> Team:
        member = self._get_member(department_id, member_id)
        self._assign(member, payload.model_dump(exclude_unset=True))
        self.session.commit()
        return member

    def remove_member(self, department_id: int, member_id: int) -> None:
        member = self._get_member(department_id, member_id)
        self.session.delete(member)
        self.session.commit()


class UnitService(CrudService[Unit]):
    """Unit hierarchy stored as ``level`` plus a materialised ``path``."""

    model = Unit
    entity_name = "Unit"

    def list_units(self, *, search: Optional[str] = None) -> Sequence[Unit]:
        stmt = select(Unit)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(Unit.name.ilike(pattern), Unit.code.ilike(pattern)))
        return self.session.scalars(stmt.order_by(Unit.level, Unit.name)).all()

    def _place(self, unit: Unit) -> None:
        if unit.parent_id is None:
            unit.level = 1
            unit.path = str(unit.id)
            return
        if unit.parent_id == unit.id:
            raise ValueError("A unit cannot be its own parent")
        parent = self.session.get(Unit, unit.parent_id)
        if parent is None:
            raise NoResultFound("Parent unit not found")
        ancestors = (parent.path or "").split("/")
        if unit.id is not None and str(unit.id) in ancestors:
            raise ValueError("A unit cannot be moved under its own descendant")
        unit.level = parent.level + 1
        unit.path = f"{parent.path}/{unit.id}"

    def _replace_subtree_paths(self, unit: Unit) -> None:
        for child in unit.children:
            child.level = unit.level + 1
            child.path = f"{unit.path}/{child.id}"
            self._replace_subtree_paths(child)

    def create(self, payload: schemas.UnitCreateRequest) -> Unit:
        unit = Unit()
        self._assign(unit, self._payload_values(payload, partial=False))
        self.session.add(unit)
        self.session.flush()
        self._place(unit)
        self.session.commit()
        return unit

    def update(self, unit_id: int, payload: schemas.UnitUpdateRequest) -> Unit:
        unit = self._get_or_raise(unit_id)
        self._assign(unit, self._payload_values(payload, partial=True))
        if "parent_id" in payload.model_fields_set:
            self._place(unit)
            self._replace_subtree_paths(unit)
        self.session.commit()
        return unit

    def delete(self, unit_id: int) -> None:
        unit = self._get_or_raise(unit_id)
        if unit.children:
            raise ValueError("Cannot delete a unit that has child units")
        self.session.delete(unit)
        self.session.commit()

    def ancestry(self, unit_id: int) -> list[Unit]:
        """Units from the root down to *unit_id*."""

        unit = self._get_or_raise(unit_id)
        chain = [unit]
        while chain[-1].parent is not None:
            chain.append(chain[-1].parent)
        return list(reversed(chain))

    def tree(self) -> list[schemas.UnitTreeNode]:
        units = self.session.scalars(select(Unit).order_by(Unit.level, Unit.name)).all()
        nodes = {
            unit.id: schemas.UnitTreeNode(
                id=unit.id,
                name=unit.name,
                code=unit.code,
                level=unit.level,
                path=unit.path,
                is_active=unit.is_active,
            )
            for unit in units
        }
        roots: list[schemas.UnitTreeNode] = []
        for unit in units:
            node = nodes[unit.id]
            parent = nodes.get(unit.parent_id) if unit.parent_id is not None else None
            if parent is None:
                roots.append(node)
            else:
                parent.children.append(node)
        return roots


def _ensure_ids(session, model, ids: Sequence[int], label: str) -> list:
    if not ids:
        return []
    rows = session.scalars(select(model).where(model.id.in_(ids))).all()
    found = {row.id for row in rows}
    missing = [item for item in ids if item not in found]
    if missing:
        raise ValueError(f"Unknown {label} ids: {missing}")
    return list(rows)


class UserService(CrudService[User]):
    model = User
    entity_name = "User"
    relation_fields = frozenset({"role_ids"})

    def _base_query(self):
        return select(User).options(selectinload(User.roles))

    def list_users(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> Page[User]:
        stmt = self._base_query()
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    User.user_name.ilike(pattern),
                    User.full_name.ilike(pattern),
                    User.military_number.ilike(pattern),
                )
            )
        if department_id is not None:
            stmt = stmt.where(User.department_id == department_id)
        if is_active is not None:
            stmt = stmt.where(User.is_active == is_active)
        return self._paginate(stmt.order_by(User.user_name), page, limit)

    def by_username(self, user_name: str) -> User:
        user = self.session.scalars(
            self._base_query().where(User.user_name == user_name)
        ).first()
        if user is None:
            raise NoResultFound("User not found")
        return user

    def _set_roles(self, user: User, role_ids: Iterable[int]) -> None:
        user.roles = _ensure_ids(self.session, Role, self._dedupe(role_ids), "role")

    def create(self, payload: schemas.UserCreateRequest) -> User:
        user = User()
        self._assign(user, self._payload_values(payload, partial=False))
        self._set_roles(user, payload.role_ids)
        self.session.add(user)
        self.session.commit()
        return user

    def update(self, user_id: int, payload: schemas.UserUpdateRequest) -> User:
        user = self._get_or_raise(user_id)
        self._assign(user, self._payload_values(payload, partial=True))
        if payload.role_ids is not None:
            self._set_roles(user, payload.role_ids)
        self.session.commit()
        return user

    def set_roles(self, user_id: int, role_ids: Sequence[int]) -> User:
        user = self._get_or_raise(user_id)
        self._set_roles(user, role_ids)
        self.session.commit()
        return user


class EmployeeService(CrudService[Employee]):
    model = Employee
    entity_name = "Employee"

    def search(self, query: str) -> Sequence[Employee]:
        if not query or not query.strip():
            return []
        pattern = f"%{query.strip()}%"
        stmt = (
            select(Employee)
            .where(or_(Employee.full_name.ilike(pattern), Employee.military_number.ilike(pattern)))
            .order_by(Employee.full_name)
            .limit(EMPLOYEE_SEARCH_LIMIT)
        )
        return self.session.scalars(stmt).all()


class RoleService(CrudService[Role]):
    model = Role
    entity_name = "Role"
    relation_fields = frozenset({"action_ids"})

    def list_roles(self) -> Sequence[Role]:
        stmt = select(Role).options(selectinload(Role.actions)).order_by(Role.role_order, Role.name)
        return self.session.scalars(stmt).all()

    def _set_actions(self, role: Role, action_ids: Iterable[int]) -> None:
        role.actions = _ensure_ids(self.session, Action, self._dedupe(action_ids), "action")

    def create(self, payload: schemas.RoleCreateRequest) -> Role:
        role = Role()
        self._assign(role, self._payload_values(payload, partial=False))
        self._set_actions(role, payload.action_ids)
        self.session.add(role)
        self.session.commit()
        return role

    def update(self, role_id: int, payload: schemas.RoleUpdateRequest) -> Role:
        role = self._get_or_raise(role_id)
        self._assign(role, self._payload_values(payload, partial=True))
        if payload.action_ids is not None:
            self._set_actions(role, payload.action_ids)
        self.session.commit()
        return role

    def set_actions(self, role_id: int, action_ids: Sequence[int]) -> Role:
        role = self._get_or_raise(role_id)
        self._set_actions(role, action_ids)
        self.session.commit()
        return role


class ActionService(CrudService[Action]):
    model = Action
    entity_name = "Action"

    def list_actions(self) -> Sequence[Action]:
        stmt = select(Action).order_by(Action.category, Action.name)
        return self.session.scalars(stmt).all()
