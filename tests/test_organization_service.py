import pytest
from sqlalchemy.exc import IntegrityError, NoResultFound

from pma.api.models import Employee
from pma.api.schemas import organization as schemas
from pma.api.services.organization import (
    ActionService,
    DepartmentService,
    EmployeeService,
    RoleService,
    UnitService,
    UserService,
)


def test_unit_paths_follow_the_hierarchy(session, settings):
    service = UnitService(session, settings)
    root = service.create(schemas.UnitCreateRequest(name="HQ"))
    child = service.create(schemas.UnitCreateRequest(name="IT", parent_id=root.id))
    grandchild = service.create(schemas.UnitCreateRequest(name="Apps", parent_id=child.id))

    assert (root.level, root.path) == (1, str(root.id))
    assert (child.level, child.path) == (2, f"{root.id}/{child.id}")
    assert grandchild.path == f"{root.id}/{child.id}/{grandchild.id}"
    assert [unit.id for unit in service.ancestry(grandchild.id)] == [root.id, child.id, grandchild.id]


def test_moving_a_unit_rewrites_descendant_paths(session, settings):
    service = UnitService(session, settings)
    left = service.create(schemas.UnitCreateRequest(name="Left"))
    right = service.create(schemas.UnitCreateRequest(name="Right"))
    branch = service.create(schemas.UnitCreateRequest(name="Branch", parent_id=left.id))
    leaf = service.create(schemas.UnitCreateRequest(name="Leaf", parent_id=branch.id))

    service.update(branch.id, schemas.UnitUpdateRequest(parent_id=right.id))

    assert branch.path == f"{right.id}/{branch.id}"
    assert leaf.level == 3
    assert leaf.path == f"{right.id}/{branch.id}/{leaf.id}"


def test_unit_cycles_are_rejected(session, settings):
    service = UnitService(session, settings)
    root = service.create(schemas.UnitCreateRequest(name="Root"))
    child = service.create(schemas.UnitCreateRequest(name="Child", parent_id=root.id))

    with pytest.raises(ValueError, match="own descendant"):
        service.update(root.id, schemas.UnitUpdateRequest(parent_id=child.id))


def test_unit_with_children_cannot_be_deleted(session, settings):
    service = UnitService(session, settings)
    root = service.create(schemas.UnitCreateRequest(name="Root"))
    service.create(schemas.UnitCreateRequest(name="Child", parent_id=root.id))

    with pytest.raises(ValueError):
        service.delete(root.id)


def test_unit_tree_nests_children(session, settings):
    service = UnitService(session, settings)
    root = service.create(schemas.UnitCreateRequest(name="Root"))
    service.create(schemas.UnitCreateRequest(name="B", parent_id=root.id))
    service.create(schemas.UnitCreateRequest(name="A", parent_id=root.id))

    tree = service.tree()

    assert len(tree) == 1
    assert [node.name for node in tree[0].children] == ["A", "B"]


def test_department_members_are_unique(session, settings):
    service = DepartmentService(session, settings)
    department = service.create(schemas.DepartmentCreateRequest(name="QC"))
    member = service.add_member(
        department.id, schemas.TeamMemberCreateRequest(prs_id=7, full_name="Sara"), created_by="admin"
    )

    assert member.created_by == "admin"
    assert [m.prs_id for m in service.members(department.id)] == [7]
    with pytest.raises(IntegrityError):
        service.add_member(department.id, schemas.TeamMemberCreateRequest(prs_id=7))


def test_department_member_must_belong_to_department(session, settings):
    service = DepartmentService(session, settings)
    first = service.create(schemas.DepartmentCreateRequest(name="One"))
    second = service.create(schemas.DepartmentCreateRequest(name="Two"))
    member = service.add_member(first.id, schemas.TeamMemberCreateRequest(prs_id=1))

    with pytest.raises(NoResultFound):
        service.remove_member(second.id, member.id)

    updated = service.update_member(first.id, member.id, schemas.TeamMemberUpdateRequest(is_active=False))
    assert updated.is_active is False


def test_user_roles_are_replaced(session, settings):
    roles = RoleService(session, settings)
    actions = ActionService(session, settings)
    users = UserService(session, settings)
    view = actions.create(schemas.ActionCreateRequest(name="projects.view", category="projects"))
    admin = roles.create(schemas.RoleCreateRequest(name="Admin", action_ids=[view.id]))
    viewer = roles.create(schemas.RoleCreateRequest(name="Viewer"))

    user = users.create(schemas.UserCreateRequest(user_name="jdoe", role_ids=[admin.id]))
    assert user.role_ids == [admin.id]
    assert admin.action_ids == [view.id]

    users.set_roles(user.id, [viewer.id])
    assert users.by_username("jdoe").role_ids == [viewer.id]

    with pytest.raises(ValueError, match="Unknown role ids"):
        users.set_roles(user.id, [999])


def test_user_listing_filters(session, settings):
    users = UserService(session, settings)
    users.create(schemas.UserCreateRequest(user_name="active", full_name="Active One"))
    users.create(schemas.UserCreateRequest(user_name="gone", full_name="Gone One", is_active=False))

    assert users.list_users(is_active=True).total == 1
    assert users.list_users(search="one").total == 2
    with pytest.raises(NoResultFound):
        users.by_username("missing")


def test_employee_search(session, settings):
    session.add_all(
        [
            Employee(id=1, full_name="Omar Khalid", military_number="M-100"),
            Employee(id=2, full_name="Lina Saad", military_number="M-200"),
        ]
    )
    session.commit()
    service = EmployeeService(session, settings)

    assert [employee.id for employee in service.search("m-2")] == [2]
    assert service.search("  ") == []
