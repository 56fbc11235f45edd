"""PMA SQLAlchemy models organized by domain."""

from .base import Base, IntEnumType, as_utc_naive, str_enum, utcnow
from .audit import ChangeGroup, ChangeItem
from .calendar import CalendarEvent, CalendarEventAssignment
from .lookups import Lookup
from .notifications import Notification
from .organization import Action, Department, Employee, Role, RoleAction, Team, Unit, User, UserRole
from .planning import Sprint, Timeline, TimelineRequirement, TimelineRequirementAssignment
from .projects import (
    Project,
    ProjectAnalyst,
    ProjectRequirement,
    RequirementAttachment,
    RequirementTask,
)
from .tasks import SubTask, Task, TaskAssignment, TaskDependency, TaskStatusHistory

__all__ = [
    "Base",
    "IntEnumType",
    "str_enum",
    "utcnow",
    "as_utc_naive",
    "ChangeGroup",
    "ChangeItem",
    "CalendarEvent",
    "CalendarEventAssignment",
    "Lookup",
    "Notification",
    "Action",
    "Department",
    "Employee",
    "Role",
    "RoleAction",
    "Team",
    "Unit",
    "User",
    "UserRole",
    "Sprint",
    "Timeline",
    "TimelineRequirement",
    "TimelineRequirementAssignment",
    "Project",
    "ProjectAnalyst",
    "ProjectRequirement",
    "RequirementAttachment",
    "RequirementTask",
    "SubTask",
    "Task",
    "TaskAssignment",
    "TaskDependency",
    "TaskStatusHistory",
]
