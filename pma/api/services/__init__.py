"""Service layer: one class per resource, each bound to a session and settings."""

from .audit_logs import AuditLogService
from .base import CrudService, Page
from .calendar import CalendarService
from .lookups import LookupService
from .notifications import NotificationService
from .organization import (
    ActionService,
    DepartmentService,
    EmployeeService,
    RoleService,
    UnitService,
    UserService,
)
from .planning import SprintService, TimelineRequirementService, TimelineService
from .projects import ProjectService, RequirementService
from .tasks import SubTaskService, TaskService

__all__ = [
    "CrudService",
    "Page",
    "AuditLogService",
    "CalendarService",
    "LookupService",
    "NotificationService",
    "ActionService",
    "DepartmentService",
    "EmployeeService",
    "RoleService",
    "UnitService",
    "UserService",
    "SprintService",
    "TimelineRequirementService",
    "TimelineService",
    "ProjectService",
    "RequirementService",
    "SubTaskService",
    "TaskService",
]
