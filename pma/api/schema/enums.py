"""Canonical PMA enum definitions."""

from __future__ import annotations

from enum import Enum, IntEnum

__all__ = [
    "PmaEnum",
    "PmaIntEnum",
    "ProjectStatus",
    "Priority",
    "TaskStatus",
    "SprintStatus",
    "TaskRoleType",
    "RequirementStatus",
    "RequirementType",
    "RequirementPriority",
    "RequirementTaskStatus",
    "NotificationType",
    "NotificationPriority",
    "CalendarEventType",
    "CalendarEventStatus",
    "CalendarEventPriority",
]


class PmaEnum(str, Enum):
    """Base class for enums stored by their string value."""

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(item.value for item in cls)


class PmaIntEnum(IntEnum):
    """Base class for enums stored as integer codes."""

    @classmethod
    def values(cls) -> tuple[int, ...]:
        return tuple(int(item) for item in cls)


class ProjectStatus(PmaIntEnum):
    NEW = 1
    UNDER_STUDY = 2
    UNDER_DEVELOPMENT = 3
    UNDER_TESTING = 4
    PRODUCTION = 5
    DELAYED = 6


class Priority(PmaIntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class TaskStatus(PmaIntEnum):
    TODO = 1
    IN_PROGRESS = 2
    IN_REVIEW = 3
    REWORK = 4
    COMPLETED = 5
    BLOCKED = 6

    def default_progress(self) -> int:
        """Progress implied by a status change when none is supplied."""

        return _DEFAULT_PROGRESS.get(self, 0)


_DEFAULT_PROGRESS = {
    TaskStatus.TODO: 0,
    TaskStatus.IN_PROGRESS: 25,
    TaskStatus.IN_REVIEW: 75,
    TaskStatus.COMPLETED: 100,
}


class SprintStatus(PmaIntEnum):
    PLANNING = 1
    ACTIVE = 2
    COMPLETED = 3
    CANCELLED = 4


class TaskRoleType(PmaEnum):
    DEVELOPER = "developer"
    QC = "qc"
    DESIGNER = "designer"
    ANALYST = "analyst"


class RequirementStatus(PmaEnum):
    DRAFT = "draft"
    APPROVED = "approved"
    IN_DEVELOPMENT = "in-development"
    COMPLETED = "completed"


class RequirementType(PmaEnum):
    NEW = "new"
    CHANGE_REQUEST = "change request"


class RequirementPriority(PmaEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RequirementTaskStatus(PmaEnum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    TESTING = "testing"
    COMPLETED = "completed"


class NotificationType(PmaEnum):
    INFO = "Info"
    SUCCESS = "Success"
    WARNING = "Warning"
    ERROR = "Error"
    REMINDER = "Reminder"


class NotificationPriority(PmaEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class CalendarEventType(PmaEnum):
    PROJECT = "project"
    REQUIREMENT = "requirement"
    MEETING = "meeting"
    DEADLINE = "deadline"
    MILESTONE = "milestone"


class CalendarEventStatus(PmaEnum):
    UPCOMING = "upcoming"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class CalendarEventPriority(PmaEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
