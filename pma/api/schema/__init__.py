"""Enum definitions shared between ORM models and API schemas."""

from .enums import (
    CalendarEventPriority,
    CalendarEventStatus,
    CalendarEventType,
    NotificationPriority,
    NotificationType,
    PmaEnum,
    PmaIntEnum,
    Priority,
    ProjectStatus,
    RequirementPriority,
    RequirementStatus,
    RequirementTaskStatus,
    RequirementType,
    SprintStatus,
    TaskRoleType,
    TaskStatus,
)

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
