"""Workload evaluation engine and its query service."""

from .engine import (
    DesignerPolicy,
    DeveloperPolicy,
    PersonSample,
    QcPolicy,
    TaskSample,
    TeamPolicy,
    WorkloadPolicy,
    WorkloadResult,
)
from .service import WorkloadService

__all__ = [
    "DesignerPolicy",
    "DeveloperPolicy",
    "PersonSample",
    "QcPolicy",
    "TaskSample",
    "TeamPolicy",
    "WorkloadPolicy",
    "WorkloadResult",
    "WorkloadService",
]
