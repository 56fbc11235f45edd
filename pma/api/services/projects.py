"""Project and project requirement services."""

from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import selectinload

from ..models import (
    Notification,
    Project,
    ProjectAnalyst,
    ProjectRequirement,
    RequirementAttachment,
    RequirementTask,
    User,
)
from ..schema.enums import NotificationPriority, NotificationType, Priority, ProjectStatus
from ..schemas import projects as schemas
from .base import CrudService, Page, ensure_date_range

__all__ = ["ProjectService", "RequirementService", "REVIEW_NOTIFICATION_TITLE"]

logger = logging.getLogger(__name__)

REVIEW_NOTIFICATION_TITLE = "Project Sent for Review"

_STATS_KEYS = {
    ProjectStatus.NEW: "new",
    ProjectStatus.UNDER_STUDY: "under_study",
    ProjectStatus.UNDER_DEVELOPMENT: "under_development",
    ProjectStatus.UNDER_TESTING: "under_testing",
    ProjectStatus.PRODUCTION: "production",
    ProjectStatus.DELAYED: "delayed",
}


def _requirement_upload_dir(upload_dir: str, requirement_id: int) -> Path:
    return Path(upload_dir) / "requirements" / str(requirement_id)


def _remove_upload_dirs(upload_dir: str, requirement_ids: Sequence[int]) -> None:
    for requirement_id in requirement_ids:
        shutil.rmtree(_requirement_upload_dir(upload_dir, requirement_id), ignore_errors=True)


class ProjectService(CrudService[Project]):
    """Project lifecycle, analyst links and review hand-off."""

    model = Project
    entity_name = "Project"
    relation_fields = frozenset({"analyst_ids"})

    def _base_query(self):
        return select(Project).options(selectinload(Project.analyst_links))

    def _validate(self, instance: Project) -> None:
        ensure_date_range(instance.start_date, instance.expected_completion_date)

    def _search_clause(self, term: str):
        pattern = f"%{term.strip()}%"
        return or_(
            Project.application_name.ilike(pattern),
            Project.project_owner.ilike(pattern),
            Project.owning_unit.ilike(pattern),
            Project.description.ilike(pattern),
        )

    def _replace_analysts(self, project: Project, analyst_ids: Sequence[int]) -> None:
        analyst_ids = self._dedupe(analyst_ids)
        if analyst_ids:
            found = set(
                self.session.scalars(select(User.id).where(User.id.in_(analyst_ids))).all()
            )
            missing = [analyst_id for analyst_id in analyst_ids if analyst_id not in found]
            if missing:
                raise ValueError(f"Unknown analyst ids: {missing}")
        project.analyst_links.clear()
        self.session.flush()
        for analyst_id in analyst_ids:
            project.analyst_links.append(ProjectAnalyst(analyst_id=analyst_id))

    # ---------------------------- queries -----------------------------
    def list_projects(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        status: Optional[ProjectStatus] = None,
        priority: Optional[Priority] = None,
    ) -> Page[Project]:
        stmt = self._base_query()
        if search and search.strip():
            stmt = stmt.where(self._search_clause(search))
        if status is not None:
            stmt = stmt.where(Project.status == status)
        if priority is not None:
            stmt = stmt.where(Project.priority == priority)
        stmt = stmt.order_by(Project.created_at.desc(), Project.id.desc())
        return self._paginate(stmt, page, limit)

    def search_projects(
        self,
        query: str,
        *,
        status: Optional[ProjectStatus] = None,
        priority: Optional[Priority] = None,
    ) -> Sequence[Project]:
        if not query or not query.strip():
            raise ValueError("Search query is required")
        stmt = self._base_query().where(self._search_clause(query))
        if status is not None:
            stmt = stmt.where(Project.status == status)
        if priority is not None:
            stmt = stmt.where(Project.priority == priority)
        return self.session.scalars(stmt.order_by(Project.application_name)).all()

    def stats(self) -> schemas.ProjectStatsResponse:
        rows = self.session.execute(
            select(Project.status, func.count(Project.id)).group_by(Project.status)
        ).all()
        counts = {"total": 0}
        for status, count in rows:
            counts[_STATS_KEYS[ProjectStatus(status)]] = count
            counts["total"] += count
        return schemas.ProjectStatsResponse(**counts)

    # ---------------------------- mutations -----------------------------
    def create(self, payload: schemas.ProjectCreateRequest) -> Project:
        project = Project()
        self._assign(project, self._payload_values(payload, partial=False))
        self._validate(project)
        self.session.add(project)
        if payload.analyst_ids:
            self._replace_analysts(project, payload.analyst_ids)
        self.session.commit()
        logger.info("Created project %s (%s)", project.id, project.application_name)
        return project

    def update(self, project_id: int, payload: schemas.ProjectUpdateRequest) -> Project:
        project = self._get_or_raise(project_id)
        self._assign(project, self._payload_values(payload, partial=True))
        self._validate(project)
        if payload.analyst_ids is not None:
            self._replace_analysts(project, payload.analyst_ids)
        self.session.commit()
        return project

    def delete(self, project_id: int) -> None:
        project = self._get_or_raise(project_id)
        requirement_ids = [requirement.id for requirement in project.requirements]
        self.session.delete(project)
        self.session.commit()
        _remove_upload_dirs(self.settings.upload_dir, requirement_ids)

    def send_for_review(self, project_id: int) -> Project:
        """Move the project to UnderStudy and notify its analysts and owner."""

        project = self._get_or_raise(project_id)
        project.status = ProjectStatus.UNDER_STUDY

        recipient_ids = list(project.analyst_ids)
        if project.project_owner_id is not None:
            recipient_ids.append(project.project_owner_id)

        recipients: dict[str, User] = {}
        for user_id in recipient_ids:
            user = self.session.get(User, user_id)
            if user is not None:
                recipients.setdefault(user.user_name, user)

        for user in recipients.values():
            self.session.add(
                Notification(
                    title=REVIEW_NOTIFICATION_TITLE,
                    message=f'Project "{project.application_name}" has been sent for review',
                    type=NotificationType.INFO,
                    priority=NotificationPriority.MEDIUM,
                    user_id=user.id,
                    related_entity_type="Project",
                    related_entity_id=project.id,
                )
            )
        self.session.commit()
        logger.info(
            "Project %s sent for review; notified %d user(s)", project.id, len(recipients)
        )
        return project


class RequirementService(CrudService[ProjectRequirement]):
    """Project requirements with attachments and developer/QC task pairing."""

    model = ProjectRequirement
    entity_name = "Project requirement"

    def _base_query(self):
        return select(ProjectRequirement).options(
            selectinload(ProjectRequirement.attachments),
            selectinload(ProjectRequirement.task),
        )

    def list_requirements(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        project_id: Optional[int] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Page[ProjectRequirement]:
        stmt = self._base_query()
        if project_id is not None:
            stmt = stmt.where(ProjectRequirement.project_id == project_id)
        if status:
            stmt = stmt.where(ProjectRequirement.status == status)
        if priority:
            stmt = stmt.where(ProjectRequirement.priority == priority)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    ProjectRequirement.name.ilike(pattern),
                    ProjectRequirement.description.ilike(pattern),
                )
            )
        stmt = stmt.order_by(ProjectRequirement.created_at.desc(), ProjectRequirement.id.desc())
        return self._paginate(stmt, page, limit)

    def list_for_project(self, project_id: int) -> Sequence[ProjectRequirement]:
        if self.session.get(Project, project_id) is None:
            raise NoResultFound("Project not found")
        stmt = self._base_query().where(ProjectRequirement.project_id == project_id)
        return self.session.scalars(stmt.order_by(ProjectRequirement.id)).all()

    def assigned_projects(self, analyst_id: int) -> list[schemas.AssignedProjectResponse]:
        requirement_counts = (
            select(
                ProjectRequirement.project_id,
                func.count(ProjectRequirement.id).label("requirements_count"),
            )
            .group_by(ProjectRequirement.project_id)
            .subquery()
        )
        stmt = (
            select(Project, func.coalesce(requirement_counts.c.requirements_count, 0))
            .join(ProjectAnalyst, ProjectAnalyst.project_id == Project.id)
            .outerjoin(requirement_counts, requirement_counts.c.project_id == Project.id)
            .where(ProjectAnalyst.analyst_id == analyst_id)
            .order_by(Project.application_name)
        )
        return [
            schemas.AssignedProjectResponse(
                id=project.id,
                application_name=project.application_name,
                status=project.status,
                priority=project.priority,
                requirements_count=count,
            )
            for project, count in self.session.execute(stmt).all()
        ]

    def create(self, payload: schemas.RequirementCreateRequest) -> ProjectRequirement:
        if self.session.get(Project, payload.project_id) is None:
            raise NoResultFound("Project not found")
        return super().create(payload)

    def delete(self, requirement_id: int) -> None:
        requirement = self._get_or_raise(requirement_id)
        self.session.delete(requirement)
        self.session.commit()
        _remove_upload_dirs(self.settings.upload_dir, [requirement_id])

    # ---------------------------- attachments -----------------------------
    def _attachment_dir(self, requirement_id: int) -> Path:
        return _requirement_upload_dir(self.settings.upload_dir, requirement_id)

    def add_attachment(
        self,
        requirement_id: int,
        *,
        original_name: str,
        content_type: Optional[str],
        stream: BinaryIO,
    ) -> RequirementAttachment:
        requirement = self._get_or_raise(requirement_id)
        original_name = Path(original_name or "").name
        if not original_name:
            raise ValueError("File name is required")

        directory = self._attachment_dir(requirement.id)
        directory.mkdir(parents=True, exist_ok=True)
        stored_name = f"{uuid.uuid4().hex}{Path(original_name).suffix}"
        target = directory / stored_name

        size = 0
        with target.open("wb") as handle:
            while chunk := stream.read(64 * 1024):
                handle.write(chunk)
                size += len(chunk)

        attachment = RequirementAttachment(
            requirement_id=requirement.id,
            file_name=stored_name,
            original_name=original_name,
            file_path=str(target),
            file_size=size,
            content_type=content_type,
        )
        self.session.add(attachment)
        self.session.commit()
        return attachment

    def list_attachments(self, requirement_id: int) -> Sequence[RequirementAttachment]:
        requirement = self._get_or_raise(requirement_id)
        return list(requirement.attachments)

    def delete_attachment(self, requirement_id: int, attachment_id: int) -> None:
        attachment = self.session.get(RequirementAttachment, attachment_id)
        if attachment is None or attachment.requirement_id != requirement_id:
            raise NoResultFound("Attachment not found")
        path = Path(attachment.file_path)
        self.session.delete(attachment)
        self.session.commit()
        path.unlink(missing_ok=True)

    # ---------------------------- requirement task -----------------------------
    def set_task(
        self,
        requirement_id: int,
        payload: schemas.RequirementTaskRequest,
        created_by: Optional[int] = None,
    ) -> RequirementTask:
        requirement = self._get_or_raise(requirement_id)
        for label, user_id in (("developer", payload.developer_id), ("qc", payload.qc_id)):
            if user_id is not None and self.session.get(User, user_id) is None:
                raise ValueError(f"Unknown {label} id: {user_id}")

        task = requirement.task
        if task is None:
            task = RequirementTask(requirement_id=requirement.id, created_by=created_by)
            requirement.task = task
        self._assign(task, payload.model_dump())
        self.session.commit()
        return task
