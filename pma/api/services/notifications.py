"""In-app notification service."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import select, update

from ..models import Notification, User, utcnow
from ..schemas import activity as schemas
from .base import CrudService, Page

__all__ = ["NotificationService"]


class NotificationService(CrudService[Notification]):
    model = Notification
    entity_name = "Notification"

    def list_notifications(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        user_id: Optional[int] = None,
        is_read: Optional[bool] = None,
    ) -> Page[Notification]:
        stmt = select(Notification)
        if user_id is not None:
            stmt = stmt.where(Notification.user_id == user_id)
        if is_read is not None:
            stmt = stmt.where(Notification.is_read == is_read)
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        return self._paginate(stmt, page, limit)

    def for_user(self, user_id: int, *, unread_only: bool = False) -> Sequence[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        return self.session.scalars(stmt).all()

    def create(self, payload: schemas.NotificationCreateRequest) -> Notification:
        if self.session.get(User, payload.user_id) is None:
            raise ValueError(f"Unknown user id: {payload.user_id}")
        return super().create(payload)

    def update(self, notification_id: int, payload: schemas.NotificationUpdateRequest) -> Notification:
        notification = self._get_or_raise(notification_id)
        self._assign(notification, self._payload_values(payload, partial=True))
        if notification.is_read and notification.read_at is None:
            notification.read_at = utcnow()
        elif not notification.is_read:
            notification.read_at = None
        self.session.commit()
        return notification

    def mark_read(self, notification_id: int) -> Notification:
        notification = self._get_or_raise(notification_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            self.session.commit()
        return notification

    def mark_all_read(self, user_id: int) -> int:
        result = self.session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=utcnow())
        )
        self.session.commit()
        return result.rowcount or 0
