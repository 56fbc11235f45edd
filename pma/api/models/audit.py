"""Field-level change history captured on flush."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow

__all__ = ["ChangeGroup", "ChangeItem"]


class ChangeGroup(Base):
    """One insert/update/delete of an audited entity."""

    __tablename__ = "change_groups"
    __table_args__ = (
        Index("ix_change_groups_entity", "entity_type", "entity_id"),
        Index("ix_change_groups_changed_at", "changed_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    entity_type: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    changed_by: Mapped[str] = mapped_column(String(300), nullable=False)
    changed_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    items: Mapped[list["ChangeItem"]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChangeItem.id",
    )


class ChangeItem(Base):
    __tablename__ = "change_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    change_group_id: Mapped[int] = mapped_column(
        ForeignKey("change_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    field_name: Mapped[str] = mapped_column(String(200), nullable=False)
    old_value: Mapped[str | None] = mapped_column(String(255))
    new_value: Mapped[str | None] = mapped_column(String(255))

    group: Mapped[ChangeGroup] = relationship(back_populates="items")
