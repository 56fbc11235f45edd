"""Automatic change capture for audited entities.

Every flush that inserts, updates or deletes a model flagged with
``__audited__ = True`` writes one ``ChangeGroup`` row plus a ``ChangeItem`` per
touched column. The acting user comes from ``session.info["actor"]``.
"""

from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable

from sqlalchemy import event, insert, inspect
from sqlalchemy.orm import Session, sessionmaker

from .models import Base, ChangeGroup, ChangeItem, utcnow

__all__ = ["install_audit_listener", "normalize_actor", "capture_changes"]

logger = logging.getLogger(__name__)

MAX_VALUE_LENGTH = 255
IGNORED_FIELDS = frozenset({"created_at", "updated_at"})


def normalize_actor(raw: str | None) -> str:
    """Strip a ``DOMAIN\\`` prefix from a login name; blank means anonymous."""

    if not raw or not raw.strip():
        return "anonymous"
    name = raw.strip()
    if "\\" in name:
        name = name.rsplit("\\", 1)[1]
    return name or "anonymous"


def _format_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (dt.datetime, dt.date)):
        text = value.isoformat()
    elif isinstance(value, Decimal):
        text = format(value, "f")
    else:
        text = str(value)
    return text[:MAX_VALUE_LENGTH]


def _is_audited(instance: Any) -> bool:
    return isinstance(instance, Base) and getattr(type(instance), "__audited__", False)


def _column_keys(instance: Any) -> Iterable[str]:
    for attr in inspect(instance).mapper.column_attrs:
        if attr.key not in IGNORED_FIELDS:
            yield attr.key


def _inserted_items(instance: Any) -> list[tuple[str, str | None, str | None]]:
    items = []
    for key in _column_keys(instance):
        new_value = _format_value(getattr(instance, key))
        if new_value is not None:
            items.append((key, None, new_value))
    return items


def _updated_items(instance: Any) -> list[tuple[str, str | None, str | None]]:
    state = inspect(instance)
    items = []
    for key in _column_keys(instance):
        history = state.attrs[key].history
        if not history.has_changes():
            continue
        old_value = _format_value(history.deleted[0]) if history.deleted else None
        new_value = _format_value(history.added[0]) if history.added else None
        if old_value != new_value:
            items.append((key, old_value, new_value))
    return items


def _deleted_items(instance: Any) -> list[tuple[str, str | None, str | None]]:
    items = []
    for key in _column_keys(instance):
        old_value = _format_value(getattr(instance, key))
        if old_value is not None:
            items.append((key, old_value, None))
    return items


def capture_changes(session: Session) -> list[tuple[str, int, list[tuple[str, str | None, str | None]]]]:
    """Return ``(entity_type, entity_id, items)`` for the pending flush."""

    changes = []
    for instance in session.new:
        if _is_audited(instance):
            changes.append((type(instance).__name__, instance.id, _inserted_items(instance)))
    for instance in session.dirty:
        if _is_audited(instance) and session.is_modified(instance, include_collections=False):
            items = _updated_items(instance)
            if items:
                changes.append((type(instance).__name__, instance.id, items))
    for instance in session.deleted:
        if _is_audited(instance):
            changes.append((type(instance).__name__, instance.id, _deleted_items(instance)))
    return changes


def _write_changes(session: Session, flush_context) -> None:
    changes = capture_changes(session)
    if not changes:
        return

    actor = session.info.get("actor") or "anonymous"
    connection = session.connection()
    changed_at = utcnow()
    for entity_type, entity_id, items in changes:
        result = connection.execute(
            insert(ChangeGroup.__table__).values(
                entity_type=entity_type,
                entity_id=entity_id,
                changed_by=actor[:300],
                changed_at=changed_at,
            )
        )
        group_id = result.inserted_primary_key[0]
        if items:
            connection.execute(
                insert(ChangeItem.__table__),
                [
                    {
                        "change_group_id": group_id,
                        "field_name": field_name[:200],
                        "old_value": old_value,
                        "new_value": new_value,
                    }
                    for field_name, old_value, new_value in items
                ],
            )
    logger.debug("Recorded %d change group(s) for %s", len(changes), actor)


def install_audit_listener(factory: sessionmaker) -> None:
    """Attach the change capture hook to sessions created by *factory*."""

    if not event.contains(factory, "after_flush", _write_changes):
        event.listen(factory, "after_flush", _write_changes)
