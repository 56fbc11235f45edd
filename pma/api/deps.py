"""Request-scoped dependencies shared by every router."""

from __future__ import annotations

from typing import Callable, Generator, Optional, Type, TypeVar

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from .audit import normalize_actor
from .database import PmaDatabase, PmaSettings
from .models import User

__all__ = [
    "get_settings",
    "get_session",
    "get_actor",
    "get_actor_prs_id",
    "get_current_user",
    "service_dependency",
]

ServiceT = TypeVar("ServiceT")


def get_settings(request: Request) -> PmaSettings:
    return request.app.state.settings


def get_actor(request: Request) -> str:
    """호출자 이름 (X-User-Name, 도메인 접두사 제거)."""
    return normalize_actor(request.headers.get("X-User-Name"))


def get_actor_prs_id(request: Request) -> Optional[int]:
    raw = (request.headers.get("X-User-ID") or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError("X-User-ID header must be an integer") from None


def get_session(
    request: Request, actor: str = Depends(get_actor)
) -> Generator[Session, None, None]:
    database: PmaDatabase = request.app.state.database
    session = database.session(actor)
    try:
        yield session
    finally:
        session.close()


def get_current_user(
    actor: str = Depends(get_actor), session: Session = Depends(get_session)
) -> Optional[User]:
    if actor == "anonymous":
        return None
    return session.scalars(select(User).where(User.user_name == actor)).first()


def service_dependency(service_cls: Type[ServiceT]) -> Callable[..., ServiceT]:
    """Build a ``Depends`` target that constructs *service_cls* per request."""

    def _provide(
        session: Session = Depends(get_session),
        settings: PmaSettings = Depends(get_settings),
    ) -> ServiceT:
        return service_cls(session, settings)

    _provide.__name__ = f"get_{service_cls.__name__}"
    return _provide
