"""Settings, engine and session factory for the PMA API."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .audit import install_audit_listener
from .models import Base

__all__ = ["PmaSettings", "PmaDatabase", "init_engine"]

DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


def _split_csv(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(slots=True)
class PmaSettings:
    """Runtime configuration for the PMA API."""

    database_url: str = "sqlite+pysqlite:///./pma.db"
    environment: str = "production"
    cors_origins: tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)
    design_department_id: int = 3
    qc_department_id: int = 5
    upload_dir: str = "uploads"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @classmethod
    def from_env(cls) -> "PmaSettings":
        database_url = (
            os.getenv("PMA_DB_URL")
            or os.getenv("DATABASE_URL")
            or "sqlite+pysqlite:///./pma.db"
        )
        return cls(
            database_url=database_url,
            environment=os.getenv("PMA_ENVIRONMENT", "production"),
            cors_origins=_split_csv(os.getenv("PMA_CORS_ORIGINS")) or DEFAULT_CORS_ORIGINS,
            design_department_id=int(os.getenv("PMA_DESIGN_DEPARTMENT_ID", "3")),
            qc_department_id=int(os.getenv("PMA_QC_DEPARTMENT_ID", "5")),
            upload_dir=os.getenv("PMA_UPLOAD_DIR", "uploads"),
        )


def normalize_database_url(database_url: str) -> str:
    """Force the psycopg (v3) driver for PostgreSQL URLs."""

    if database_url.startswith("postgres://"):
        return "postgresql+psycopg://" + database_url[len("postgres://") :]
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return database_url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE rules unless this is set per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_engine(settings: PmaSettings, *, create_tables: bool = True) -> Engine:
    """Create an SQLAlchemy engine and, by default, the schema."""

    database_url = normalize_database_url(settings.database_url)

    engine_kwargs: dict = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        from sqlalchemy.pool import StaticPool

        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_size"] = 10
        engine_kwargs["max_overflow"] = 20

    engine = create_engine(database_url, **engine_kwargs)
    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    if create_tables:
        Base.metadata.create_all(engine)
    return engine


class PmaDatabase:
    """Session factory wrapper with change auditing enabled."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        install_audit_listener(self._session_factory)

    def session(self, actor: str | None = None) -> Session:
        session = self._session_factory()
        session.info["actor"] = actor or "anonymous"
        return session

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)
