"""Shared fixtures: a file backed SQLite database with change capture enabled."""

from __future__ import annotations

from pathlib import Path

import pytest

from pma.api.database import PmaDatabase, PmaSettings, init_engine


@pytest.fixture()
def settings(tmp_path: Path) -> PmaSettings:
    return PmaSettings(
        database_url=f"sqlite:///{tmp_path / 'pma.db'}",
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture()
def database(settings: PmaSettings):
    engine = init_engine(settings)
    yield PmaDatabase(engine)
    engine.dispose()


@pytest.fixture()
def session(database: PmaDatabase):
    session = database.session("tester")
    yield session
    session.close()
