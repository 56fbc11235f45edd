"""Runtime configuration helpers shared by CLI commands."""

from __future__ import annotations

from dataclasses import dataclass, field

from pma.api.ai import AiSettings
from pma.api.database import PmaSettings
from pma.env import load_env


@dataclass(frozen=True)
class RuntimeConfig:
    """Resolved configuration for command handlers."""

    log_level: str
    settings: PmaSettings = field(default_factory=PmaSettings)
    ai_settings: AiSettings = field(default_factory=AiSettings)


def bootstrap() -> None:
    """Load environment variables once."""

    load_env()


def build_runtime_config(*, log_level: str, database_url: str | None = None) -> RuntimeConfig:
    """Construct a :class:`RuntimeConfig` from the environment and CLI overrides."""

    settings = PmaSettings.from_env()
    if database_url:
        settings.database_url = database_url
    return RuntimeConfig(
        log_level=log_level,
        settings=settings,
        ai_settings=AiSettings.from_env(),
    )
