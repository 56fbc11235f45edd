"""PMA REST API: projects, tasks, planning, organization and workload analytics."""

from .ai import AiSettings
from .app import create_app
from .database import PmaDatabase, PmaSettings, init_engine

__all__ = ["create_app", "PmaSettings", "AiSettings", "PmaDatabase", "init_engine"]
