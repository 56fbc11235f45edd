"""Schema creation command."""

from __future__ import annotations

from argparse import _SubParsersAction, Namespace

import structlog

from pma.api.database import init_engine

from ..config import RuntimeConfig

__all__ = ["register", "run"]

logger = structlog.get_logger(__name__)


def register(subparsers: _SubParsersAction) -> None:
    parser = subparsers.add_parser("init-db", help="Create all PMA tables")
    parser.set_defaults(handler=run)


def run(args: Namespace, config: RuntimeConfig) -> None:
    engine = init_engine(config.settings, create_tables=True)
    backend = engine.url.get_backend_name()
    logger.info("schema_created", database=engine.url.render_as_string(hide_password=True))
    engine.dispose()
    print(f"✅ Tables created ({backend})")
