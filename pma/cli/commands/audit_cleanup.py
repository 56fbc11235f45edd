"""Audit log retention command."""

from __future__ import annotations

from argparse import _SubParsersAction, Namespace

from pma.api.database import PmaDatabase, init_engine
from pma.api.services.audit_logs import DEFAULT_RETENTION_DAYS, AuditLogService

from ..config import RuntimeConfig

__all__ = ["register", "run"]


def register(subparsers: _SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "audit-cleanup", help="Delete change history older than the retention window"
    )
    parser.add_argument(
        "--older-than-days",
        dest="older_than_days",
        type=int,
        default=DEFAULT_RETENTION_DAYS,
        help=f"Retention window in days, 1..3650 (default: {DEFAULT_RETENTION_DAYS})",
    )
    parser.set_defaults(handler=run)


def run(args: Namespace, config: RuntimeConfig) -> None:
    engine = init_engine(config.settings)
    database = PmaDatabase(engine)
    session = database.session("pma-cli")
    try:
        service = AuditLogService(session, config.settings)
        days = service.retention_days(args.older_than_days)
        deleted = service.cleanup(days)
    finally:
        session.close()
        engine.dispose()
    print(f"Deleted {deleted} change group(s) older than {days} days")
