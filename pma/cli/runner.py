"""Command-line entry point for the PMA API."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Callable, List, Optional

import structlog

from . import commands
from .config import RuntimeConfig, bootstrap, build_runtime_config

CommandHandler = Callable[[argparse.Namespace, RuntimeConfig], None]

LOG_FORMATS = ("kv", "json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pma-cli",
        description="Operator tools for the project management API.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (CRITICAL, ERROR, WARNING, INFO, DEBUG). Default: INFO",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=os.getenv("PMA_LOG_FORMAT", "kv"),
        help="Render log lines as key=value pairs or JSON (env: PMA_LOG_FORMAT)",
    )
    parser.add_argument(
        "--database-url",
        dest="database_url",
        help="Override the database URL (env: PMA_DB_URL / DATABASE_URL)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    commands.register(subparsers)
    return parser


def _shared_processors() -> list:
    # request trace ids bound by the API middleware ride along via contextvars
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
    ]


def configure_logging(level_name: str, log_format: str = "kv") -> None:
    """Route structlog and stdlib logging through one stderr handler."""

    level_value = getattr(logging, level_name.upper(), logging.INFO)
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "logger", "event"],
            sort_keys=True,
        )

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_shared_processors(),
        )
    )
    handler.setLevel(level_value)
    logging.basicConfig(level=level_value, handlers=[handler], force=True)


def main(argv: Optional[List[str]] = None) -> None:
    bootstrap()
    parser = build_parser()
    args = parser.parse_args(argv)

    level_name = str(args.log_level).upper()
    configure_logging(level_name, args.log_format)

    handler: Optional[CommandHandler] = getattr(args, "handler", None)
    if not callable(handler):
        parser.error("Command handler missing")

    handler(args, build_runtime_config(log_level=level_name, database_url=args.database_url))


if __name__ == "__main__":  # pragma: no cover
    main()
