"""Command registrations for the PMA CLI."""

from __future__ import annotations

from argparse import _SubParsersAction

from . import audit_cleanup, init_db, serve

__all__ = ["register"]


def register(subparsers: _SubParsersAction) -> None:
    """Register all CLI commands with *subparsers*."""

    serve.register(subparsers)
    init_db.register(subparsers)
    audit_cleanup.register(subparsers)
