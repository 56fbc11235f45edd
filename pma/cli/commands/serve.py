"""HTTP server command."""

from __future__ import annotations

from argparse import _SubParsersAction, Namespace

import uvicorn

from ..config import RuntimeConfig

__all__ = ["register", "run"]


def register(subparsers: _SubParsersAction) -> None:
    parser = subparsers.add_parser("serve", help="Start the PMA API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.set_defaults(handler=run)


def run(args: Namespace, config: RuntimeConfig) -> None:
    from pma.api.app import create_app

    host = args.host or "127.0.0.1"
    port = args.port or 8000

    print(f"🚀 Starting PMA API server on http://{host}:{port}")
    print(f"📚 API docs at http://{host}:{port}/docs")

    if args.reload:
        # reload는 import 문자열이 필요하므로 환경 변수 설정을 그대로 사용
        uvicorn.run(
            "pma.api.app:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_level=config.log_level.lower(),
        )
        return

    app = create_app(config.settings, config.ai_settings)
    uvicorn.run(app, host=host, port=port, log_level=config.log_level.lower())
