"""FastAPI application factory for the PMA API."""

from __future__ import annotations

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from .. import __version__
from .ai import AiSettings
from .database import PmaDatabase, PmaSettings, init_engine
from .deps import get_session
from .errors import install_exception_handlers
from .hub import NotificationHub
from .hub import router as hub_router
from .middleware import TRACE_HEADER, install_request_logging
from .routers import API_ROUTERS

__all__ = ["create_app"]


def create_app(
    settings: PmaSettings | None = None,
    ai_settings: AiSettings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or PmaSettings.from_env()
    ai_settings = ai_settings or AiSettings.from_env()
    engine = init_engine(settings)
    database = PmaDatabase(engine=engine)

    app = FastAPI(
        title="PMA API",
        version=__version__,
        description="프로젝트/요구사항/작업 관리 및 업무량 분석 API",
    )
    app.state.settings = settings
    app.state.ai_settings = ai_settings
    app.state.database = database
    app.state.hub = NotificationHub()

    install_request_logging(app)
    # CORS는 마지막에 추가해야 가장 바깥에서 동작
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[TRACE_HEADER],
    )
    install_exception_handlers(app, development=settings.is_development)

    for router in API_ROUTERS:
        app.include_router(router)
    app.include_router(hub_router)

    @app.get("/api/healthz", tags=["health"])
    def healthz(session: Session = Depends(get_session)) -> dict[str, str]:
        session.execute(text("SELECT 1"))
        return {"status": "ok", "database": "ok"}

    return app
