"""FastAPI application entry point."""

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cli.config_models import BoomerConfig
from observability import log_run_summary
from store import DataStore
from voice.factory import Collaborators
from web.deps import get_config, verify_startup
from web.routes import health, voice
from web.sessions import SessionRegistry

logger = structlog.get_logger()


def create_app(
    config: BoomerConfig | None = None,
    store: DataStore | None = None,
    collaborators: Collaborators | None = None,
) -> FastAPI:
    """Build the app. Anything not injected is created from config at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = config or get_config()
        app.state.config = cfg
        app.state.collaborators = verify_startup(cfg, collaborators)
        app.state.store = store or DataStore(cfg.paths.db_path)
        app.state.registry = SessionRegistry()
        logger.info("web.startup", db_path=str(app.state.store.db_path))
        yield
        app.state.registry.close_all()
        log_run_summary()
        logger.info("web.shutdown")

    app = FastAPI(
        title="Boomer AI",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS: allow frontend origin
    frontend_origin = os.getenv("FRONTEND_ORIGIN", "http://localhost:3000")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[frontend_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(voice.router)
    return app


app = create_app()
