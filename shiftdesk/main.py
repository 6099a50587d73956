from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from starlette.middleware.sessions import SessionMiddleware

from shiftdesk.db import filters as _filters  # noqa: F401  (register SQLAlchemy filters)
from shiftdesk.db.init_db import init_db
from shiftdesk.logging_config import configure_app_logging
from shiftdesk.routers import admin, auth, daily_notes, dashboard, health, posts, shift_details, tasks
from shiftdesk.security.config import load_security_config
from shiftdesk.security.dependencies import enforce_pipeline
from shiftdesk.security.diagnostics import configure_decision_logging
from shiftdesk.security.pipeline import install_pipeline
from shiftdesk.settings import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_app_logging(settings.log_level)
        configure_decision_logging(settings.authz_log_sample_rate)
        logger.info("App startup beginning")

        config = load_security_config(settings.resolved_security_config_path())
        app.state.security_config = config
        logger.info("Loaded security config: %s", settings.resolved_security_config_path())

        init_db(config, seed_demo_data=settings.seed_demo_data)
        logger.info("Database initialized (tables ensured, catalog seeded)")

        yield

    # Global dependency: every route goes through the request pipeline.
    app = FastAPI(title=settings.app_name, dependencies=[Depends(enforce_pipeline)], lifespan=lifespan)

    install_pipeline(app)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
    )

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(dashboard.router)
    app.include_router(admin.router)
    app.include_router(posts.router)
    app.include_router(tasks.router)
    app.include_router(shift_details.router)
    app.include_router(daily_notes.router)

    return app


app = create_app()
