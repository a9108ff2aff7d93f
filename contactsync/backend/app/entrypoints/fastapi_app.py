# app/entrypoints/fastapi_app.py
from __future__ import annotations

import logging

from fastapi import FastAPI

from ..adapters.clients.user_profile import UserProfileClient
from ..config import settings
from ..db import engine
from ..integrations.hooks import install_callout_hook
from ..jobs.queue import SchedulerJobQueue
from ..jobs.scheduler import build_scheduler
from ..models import Base
from .api.routers import contacts, health, jobs

log = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="contactsync - CRM contact / user-profile sync")
    app.state.user_client = UserProfileClient()
    app.state.callout_hook = None

    @app.on_event("startup")
    async def _startup() -> None:
        # Single place where DB tables are created in dev.
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        scheduler = build_scheduler()
        scheduler.start()
        app.state.scheduler = scheduler

        if settings.CALLOUTS_ENABLED:
            queue = SchedulerJobQueue(scheduler, client=app.state.user_client)
            app.state.callout_hook = install_callout_hook(queue)
            log.info("callout hook installed (remote: %s)", settings.USER_API_BASE_URL)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        if app.state.callout_hook is not None:
            app.state.callout_hook.uninstall()
            app.state.callout_hook = None
        scheduler = getattr(app.state, "scheduler", None)
        if scheduler is not None:
            scheduler.shutdown(wait=False)

    # Routers
    app.include_router(health.router)
    app.include_router(contacts.router)
    app.include_router(jobs.router)

    return app
