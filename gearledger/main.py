"""ASGI entry point: ``uvicorn gearledger.main:app``."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from . import __version__
from .core import errors
from .core.config import settings
from .core.logging import setup_logging
from .db.migrate import run_migrations
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware

# Importing the models registers their tables on ``Base.metadata``.
from .models import checkout, cohort, damage, equipment, equipment_color, personnel  # noqa: F401
from .routers import checkouts as checkouts_router
from .routers import cohorts as cohorts_router
from .routers import damage as damage_router
from .routers import equipment as equipment_router
from .routers import imports as imports_router
from .routers import maintenance as maintenance_router
from .routers import views as views_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    setup_logging()

    # ``create_all`` covers a brand-new database; ``run_migrations`` brings an
    # older file forward and must run after it.
    Base.metadata.create_all(bind=engine)
    run_migrations(engine)

    app = FastAPI(title=settings.APP_NAME, version=__version__)
    app.add_middleware(RequestIdMiddleware)
    errors.install(app)

    app.include_router(cohorts_router.router)
    app.include_router(checkouts_router.router)
    app.include_router(equipment_router.router)
    app.include_router(damage_router.router)
    app.include_router(views_router.router)
    app.include_router(imports_router.router)
    app.include_router(maintenance_router.router)

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    Instrumentator().instrument(app).expose(app, include_in_schema=False)
    logger.info("app.started", extra={"extra_data": {"database_url": engine.url.render_as_string(hide_password=True)}})
    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("gearledger.main:app", host=settings.HOST, port=settings.PORT, log_config=None)
