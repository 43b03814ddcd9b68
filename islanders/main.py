from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from islanders.api.v1.bookings import router as bookings_router
from islanders.api.v1.catalog import router as catalog_router
from islanders.api.v1.health import router as health_router
from islanders.api.v1.notifications import router as notifications_router
from islanders.config import get_settings
from islanders.core.runtime import build_runtime


settings = get_settings()

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    runtime = app.state.runtime
    if runtime.settings.run_lifecycle_engine:
        runtime.engine.start()
    logger.info("Application startup completed")
    try:
        yield
    finally:
        await runtime.engine.stop()
        if runtime.settings.storage_backend == "database":
            from islanders.db import dispose_engine

            await dispose_engine()
        logger.info("Application shutdown completed")


app = FastAPI(
    title="Easy Islanders",
    description="Booking lifecycle service for the Easy Islanders marketplace",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)
app.state.runtime = build_runtime(settings)

origins = (
    [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
    if settings.allowed_origins != "*"
    else ["*"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(catalog_router)
app.include_router(bookings_router)
app.include_router(notifications_router)
