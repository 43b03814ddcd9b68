from __future__ import annotations

from celery import Celery

from islanders.config import get_settings


settings = get_settings()

celery_app = Celery(
    "islanders",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["islanders.workers.ticker"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # A tick is short; a stuck one should not hold the worker past the next beat.
    task_time_limit=60,
    worker_prefetch_multiplier=1,
    result_expires=3600,
)

app = celery_app
celery = celery_app

__all__ = ["celery_app"]
