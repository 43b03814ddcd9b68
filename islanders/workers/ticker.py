"""
Ticker Worker: Celery task that runs one lifecycle pass over stored bookings.

Use with `storage_backend=database`: with the in-memory backend each worker
process would only see its own (empty) stores.

Celery beat fires the task every few seconds. Each worker process runs its
tasks one at a time, so the engine locks only order writes inside a process.
Across processes (API, other workers) a transition is applied by a single
conditional UPDATE (`save_if_status`); a tick that lost the race skips the
booking and emits nothing.
"""

from __future__ import annotations

import asyncio
import logging

from islanders.workers.celery_app import celery_app, settings

logger = logging.getLogger(__name__)

# One asyncio loop and one runtime per worker process. The engine's locks are
# bound to the loop they were first used on.
_worker_loop: asyncio.AbstractEventLoop | None = None
_runtime = None


def _get_worker_loop() -> asyncio.AbstractEventLoop:
    global _worker_loop
    if _worker_loop is None or _worker_loop.is_closed():
        _worker_loop = asyncio.new_event_loop()
    asyncio.set_event_loop(_worker_loop)
    return _worker_loop


def _get_runtime():
    global _runtime
    if _runtime is None:
        from islanders.core.runtime import build_runtime

        _runtime = build_runtime()
    return _runtime


@celery_app.task(name="islanders.advance_bookings")
def advance_bookings_task() -> dict:
    """
    Celery task entry point. Runs a single lifecycle tick.

    Scheduled via celery beat every `ticker_interval_seconds`.
    """
    loop = _get_worker_loop()
    report = loop.run_until_complete(_advance_bookings())
    return {
        "scanned": report.scanned,
        "advanced": report.advanced,
        "notified": report.notified,
        "failed": report.failed,
        "skipped": report.skipped,
    }


async def _advance_bookings():
    runtime = _get_runtime()
    report = await runtime.engine.tick()
    logger.debug("advance_bookings: %s", report)
    return report


# --- Celery Beat Schedule ---

celery_app.conf.beat_schedule = {
    "advance-bookings": {
        "task": "islanders.advance_bookings",
        "schedule": settings.ticker_interval_seconds,
    },
}
