"""
Lifecycle Engine: periodic background pass that advances open bookings.

Workflow per tick:
1. Load all bookings (bounded retry + timeout; a failed load ends the pass)
2. For each booking with a ticker edge (see lifecycle.TICKER_EDGES):
   a. Draw a random number; skip unless it exceeds the edge threshold
   b. Persist the new status (under the shared write lock)
   c. Emit exactly one notification for the transition
3. A failure on one booking is logged and the pass continues

The draw simulates backend event arrival (payment webhook, owner approval).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from islanders.core import lifecycle
from islanders.core.bookings import BookingService
from islanders.core.errors import PersistenceError
from islanders.core.schemas import Booking, NotificationType

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    scanned: int = 0
    advanced: int = 0
    notified: int = 0
    failed: int = 0
    skipped: bool = False


class LifecycleEngine:
    """
    Usage:
        engine = LifecycleEngine(service)
        engine.start()          # inside a running event loop
        ...
        await engine.stop()
    """

    def __init__(
        self,
        service: BookingService,
        interval: float | None = None,
        draw: Callable[[], float] | None = None,
    ):
        self.service = service
        self.settings = service.settings
        self.interval = interval if interval is not None else self.settings.ticker_interval_seconds
        self.draw = draw or service.rng.random
        self._task: asyncio.Task | None = None
        self._tick_lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="lifecycle-engine")
        logger.info("Lifecycle engine started (interval=%ss)", self.interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Lifecycle engine stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.tick()
            except Exception:
                logger.exception("Lifecycle tick failed")

    async def tick(self) -> TickReport:
        """Run one pass. Returns immediately if the previous pass is still running."""
        if self._tick_lock.locked():
            logger.debug("Previous tick still running; skipping")
            return TickReport(skipped=True)

        async with self._tick_lock:
            report = TickReport()
            try:
                bookings = await self.service.load_all()
            except PersistenceError:
                # load_all is time-bounded; the tick lock is always released.
                report.failed += 1
                logger.exception("Lifecycle tick could not load bookings")
                return report
            report.scanned = len(bookings)

            for booking in bookings:
                try:
                    await self._process(booking, report)
                except Exception:
                    report.failed += 1
                    logger.exception("Lifecycle step failed for booking %s", booking.id)

            if report.advanced or report.notified or report.failed:
                logger.info(
                    "Tick done: scanned=%s advanced=%s notified=%s failed=%s",
                    report.scanned,
                    report.advanced,
                    report.notified,
                    report.failed,
                )
            return report

    async def _process(self, booking: Booking, report: TickReport) -> None:
        edge = lifecycle.ticker_edge_for(booking.status)
        if edge is None:
            return

        threshold = getattr(self.settings, edge.threshold_key)
        if self.draw() <= threshold:
            return

        if edge.target is not None:
            updated = await self.service.advance(booking.id, edge.source, edge.target)
            if updated is None:
                return
            report.advanced += 1
            booking = updated

        driver = booking.driver_details.name if booking.driver_details else "Your driver"
        await self.service.emitter.emit(
            booking.user_id,
            NotificationType.BOOKING,
            edge.title,
            edge.message.format(title=booking.item_title, driver=driver),
            booking_id=booking.id,
        )
        report.notified += 1
