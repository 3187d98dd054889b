"""
Background dispatcher decoupling notifications from the commit path.

The dialogue engine publishes a booking-created event and returns its reply
immediately; a single worker task drains the queue and calls the notifier.
Notifier failures are logged and dropped, never retried.

Usage:
    dispatcher = NotificationDispatcher(LoggingNotifier())
    dispatcher.start()
    dispatcher.publish(details)
    await dispatcher.join()   # wait until everything queued was handled
    await dispatcher.stop()
"""

import asyncio
import logging
from typing import Optional

from rental_bot.notifications.notifier import Notifier
from rental_bot.schemas.booking_schema import BookingDetails

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Queue plus one consumer task that feeds a Notifier."""

    def __init__(self, notifier: Notifier, max_pending: int = 100) -> None:
        self._notifier = notifier
        self._queue: "asyncio.Queue[BookingDetails]" = asyncio.Queue(maxsize=max_pending)
        self._task: Optional[asyncio.Task] = None
        self.delivered = 0
        self.failed = 0
        self.dropped = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the worker task. Safe to call multiple times."""
        if self.running:
            logger.debug("Notification dispatcher already running")
            return
        self._task = asyncio.create_task(self._run(), name="notification-dispatcher")
        logger.info("Notification dispatcher started")

    def publish(self, details: BookingDetails) -> bool:
        """Queue an announcement without waiting. Returns False if dropped."""
        try:
            self._queue.put_nowait(details)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("Notification queue full; booking %s not announced", details.booking.id)
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued announcement has been handled."""
        await self._queue.join()

    async def stop(self) -> None:
        """Cancel the worker. Announcements still queued are abandoned."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Notification dispatcher stopped")

    async def _run(self) -> None:
        while True:
            details = await self._queue.get()
            try:
                await self._notifier.announce_booking(details)
                self.delivered += 1
            except asyncio.CancelledError:
                raise
            except Exception:
                self.failed += 1
                logger.exception("Failed to announce booking %s", details.booking.id)
            finally:
                self._queue.task_done()
