"""
Notification Emitter: builds user notifications, stores them, and fans out to subscribers.

Usage:
    emitter = NotificationEmitter(store)
    unsubscribe = emitter.subscribe(on_notification)
    await emitter.emit("user-1", NotificationType.BOOKING, "Viewing Approved", "...")
    unsubscribe()
"""

from __future__ import annotations

import inspect
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Union

from islanders.config import Settings, get_settings
from islanders.core.retry import with_retry
from islanders.core.schemas import NotificationType, UserNotification
from islanders.core.stores import NotificationStore

logger = logging.getLogger(__name__)

Subscriber = Callable[[UserNotification], Union[None, Awaitable[None]]]


class NotificationEmitter:
    def __init__(self, store: NotificationStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback (sync or async). Returns a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def emit(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        booking_id: str | None = None,
    ) -> UserNotification:
        notification = UserNotification(
            id=f"NOTIF-{uuid.uuid4().hex[:12]}",
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            booking_id=booking_id,
        )
        await with_retry(
            lambda: self.store.append(notification),
            attempts=self.settings.persistence_retry_attempts,
            base_delay=self.settings.persistence_retry_base_delay,
            timeout=self.settings.persistence_timeout_seconds,
            label=f"append notification {notification.id}",
        )
        logger.info("Notification for %s: %s", user_id, title)

        for callback in list(self._subscribers):
            try:
                result = callback(notification)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Notification subscriber %r failed", callback)

        return notification

    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        return await self.store.mark_read(user_id, notification_id)

    async def list_for_user(self, user_id: str, unread_only: bool = False) -> list[UserNotification]:
        return await self.store.list_for_user(user_id, unread_only=unread_only)
