"""Self-clearing status notifications."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import TypeAlias

from loguru import logger

from cancorpus.types import Notification, NotificationKind

DEFAULT_TIMEOUT_SECONDS = 3.0

NotificationListener: TypeAlias = Callable[[Notification | None], None]


class NotificationTimer:
    """Holds at most one notification and clears it after its timeout.

    A new :meth:`show` cancels the pending clear, so an old timer never
    removes a newer message.
    """

    def __init__(self, default_timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.default_timeout = default_timeout
        self._current: Notification | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._listeners: list[NotificationListener] = []

    @property
    def current(self) -> Notification | None:
        return self._current

    def show(self, message: str, kind: NotificationKind = "info", timeout: float | None = None) -> Notification:
        timeout = self.default_timeout if timeout is None else timeout
        self._cancel_timer()
        notification = Notification(message=message, kind=kind, expires_at=time.monotonic() + timeout)
        self._current = notification
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (synchronous caller): the message stays until replaced.
            logger.debug("notification.no_loop message={}", message)
        else:
            self._timer = loop.call_later(timeout, self._expire, notification)
        self._emit(notification)
        return notification

    def clear(self) -> None:
        self._cancel_timer()
        if self._current is None:
            return
        self._current = None
        self._emit(None)

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _expire(self, notification: Notification) -> None:
        self._timer = None
        if self._current is notification:
            self._current = None
            self._emit(None)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _emit(self, notification: Notification | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception:
                logger.exception("notification.listener.error")
