"""Single-flight guard over remote round-trips."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TypeAlias
from contextlib import contextmanager

from loguru import logger

BusyListener: TypeAlias = Callable[[bool], None]


class MutationGuard:
    """Non-blocking latch: at most one round-trip in flight per client.

    A failed :meth:`try_acquire` means the caller drops its action. Nothing
    is queued.
    """

    def __init__(self) -> None:
        self._busy = False
        self._listeners: list[BusyListener] = []

    @property
    def busy(self) -> bool:
        return self._busy

    def try_acquire(self) -> bool:
        if self._busy:
            return False
        self._set(True)
        return True

    def release(self) -> None:
        self._set(False)

    @contextmanager
    def hold(self) -> Iterator[bool]:
        """Yield whether the guard was acquired; release on exit if it was."""
        acquired = self.try_acquire()
        try:
            yield acquired
        finally:
            if acquired:
                self.release()

    def subscribe(self, listener: BusyListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, busy: bool) -> None:
        changed = busy != self._busy
        self._busy = busy
        if not changed:
            return
        for listener in list(self._listeners):
            try:
                listener(busy)
            except Exception:
                logger.exception("guard.listener.error")
