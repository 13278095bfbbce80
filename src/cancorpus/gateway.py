"""Gateway from the stores to whichever handle the current session holds."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

from cancorpus.errors import RemoteError, RemoteRejected, RemoteUnavailable, StaleResult
from cancorpus.remote.base import CallHandle
from cancorpus.session import SessionContext

T = TypeVar("T")


class RemoteGateway:
    """Delegates every call to ``context.session.handle`` as it is at call time.

    No retries. Remote failures surface unchanged. A result that arrives
    after the session identity changed raises :class:`StaleResult`.
    """

    def __init__(self, context: SessionContext, *, allow_anonymous_read: bool = True) -> None:
        self.context = context
        self.allow_anonymous_read = allow_anonymous_read

    @property
    def can_read(self) -> bool:
        return self.allow_anonymous_read or self.context.session.authenticated

    async def list(self) -> list[str]:
        return await self._read("list", lambda handle: handle.list_entries())

    async def add(self, text: str) -> None:
        await self._mutate("add", lambda handle: handle.add_entry(text))

    async def edit(self, position: int, text: str) -> None:
        await self._mutate("edit", lambda handle: handle.edit_entry(position, text))

    async def delete(self, position: int) -> None:
        await self._mutate("delete", lambda handle: handle.delete_entry(position))

    async def clear(self) -> None:
        await self._mutate("clear", lambda handle: handle.clear_entries())

    async def ask(self, question: str) -> str:
        return await self._read("ask", lambda handle: handle.ask(question))

    async def _read(self, operation: str, call: Callable[[CallHandle], Awaitable[T]]) -> T:
        if not self.can_read:
            raise RemoteRejected(f"{operation} requires an authenticated session")
        return await self._dispatch(operation, call)

    async def _mutate(self, operation: str, call: Callable[[CallHandle], Awaitable[T]]) -> T:
        if not self.context.session.authenticated:
            raise RemoteRejected(f"{operation} requires an authenticated session")
        return await self._dispatch(operation, call)

    async def _dispatch(self, operation: str, call: Callable[[CallHandle], Awaitable[T]]) -> T:
        session = self.context.session
        if session.handle is None:
            raise RemoteUnavailable("no call handle; the session is not initialized")
        try:
            result = await call(session.handle)
        except RemoteError as e:
            if not self.context.is_current(session.epoch):
                logger.debug("gateway.stale operation={} epoch={} error={}", operation, session.epoch, e)
                raise StaleResult(operation) from e
            raise
        if not self.context.is_current(session.epoch):
            logger.debug("gateway.stale operation={} epoch={} now={}", operation, session.epoch, self.context.epoch)
            raise StaleResult(operation, result)
        return result
