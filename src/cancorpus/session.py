"""Session context and authentication lifecycle."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeAlias

from loguru import logger

from cancorpus.errors import AuthUnavailable
from cancorpus.guard import MutationGuard
from cancorpus.remote.base import IdentityProvider
from cancorpus.types import Session

SessionListener: TypeAlias = Callable[[Session], Awaitable[None]]


class SessionContext:
    """State shared by every component of one client: the Session and the guard.

    Only :class:`SessionManager` replaces the session; other components read
    :attr:`session` at call time and never keep the handle.
    """

    def __init__(self, guard: MutationGuard | None = None) -> None:
        self.guard = guard or MutationGuard()
        self._session = Session(handle=None)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def epoch(self) -> int:
        return self._session.epoch

    def is_current(self, epoch: int) -> bool:
        return self._session.epoch == epoch

    def replace(self, session: Session) -> Session:
        """Install ``session`` as a whole, stamping it with the next epoch."""
        self._session = Session(
            handle=session.handle,
            authenticated=session.authenticated,
            principal=session.principal,
            epoch=self._session.epoch + 1,
        )
        return self._session


class SessionManager:
    """Owns login/logout transitions and announces handle replacement."""

    def __init__(self, context: SessionContext, provider: IdentityProvider) -> None:
        self.context = context
        self.provider = provider
        self._initialized = False
        self._listeners: list[SessionListener] = []

    @property
    def current(self) -> Session:
        return self.context.session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def initialize(self) -> Session:
        await self.provider.initialize()
        self._initialized = True
        session = await self._refresh()
        logger.info("session.initialized authenticated={} principal={}", session.authenticated, session.principal)
        return session

    async def login(self) -> Session:
        self._require_initialized()
        await self.provider.login(on_success=self._on_login)
        return self.current

    async def logout(self) -> Session:
        self._require_initialized()
        await self.provider.logout()
        session = await self._refresh()
        logger.info("session.logout principal={}", session.principal)
        return session

    async def _on_login(self) -> None:
        session = await self._refresh()
        logger.info("session.login principal={}", session.principal)

    async def _refresh(self) -> Session:
        authenticated = await self.provider.is_authenticated()
        session = self.context.replace(
            Session(
                handle=self.provider.get_handle(),
                authenticated=authenticated,
                principal=self.provider.principal(),
            )
        )
        await self._notify(session)
        return session

    async def _notify(self, session: Session) -> None:
        for listener in list(self._listeners):
            try:
                await listener(session)
            except Exception:
                logger.exception("session.listener.error epoch={}", session.epoch)

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise AuthUnavailable("identity provider is not initialized")
