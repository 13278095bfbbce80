"""Client composition: one shared context wired to every component."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import httpx
from loguru import logger

from cancorpus.config import Settings
from cancorpus.entries import Confirm, EntryListStore
from cancorpus.errors import AuthUnavailable
from cancorpus.gateway import RemoteGateway
from cancorpus.guard import MutationGuard
from cancorpus.identity import LocalIdentityProvider
from cancorpus.notifications import NotificationTimer
from cancorpus.remote.base import HandleFactory, IdentityProvider
from cancorpus.remote.http import HttpCallHandle, build_http_client
from cancorpus.remote.local import LocalCallHandle, LocalCorpus
from cancorpus.session import SessionContext, SessionManager
from cancorpus.transcript import TranscriptStore
from cancorpus.types import Session

LOCAL_CORPUS_FILE = "corpus.json"


class CorpusClient:
    """Session, stores and notifications for one running client."""

    def __init__(
        self,
        provider: IdentityProvider,
        *,
        allow_anonymous_read: bool = True,
        notification_timeout: float = 3.0,
        confirm: Confirm | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.context = SessionContext(MutationGuard())
        self.notifications = NotificationTimer(notification_timeout)
        self.sessions = SessionManager(self.context, provider)
        self.gateway = RemoteGateway(self.context, allow_anonymous_read=allow_anonymous_read)
        self.entries = EntryListStore(self.context, self.gateway, self.notifications, confirm=confirm)
        self.transcript = TranscriptStore(self.context, self.gateway, self.notifications)
        self._http_client = http_client
        self.sessions.subscribe(self._on_session_change)

    @property
    def guard(self) -> MutationGuard:
        return self.context.guard

    @property
    def session(self) -> Session:
        return self.context.session

    async def start(self) -> Session:
        return await self.sessions.initialize()

    async def login(self) -> Session:
        try:
            return await self.sessions.login()
        except AuthUnavailable:
            self.notifications.show("Auth client not ready", "error")
            return self.session

    async def logout(self) -> Session:
        try:
            return await self.sessions.logout()
        except AuthUnavailable:
            self.notifications.show("Auth client not ready", "error")
            return self.session

    def whoami(self) -> str:
        return self.session.principal or "unknown"

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()

    async def __aenter__(self) -> CorpusClient:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def _on_session_change(self, session: Session) -> None:
        logger.debug("client.session.changed epoch={} authenticated={}", session.epoch, session.authenticated)
        await self.entries.reload()


def build_client(
    settings: Settings,
    *,
    confirm: Confirm | None = None,
    approve_login: Callable[[], Awaitable[bool]] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CorpusClient:
    """Build a client against ``settings.remote_url`` or the local corpus."""

    home = settings.resolve_home()
    http_client: httpx.AsyncClient | None = None
    factory: HandleFactory
    if settings.remote_url:
        http_client = build_http_client(
            settings.remote_url,
            timeout=settings.request_timeout_seconds,
            transport=transport,
        )
        factory = _http_factory(http_client)
    else:
        factory = _local_factory(LocalCorpus(home / LOCAL_CORPUS_FILE))

    provider = LocalIdentityProvider(home, factory, approve=approve_login)
    return CorpusClient(
        provider,
        allow_anonymous_read=settings.allow_anonymous_read,
        notification_timeout=settings.notification_timeout_seconds,
        confirm=confirm,
        http_client=http_client,
    )


def _http_factory(client: httpx.AsyncClient) -> HandleFactory:
    def factory(token: str | None) -> HttpCallHandle:
        return HttpCallHandle(client, token)

    return factory


def _local_factory(corpus: LocalCorpus) -> HandleFactory:
    def factory(token: str | None) -> LocalCallHandle:
        return LocalCallHandle(corpus, token)

    return factory
