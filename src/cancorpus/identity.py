"""File-backed identity provider.

Stands in for a browser auth client: a successful login stores a delegation
(principal + bearer token + expiry) under the client home, and later runs
restore it until it expires.
"""

from __future__ import annotations

import secrets
import time
import uuid
from collections.abc import Awaitable, Callable
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ValidationError

from cancorpus.errors import AuthUnavailable
from cancorpus.remote.base import CallHandle, HandleFactory

ANONYMOUS_PRINCIPAL = "2vxsx-fae"
DEFAULT_TTL_SECONDS = 8 * 60 * 60
IDENTITY_FILE = "identity.json"


class Delegation(BaseModel):
    principal: str
    token: str
    expires_at: float

    def expired(self, now: float | None = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at


class LocalIdentityProvider:
    """Identity provider persisting its delegation to ``<home>/identity.json``."""

    def __init__(
        self,
        home: Path,
        handle_factory: HandleFactory,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        approve: Callable[[], Awaitable[bool]] | None = None,
    ) -> None:
        self.path = home / IDENTITY_FILE
        self._handle_factory = handle_factory
        self._ttl_seconds = ttl_seconds
        self._approve = approve
        self._delegation: Delegation | None = None
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        self._delegation = self._read()
        self._initialized = True

    async def is_authenticated(self) -> bool:
        self._require_initialized()
        if self._delegation is None:
            return False
        if self._delegation.expired():
            logger.info("identity.expired principal={}", self._delegation.principal)
            self._forget()
            return False
        return True

    async def login(self, on_success: Callable[[], Awaitable[None]]) -> None:
        self._require_initialized()
        if self._approve is not None and not await self._approve():
            logger.info("identity.login.declined")
            return
        delegation = Delegation(
            principal=str(uuid.uuid4()),
            token=secrets.token_urlsafe(32),
            expires_at=time.time() + self._ttl_seconds,
        )
        self._write(delegation)
        self._delegation = delegation
        logger.info("identity.login principal={}", delegation.principal)
        await on_success()

    async def logout(self) -> None:
        self._require_initialized()
        self._forget()

    def get_handle(self) -> CallHandle:
        self._require_initialized()
        delegation = self._live_delegation()
        return self._handle_factory(delegation.token if delegation else None)

    def principal(self) -> str:
        self._require_initialized()
        delegation = self._live_delegation()
        return delegation.principal if delegation else ANONYMOUS_PRINCIPAL

    def _live_delegation(self) -> Delegation | None:
        if self._delegation is None or self._delegation.expired():
            return None
        return self._delegation

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise AuthUnavailable("identity provider is not initialized")

    def _read(self) -> Delegation | None:
        if not self.path.exists():
            return None
        try:
            return Delegation.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError):
            logger.warning("identity.unreadable path={}", self.path)
            return None

    def _write(self, delegation: Delegation) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(delegation.model_dump_json(), encoding="utf-8")

    def _forget(self) -> None:
        if self._delegation is not None:
            logger.info("identity.logout principal={}", self._delegation.principal)
        self._delegation = None
        self.path.unlink(missing_ok=True)
