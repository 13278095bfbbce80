"""Contracts for the remote corpus service and the identity provider."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias


class CallHandle(Protocol):
    """Capability for making corpus calls under one identity."""

    async def list_entries(self) -> list[str]: ...

    async def add_entry(self, text: str) -> None: ...

    async def edit_entry(self, position: int, text: str) -> None: ...

    async def delete_entry(self, position: int) -> None: ...

    async def clear_entries(self) -> None: ...

    async def ask(self, question: str) -> str: ...


class IdentityProvider(Protocol):
    """Source of call handles. Its handshake protocol is opaque to the client."""

    async def initialize(self) -> None: ...

    async def is_authenticated(self) -> bool: ...

    async def login(self, on_success: Callable[[], Awaitable[None]]) -> None: ...

    async def logout(self) -> None: ...

    def get_handle(self) -> CallHandle: ...

    def principal(self) -> str: ...


HandleFactory: TypeAlias = Callable[[str | None], CallHandle]
"""Builds a handle for a credential token, ``None`` meaning anonymous."""
