"""Position-addressed view of the remote corpus, plus the edit draft."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeAlias

from loguru import logger

from cancorpus.errors import EmptyInput, RemoteError, StaleResult
from cancorpus.gateway import RemoteGateway
from cancorpus.notifications import NotificationTimer
from cancorpus.session import SessionContext
from cancorpus.types import EditDraft

DEMO_ENTRIES = (
    "Our refund policy: refunds within 30 days with receipt.",
    "Shipping: standard shipping takes 3-5 business days.",
    "Support hours: 9am-5pm Monday to Friday.",
)

Confirm: TypeAlias = Callable[[int, str], Awaitable[bool]]


async def _always_confirm(_position: int, _text: str) -> bool:
    return True


class EntryListStore:
    """Mirror of the remote entry list.

    The remote list is authoritative: every successful mutation is followed
    by a full reload instead of a local prediction, so positions always match
    the remote reindexing.
    """

    def __init__(
        self,
        context: SessionContext,
        gateway: RemoteGateway,
        notifications: NotificationTimer,
        *,
        confirm: Confirm | None = None,
    ) -> None:
        self.context = context
        self.gateway = gateway
        self.notifications = notifications
        self.confirm = confirm or _always_confirm
        self._entries: list[str] = []
        self._draft = EditDraft()

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    @property
    def draft(self) -> EditDraft:
        return self._draft

    async def reload(self) -> bool:
        if not self.gateway.can_read:
            # Hidden from this identity: never show entries fetched under another one.
            self._replace([])
            return True
        try:
            entries = await self.gateway.list()
        except StaleResult:
            logger.debug("entries.reload.stale")
            return False
        except RemoteError as e:
            logger.warning("entries.reload.failed error={}", e)
            self.notifications.show("Failed to load entries", "error")
            return False

        self._replace(entries)
        return True

    def _replace(self, entries: list[str]) -> None:
        self._entries = list(entries)
        position = self._draft.position
        if position is not None and position >= len(self._entries):
            logger.debug("entries.draft.discarded position={}", position)
            self._draft = EditDraft()

    async def add(self, text: str) -> bool:
        text = text.strip()
        if not text:
            raise EmptyInput("entry text is empty")
        return await self._mutate(
            "add",
            lambda: self.gateway.add(text),
            success="Entry added",
            failure="Failed to add entry",
        )

    def begin_edit(self, position: int) -> EditDraft:
        self._check_position(position)
        self._draft = EditDraft(position=position, text=self._entries[position])
        return self._draft

    def update_draft(self, text: str) -> EditDraft:
        if not self._draft.active:
            raise EmptyInput("no entry is being edited")
        self._draft = EditDraft(position=self._draft.position, text=text)
        return self._draft

    def cancel_edit(self) -> None:
        self._draft = EditDraft()

    async def save_edit(self) -> bool:
        draft = self._draft
        position = draft.position
        if position is None:
            raise EmptyInput("no entry is being edited")
        text = draft.text.strip()
        if not text:
            raise EmptyInput("entry text is empty")

        def finish() -> None:
            # Keep a draft the user started while the save was in flight.
            if self._draft is draft:
                self._draft = EditDraft()

        return await self._mutate(
            "edit",
            lambda: self.gateway.edit(position, text),
            success="Entry updated",
            failure="Failed to update entry",
            on_success=finish,
        )

    async def delete(self, position: int) -> bool:
        self._check_position(position)
        text = self._entries[position]
        with self.context.guard.hold() as acquired:
            if not acquired:
                logger.debug("entries.busy operation=delete")
                return False
            if not await self.confirm(position, text):
                logger.debug("entries.delete.declined position={}", position)
                return False
            return await self._round_trip(
                "delete",
                lambda: self.gateway.delete(position),
                success="Entry deleted",
                failure="Failed to delete entry",
            )

    async def clear_all(self) -> bool:
        return await self._mutate(
            "clear",
            self.gateway.clear,
            success="All entries cleared",
            failure="Failed to clear entries",
        )

    async def populate_demo(self) -> bool:
        async def add_all() -> None:
            try:
                for text in DEMO_ENTRIES:
                    await self.gateway.add(text)
            except RemoteError:
                # Some entries may have landed; resync before reporting.
                await self.reload()
                raise

        return await self._mutate(
            "demo",
            add_all,
            success="Demo data populated",
            failure="Failed to populate demo data",
        )

    async def _mutate(
        self,
        operation: str,
        call: Callable[[], Awaitable[None]],
        *,
        success: str,
        failure: str,
        on_success: Callable[[], None] | None = None,
    ) -> bool:
        with self.context.guard.hold() as acquired:
            if not acquired:
                logger.debug("entries.busy operation={}", operation)
                return False
            return await self._round_trip(operation, call, success=success, failure=failure, on_success=on_success)

    async def _round_trip(
        self,
        operation: str,
        call: Callable[[], Awaitable[None]],
        *,
        success: str,
        failure: str,
        on_success: Callable[[], None] | None = None,
    ) -> bool:
        try:
            await call()
        except StaleResult:
            logger.debug("entries.stale operation={}", operation)
            return False
        except RemoteError as e:
            logger.warning("entries.{}.failed error={}", operation, e)
            self.notifications.show(failure, "error")
            return False

        if on_success is not None:
            on_success()
        if await self.reload():
            self.notifications.show(success, "success")
        return True

    def _check_position(self, position: int) -> None:
        if not 0 <= position < len(self._entries):
            raise IndexError(f"no entry at position {position}")
