"""Chat transcript with an optimistic placeholder reply."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

from loguru import logger

from cancorpus.errors import EmptyInput, RemoteError, StaleResult
from cancorpus.gateway import RemoteGateway
from cancorpus.notifications import NotificationTimer
from cancorpus.session import SessionContext
from cancorpus.types import ChatTurn

TurnListener: TypeAlias = Callable[[ChatTurn], None]

GREETING = "Hi! I'm here to assist you, kindly ask any question"
THINKING = "...thinking"
ASK_FAILED = "Error asking canister"


class TranscriptStore:
    """Ordered chat turns.

    Append-only, except that a pending assistant turn at the end is rewritten
    once when its answer (or failure) arrives. The guard keeps a second
    question from starting while a placeholder is open.
    """

    def __init__(
        self,
        context: SessionContext,
        gateway: RemoteGateway,
        notifications: NotificationTimer,
        *,
        greeting: str | None = GREETING,
    ) -> None:
        self.context = context
        self.gateway = gateway
        self.notifications = notifications
        self.greeting = greeting
        self._turns: list[ChatTurn] = []
        self._listeners: list[TurnListener] = []
        self.reset()

    @property
    def turns(self) -> list[ChatTurn]:
        return [ChatTurn(turn.role, turn.text, turn.state) for turn in self._turns]

    @property
    def pending(self) -> bool:
        return bool(self._turns) and self._turns[-1].pending

    def reset(self) -> None:
        self._turns = [ChatTurn("assistant", self.greeting)] if self.greeting else []

    async def ask(self, question: str) -> str | None:
        """Ask ``question``; return the text the placeholder resolved to, or ``None`` when dropped."""
        question = question.strip()
        if not question:
            raise EmptyInput("question is empty")

        with self.context.guard.hold() as acquired:
            if not acquired:
                logger.debug("transcript.busy")
                return None
            self._turns.append(ChatTurn("user", question))
            placeholder = ChatTurn("assistant", THINKING, "pending")
            self._turns.append(placeholder)
            self._emit(placeholder)

            try:
                answer = await self.gateway.ask(question)
            except StaleResult as e:
                if e.failed:
                    return self._resolve(ASK_FAILED)
                # The transcript is not identity-scoped; keep the answer.
                answer = str(e.value)
            except RemoteError as e:
                logger.warning("transcript.ask.failed error={}", e)
                self.notifications.show("Failed to get an answer", "error")
                return self._resolve(ASK_FAILED)
            except BaseException:
                # Cancellation included: never leave a placeholder behind.
                self._resolve(ASK_FAILED)
                raise
            return self._resolve(answer)

    def _resolve(self, text: str) -> str:
        last = self._turns[-1]
        if last.role != "assistant" or not last.pending:
            raise RuntimeError("no pending assistant turn to resolve")
        last.text = text
        last.state = "resolved"
        self._emit(last)
        return text

    def subscribe(self, listener: TurnListener) -> Callable[[], None]:
        """Call ``listener`` when a placeholder opens and when it resolves."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, turn: ChatTurn) -> None:
        for listener in list(self._listeners):
            try:
                listener(turn)
            except Exception:
                logger.exception("transcript.listener.error")
