"""Plain data shapes shared by the client components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, TypeAlias

if TYPE_CHECKING:
    from cancorpus.remote.base import CallHandle

Role: TypeAlias = Literal["user", "assistant"]
TurnState: TypeAlias = Literal["pending", "resolved"]
NotificationKind: TypeAlias = Literal["info", "success", "error"]


@dataclass(frozen=True)
class Session:
    """The active identity and the handle bound to it."""

    handle: CallHandle | None
    authenticated: bool = False
    principal: str | None = None
    epoch: int = 0


@dataclass
class ChatTurn:
    role: Role
    text: str
    state: TurnState = "resolved"

    @property
    def pending(self) -> bool:
        return self.state == "pending"


@dataclass(frozen=True)
class EditDraft:
    """Edit in progress. ``position is None`` means nothing is being edited."""

    position: int | None = None
    text: str = ""

    @property
    def active(self) -> bool:
        return self.position is not None


@dataclass(frozen=True)
class Notification:
    message: str
    kind: NotificationKind
    expires_at: float
