"""Application-level exception types for canCorpus."""

from __future__ import annotations

from typing import Any


class CorpusError(Exception):
    """Base exception for canCorpus."""


class ConfigurationError(CorpusError):
    """Raised when settings cannot produce a working client."""


class EmptyInput(CorpusError):
    """Raised when user text is blank after trimming."""


class AuthUnavailable(CorpusError):
    """Raised when the identity provider has not been initialized."""


class RemoteError(CorpusError):
    """Base exception for failed round-trips."""


class RemoteUnavailable(RemoteError):
    """Raised on transport or network faults."""


class RemoteRejected(RemoteError):
    """Raised when the remote collaborator refuses an operation."""


class StaleResult(CorpusError):
    """Raised when a round-trip finishes after the session identity changed."""

    def __init__(self, operation: str, value: Any = None) -> None:
        super().__init__(f"{operation} finished under a previous session")
        self.operation = operation
        self.value = value

    @property
    def failed(self) -> bool:
        """Whether the stale round-trip ended in a remote error rather than a value."""
        return isinstance(self.__cause__, RemoteError)
