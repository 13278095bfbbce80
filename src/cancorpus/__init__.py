"""canCorpus - a session-aware client for a question-answering corpus."""

from cancorpus.client import CorpusClient, build_client
from cancorpus.entries import EntryListStore
from cancorpus.gateway import RemoteGateway
from cancorpus.guard import MutationGuard
from cancorpus.notifications import NotificationTimer
from cancorpus.session import SessionContext, SessionManager
from cancorpus.transcript import TranscriptStore

__version__ = "0.1.0"

__all__ = [
    "CorpusClient",
    "EntryListStore",
    "MutationGuard",
    "NotificationTimer",
    "RemoteGateway",
    "SessionContext",
    "SessionManager",
    "TranscriptStore",
    "build_client",
]
