"""Remote collaborator contracts and implementations."""

from cancorpus.remote.base import CallHandle, HandleFactory, IdentityProvider
from cancorpus.remote.http import HttpCallHandle
from cancorpus.remote.local import LocalCallHandle, LocalCorpus

__all__ = [
    "CallHandle",
    "HandleFactory",
    "HttpCallHandle",
    "IdentityProvider",
    "LocalCallHandle",
    "LocalCorpus",
]
