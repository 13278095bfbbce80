"""In-process corpus service so the client runs without a server."""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path

from loguru import logger

from cancorpus.errors import RemoteRejected

NO_MATCH_ANSWER = "Sorry, I could not find anything about that in the corpus."
_WORD = re.compile(r"[a-z0-9]+")


def _words(text: str) -> set[str]:
    return set(_WORD.findall(text.lower()))


class LocalCorpus:
    """Ordered corpus entries, optionally persisted to a JSON file."""

    def __init__(self, path: Path | None = None, *, latency: float = 0.0) -> None:
        self.path = path
        self.latency = latency
        self._entries: list[str] = self._load()

    def _load(self) -> list[str]:
        if self.path is None or not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("corpus.local.unreadable path={}", self.path)
            return []
        entries = payload.get("entries") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            return []
        return [str(entry) for entry in entries]

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps({"entries": self._entries}, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def add(self, text: str) -> None:
        self._entries.append(text)
        self._save()

    def edit(self, position: int, text: str) -> None:
        self._check_position(position)
        self._entries[position] = text
        self._save()

    def delete(self, position: int) -> None:
        self._check_position(position)
        del self._entries[position]
        self._save()

    def clear(self) -> None:
        self._entries.clear()
        self._save()

    def answer(self, question: str) -> str:
        wanted = _words(question)
        best, best_score = None, 0
        for entry in self._entries:
            score = len(wanted & _words(entry))
            if score > best_score:
                best, best_score = entry, score
        return best if best is not None else NO_MATCH_ANSWER

    def _check_position(self, position: int) -> None:
        if not 0 <= position < len(self._entries):
            raise RemoteRejected(f"no entry at position {position}")


class LocalCallHandle:
    """Identity-bound handle onto a :class:`LocalCorpus`."""

    def __init__(self, corpus: LocalCorpus, token: str | None = None) -> None:
        self._corpus = corpus
        self._token = token

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    async def _round_trip(self) -> None:
        await asyncio.sleep(self._corpus.latency)

    def _require_identity(self) -> None:
        if self._token is None:
            raise RemoteRejected("anonymous callers cannot modify the corpus")

    async def list_entries(self) -> list[str]:
        await self._round_trip()
        return self._corpus.entries

    async def add_entry(self, text: str) -> None:
        await self._round_trip()
        self._require_identity()
        self._corpus.add(text)

    async def edit_entry(self, position: int, text: str) -> None:
        await self._round_trip()
        self._require_identity()
        self._corpus.edit(position, text)

    async def delete_entry(self, position: int) -> None:
        await self._round_trip()
        self._require_identity()
        self._corpus.delete(position)

    async def clear_entries(self) -> None:
        await self._round_trip()
        self._require_identity()
        self._corpus.clear()

    async def ask(self, question: str) -> str:
        await self._round_trip()
        return self._corpus.answer(question)
