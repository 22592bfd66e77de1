"""Transcript entries and the observable message log."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable

from ..utils import now_utc_iso


class Speaker(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class EntryKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


@dataclass(frozen=True)
class TranscriptEntry:
    id: str
    speaker: Speaker
    kind: EntryKind
    body: str = ""
    image_payload: str | None = None
    created_at: str = field(default_factory=now_utc_iso)

    def __post_init__(self) -> None:
        if self.kind is EntryKind.IMAGE and not self.image_payload:
            raise ValueError("Image entries require an image payload.")
        if self.kind is EntryKind.TEXT and self.image_payload is not None:
            raise ValueError("Text entries cannot carry an image payload.")

    @property
    def is_image(self) -> bool:
        return self.kind is EntryKind.IMAGE


@dataclass(frozen=True)
class LogEvent:
    action: str  # "appended" | "updated"
    index: int
    entry: TranscriptEntry


LogListener = Callable[[LogEvent], None]


class MessageLog:
    """Append-only ordered transcript.

    Every append and body update is published to subscribers before the call
    returns, so a presentation layer can follow a stream fragment by fragment.
    Entries are never reordered or removed. Ids are unique labels whose
    numeric suffix follows append order; compare positions with ``index_of``
    rather than sorting id strings.
    """

    def __init__(self) -> None:
        self._entries: list[TranscriptEntry] = []
        self._index_by_id: dict[str, int] = {}
        self._listeners: list[LogListener] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self.entries)

    def __getitem__(self, index: int) -> TranscriptEntry:
        return self._entries[index]

    @property
    def entries(self) -> tuple[TranscriptEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def get(self, entry_id: str) -> TranscriptEntry | None:
        with self._lock:
            idx = self._index_by_id.get(entry_id)
            return self._entries[idx] if idx is not None else None

    def subscribe(self, listener: LogListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def append(
        self,
        speaker: Speaker,
        kind: EntryKind,
        body: str = "",
        image_payload: str | None = None,
    ) -> TranscriptEntry:
        with self._lock:
            entry = TranscriptEntry(
                id=f"msg-{next(self._ids):05d}",
                speaker=speaker,
                kind=kind,
                body=body,
                image_payload=image_payload,
            )
            index = len(self._entries)
            self._entries.append(entry)
            self._index_by_id[entry.id] = index
        self._publish(LogEvent("appended", index, entry))
        return entry

    def append_text(self, speaker: Speaker, body: str) -> TranscriptEntry:
        return self.append(speaker, EntryKind.TEXT, body)

    def index_of(self, entry_id: str) -> int:
        with self._lock:
            index = self._index_by_id.get(entry_id)
        if index is None:
            raise KeyError(entry_id)
        return index

    def _update_body(self, entry_id: str, body: str) -> TranscriptEntry:
        """Rewrite one body. Only ``StreamReconciler`` calls this, for its open entry."""
        with self._lock:
            index = self._index_by_id.get(entry_id)
            if index is None:
                raise KeyError(entry_id)
            entry = replace(self._entries[index], body=body)
            self._entries[index] = entry
        self._publish(LogEvent("updated", index, entry))
        return entry

    def latest_image(self) -> TranscriptEntry | None:
        for entry in reversed(self.entries):
            if entry.is_image:
                return entry
        return None

    def _publish(self, event: LogEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
