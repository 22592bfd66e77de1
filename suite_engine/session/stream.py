"""Merge streamed text fragments into a single transcript entry."""

from __future__ import annotations

from .errors import ReconcilerStateError
from .transcript import EntryKind, MessageLog


class StreamReconciler:
    def __init__(self, log: MessageLog) -> None:
        self._log = log
        self._open_id: str | None = None
        self._body = ""

    @property
    def open_entry_id(self) -> str | None:
        return self._open_id

    @property
    def is_open(self) -> bool:
        return self._open_id is not None

    def open(self, entry_id: str) -> None:
        if self._open_id is not None:
            raise ReconcilerStateError(f"Entry {self._open_id} is still open.")
        entry = self._log.get(entry_id)
        if entry is None:
            raise ReconcilerStateError(f"Unknown entry {entry_id}.")
        if entry.kind is not EntryKind.TEXT:
            raise ReconcilerStateError(f"Entry {entry_id} is not a text entry.")
        self._open_id = entry_id
        self._body = ""
        if entry.body:
            self._log._update_body(entry_id, "")

    def append(self, fragment: str) -> str:
        if self._open_id is None:
            raise ReconcilerStateError("No open entry; call open() first.")
        self._body += fragment
        self._log._update_body(self._open_id, self._body)
        return self._body

    def close(self) -> None:
        # A second close() is a no-op.
        self._open_id = None
        self._body = ""
