from __future__ import annotations

import pytest

from suite_engine.session.errors import ReconcilerStateError
from suite_engine.session.stream import StreamReconciler
from suite_engine.session.transcript import EntryKind, LogEvent, MessageLog, Speaker


def test_fragments_apply_as_prefix_concatenation() -> None:
    log = MessageLog()
    entry = log.append_text(Speaker.ASSISTANT, "")
    observed: list[str] = []
    log.subscribe(lambda event: observed.append(event.entry.body))

    reconciler = StreamReconciler(log)
    reconciler.open(entry.id)
    for fragment in ["Hel", "lo, ", "world"]:
        reconciler.append(fragment)
        # Visible to readers before the next fragment is accepted.
        assert log.get(entry.id).body == observed[-1]
    reconciler.close()

    assert observed == ["Hel", "Hello, ", "Hello, world"]
    assert log.get(entry.id).body == "Hello, world"


def test_open_resets_body() -> None:
    log = MessageLog()
    entry = log.append_text(Speaker.ASSISTANT, "stale")
    reconciler = StreamReconciler(log)
    reconciler.open(entry.id)
    assert log.get(entry.id).body == ""
    assert reconciler.open_entry_id == entry.id


def test_fragments_are_not_transformed() -> None:
    log = MessageLog()
    entry = log.append_text(Speaker.ASSISTANT, "")
    reconciler = StreamReconciler(log)
    reconciler.open(entry.id)
    reconciler.append("  **bold**\n")
    reconciler.append("<tag> ")
    assert log.get(entry.id).body == "  **bold**\n<tag> "


def test_append_after_close_raises() -> None:
    log = MessageLog()
    entry = log.append_text(Speaker.ASSISTANT, "")
    reconciler = StreamReconciler(log)
    reconciler.open(entry.id)
    reconciler.append("a")
    reconciler.close()
    with pytest.raises(ReconcilerStateError):
        reconciler.append("b")
    assert log.get(entry.id).body == "a"


def test_double_close_is_noop() -> None:
    log = MessageLog()
    entry = log.append_text(Speaker.ASSISTANT, "")
    events: list[LogEvent] = []
    log.subscribe(events.append)
    reconciler = StreamReconciler(log)
    reconciler.open(entry.id)
    reconciler.close()
    reconciler.close()
    assert not reconciler.is_open
    assert events == []


def test_only_one_open_entry() -> None:
    log = MessageLog()
    first = log.append_text(Speaker.ASSISTANT, "")
    second = log.append_text(Speaker.ASSISTANT, "")
    reconciler = StreamReconciler(log)
    reconciler.open(first.id)
    with pytest.raises(ReconcilerStateError):
        reconciler.open(second.id)
    reconciler.close()
    reconciler.open(second.id)
    assert reconciler.open_entry_id == second.id


def test_open_rejects_image_entries() -> None:
    log = MessageLog()
    entry = log.append(Speaker.ASSISTANT, EntryKind.IMAGE, "Generated: x", image_payload="data:image/png;base64,AA")
    with pytest.raises(ReconcilerStateError):
        StreamReconciler(log).open(entry.id)


def test_closed_entry_is_not_touched_by_later_streams() -> None:
    log = MessageLog()
    first = log.append_text(Speaker.ASSISTANT, "")
    second = log.append_text(Speaker.ASSISTANT, "")
    reconciler = StreamReconciler(log)

    reconciler.open(first.id)
    reconciler.append("done")
    reconciler.close()
    reconciler.open(second.id)
    reconciler.append("next")

    assert log.get(first.id).body == "done"
    assert log.get(second.id).body == "next"
