"""Conversation session controller.

Owns the message log and drives one turn at a time:

    idle -> submitting -> streaming | awaiting_image -> idle

Any failure after the user entry is appended becomes an assistant
``"Error: ..."`` text entry; nothing raises out of ``submit``.
"""

from __future__ import annotations

import threading
import uuid
from enum import Enum
from typing import Any, Iterator

from ..providers.base import GenerativeProvider
from ..runs.events import EventWriter
from ..utils import preview_text
from .errors import EmptyResultError, ValidationError, describe_failure
from .mode import AspectRatio, Mode, ModeState
from .requests import ChatRequest, ImageRequest, build_request
from .stream import StreamReconciler
from .transcript import EntryKind, MessageLog, Speaker, TranscriptEntry


class TurnState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    STREAMING = "streaming"
    AWAITING_IMAGE = "awaiting_image"


class _TurnLease:
    """Holds the single in-flight slot; releasing is idempotent."""

    def __init__(self, controller: "SessionController") -> None:
        self._controller = controller
        self._released = False
        self._lock = threading.Lock()

    def __enter__(self) -> "_TurnLease":
        return self

    def __exit__(self, *exc_info: Any) -> bool:
        self.release()
        return False

    def release(self) -> None:
        with self._lock:
            if self._released:
                return
            self._released = True
        self._controller._end_turn(self)


class SessionController:
    def __init__(
        self,
        provider: GenerativeProvider,
        log: MessageLog | None = None,
        mode_state: ModeState | None = None,
        events: EventWriter | None = None,
        session_id: str | None = None,
    ) -> None:
        self.provider = provider
        self.log = log or MessageLog()
        self.modes = mode_state or ModeState()
        self.reconciler = StreamReconciler(self.log)
        self.events = events
        self.session_id = session_id or (events.session_id if events else str(uuid.uuid4()))
        self.last_error: str | None = None
        self.event_error: str | None = None
        self.state = TurnState.IDLE
        self._flag_lock = threading.Lock()
        # Serializes log mutations made by a turn against shutdown().
        self._live_lock = threading.RLock()
        self._lease: _TurnLease | None = None
        self._worker: threading.Thread | None = None
        self._closed = threading.Event()
        self._emit(
            "session_started",
            provider=getattr(provider, "name", type(provider).__name__),
            mode=self.modes.mode.value,
            aspect_ratio=self.modes.aspect_ratio.value,
        )

    @property
    def turn_in_flight(self) -> bool:
        return self._lease is not None

    @property
    def entries(self) -> tuple[TranscriptEntry, ...]:
        return self.log.entries

    @property
    def mode(self) -> Mode:
        return self.modes.mode

    @property
    def aspect_ratio(self) -> AspectRatio:
        return self.modes.aspect_ratio

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def set_mode(self, mode: Mode | str) -> Mode:
        previous = self.modes.mode
        current = self.modes.set_mode(mode)
        if current is not previous:
            self._emit("mode_changed", mode=current.value, previous=previous.value)
        return current

    def set_aspect_ratio(self, aspect_ratio: AspectRatio | str) -> AspectRatio:
        current = self.modes.set_aspect_ratio(aspect_ratio)
        self._emit("aspect_ratio_changed", aspect_ratio=current.value, ratio=current.ratio)
        return current

    def validate_prompt(self, text: str | None) -> str:
        if text is None or not str(text).strip():
            raise ValidationError("Prompt is empty.")
        return str(text)

    def submit(self, text: str | None, *, block: bool = True) -> bool:
        """Start a turn for ``text``.

        Returns ``False`` without touching the log when the prompt is blank,
        a turn is already in flight, or the session was shut down. Otherwise
        the user entry is appended before this returns. With ``block=False``
        the turn continues on a worker thread; use ``wait()`` to join it.
        """
        try:
            prompt = self.validate_prompt(text)
            lease = self._begin_turn()
        except ValidationError:
            return False
        try:
            prior = self.log.entries
            self.log.append_text(Speaker.USER, prompt)
            self.state = TurnState.SUBMITTING
            args = (lease, prompt, prior, self.modes.mode, self.modes.aspect_ratio)
            if block:
                self._run_turn(*args)
            else:
                worker = threading.Thread(target=self._run_turn, args=args, name="suite-turn", daemon=True)
                self._worker = worker
                worker.start()
        except BaseException:
            lease.release()
            raise
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Join the background turn, if any. Returns True once no turn is running."""
        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout)
            if worker.is_alive():
                return False
        return not self.turn_in_flight

    def shutdown(self, timeout: float | None = 1.0) -> None:
        """Abandon the current turn; the log is never mutated afterwards."""
        with self._live_lock:
            if self._closed.is_set():
                return
            self._closed.set()
        self.wait(timeout)
        lease = self._lease
        if lease is not None:
            lease.release()
        self._emit("session_closed", entries=len(self.log))

    def _begin_turn(self) -> _TurnLease:
        with self._flag_lock:
            if self._closed.is_set():
                raise ValidationError("Session is closed.")
            if self._lease is not None:
                raise ValidationError("A turn is already in flight.")
            self._lease = _TurnLease(self)
            return self._lease

    def _end_turn(self, lease: _TurnLease) -> None:
        self.reconciler.close()
        with self._flag_lock:
            if self._lease is lease:
                self._lease = None
                self.state = TurnState.IDLE

    def _run_turn(
        self,
        lease: _TurnLease,
        prompt: str,
        prior: tuple[TranscriptEntry, ...],
        mode: Mode,
        aspect_ratio: AspectRatio,
    ) -> None:
        with lease:
            self.last_error = None
            self._emit(
                "turn_started",
                mode=mode.value,
                aspect_ratio=aspect_ratio.value,
                prompt_preview=preview_text(prompt),
                history_turns=len(prior),
            )
            try:
                request = build_request(mode, prompt, aspect_ratio, prior)
                if isinstance(request, ImageRequest):
                    self._run_image(request)
                else:
                    self._run_chat(request)
            except Exception as exc:
                self._fail(exc)
            else:
                self._emit("turn_finished", mode=mode.value, entries=len(self.log))

    def _run_chat(self, request: ChatRequest) -> None:
        with self._live_lock:
            if self._closed.is_set():
                return
            placeholder = self.log.append_text(Speaker.ASSISTANT, "")
            self.reconciler.open(placeholder.id)
        self.state = TurnState.STREAMING
        fragments: Iterator[str] = iter(self.provider.stream_chat(request.turns, request.prompt))
        count = 0
        try:
            for fragment in fragments:
                if not fragment:
                    continue
                with self._live_lock:
                    if self._closed.is_set():
                        return
                    self.reconciler.append(fragment)
                count += 1
        finally:
            self.reconciler.close()
            close = getattr(fragments, "close", None)
            if callable(close):
                close()
        entry = self.log.get(placeholder.id)
        self._emit(
            "chat_stream_completed",
            entry_id=placeholder.id,
            fragments=count,
            chars=len(entry.body) if entry else 0,
        )

    def _run_image(self, request: ImageRequest) -> None:
        self.state = TurnState.AWAITING_IMAGE
        payload = self.provider.generate_image(request.prompt, request.aspect_ratio)
        if payload is None or not payload.is_decodable():
            raise EmptyResultError()
        with self._live_lock:
            if self._closed.is_set():
                return
            entry = self.log.append(
                Speaker.ASSISTANT,
                EntryKind.IMAGE,
                f"Generated: {request.prompt}",
                image_payload=payload.to_data_uri(),
            )
        self._emit(
            "image_generated",
            entry_id=entry.id,
            mime_type=payload.mime_type,
            byte_count=len(payload.data),
            aspect_ratio=request.aspect_ratio.value,
        )

    def _fail(self, exc: Exception) -> None:
        message = describe_failure(exc)
        self.last_error = message
        self.reconciler.close()
        with self._live_lock:
            if not self._closed.is_set():
                self.log.append_text(Speaker.ASSISTANT, f"Error: {message}")
        self._emit("turn_failed", error=message, error_type=type(exc).__name__)

    def _emit(self, event_type: str, **payload: Any) -> None:
        if self.events is None:
            return
        # A failing event sink never fails the turn.
        try:
            self.events.emit(event_type, **payload)
        except OSError as exc:
            self.event_error = f"Event log write failed: {exc}"
