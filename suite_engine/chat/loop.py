"""Interactive chat loop wrapper."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, TextIO

from ..cli_progress import ProgressTicker
from ..providers.google_utils import save_data_uri
from ..session.controller import SessionController
from ..session.mode import Mode
from ..session.transcript import LogEvent, Speaker, TranscriptEntry
from .command_registry import SUGGESTED_PROMPTS, help_text
from .intent_parser import parse_intent


def format_entry(entry: TranscriptEntry) -> str:
    speaker = "you" if entry.speaker is Speaker.USER else "assistant"
    if entry.is_image:
        size = len(entry.image_payload or "")
        return f"{speaker}: [image] {entry.body} ({size} chars, /save to write it)"
    return f"{speaker}: {entry.body}"


class TranscriptPrinter:
    """Renders log events to a text stream as they are published."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self._streaming_id: str | None = None
        self._printed = 0
        self._header = False

    def __call__(self, event: LogEvent) -> None:
        entry = event.entry
        if entry.speaker is Speaker.USER:
            self._finish_stream()
            return
        if event.action == "updated" and entry.id == self._streaming_id:
            if not self._header:
                self._header = True
                self.stream.write("assistant: ")
            delta = entry.body[self._printed :]
            self._printed = len(entry.body)
            self.stream.write(delta)
            self.stream.flush()
            return
        self._finish_stream()
        if event.action == "appended" and not entry.is_image and not entry.body:
            # The header waits for the first fragment.
            self._streaming_id = entry.id
            self._printed = 0
            self._header = False
            return
        if event.action == "appended":
            self.stream.write(f"{format_entry(entry)}\n")
            self.stream.flush()

    def _finish_stream(self) -> None:
        if self._streaming_id is None:
            return
        self._streaming_id = None
        self._printed = 0
        if self._header:
            self._header = False
            self.stream.write("\n")
            self.stream.flush()

    def finish(self) -> None:
        self._finish_stream()


class ChatLoop:
    def __init__(
        self,
        controller: SessionController,
        out_dir: Path | None = None,
        stream: TextIO | None = None,
        input_fn: Callable[[str], str] = input,
    ) -> None:
        self.controller = controller
        self.out_dir = out_dir or Path(".")
        self.stream = stream or sys.stdout
        self.input_fn = input_fn
        self.printer = TranscriptPrinter(self.stream)
        self._ticker: ProgressTicker | None = None
        self._unsubscribe = controller.log.subscribe(self._on_log_event)

    def _say(self, message: str) -> None:
        print(message, file=self.stream)

    def _prompt_label(self) -> str:
        if self.controller.mode is Mode.IMAGE:
            return f"[image {self.controller.aspect_ratio.ratio}]> "
        return "[chat]> "

    def run(self) -> None:
        self._say("Suite chat started. Type /help for commands.")
        try:
            while True:
                try:
                    line = self.input_fn(self._prompt_label())
                except (EOFError, KeyboardInterrupt):
                    break
                if not self.handle_line(line):
                    break
        finally:
            self._unsubscribe()
            self.controller.shutdown()

    def handle_line(self, line: str) -> bool:
        """Handle one line of input. Returns False when the loop should stop."""
        intent = parse_intent(line)
        if intent.action == "noop":
            return True
        if intent.action == "quit":
            return False
        if intent.action == "help":
            self._say(help_text())
            return True
        if intent.action == "unknown":
            self._say(f"Unknown command: {intent.raw.strip()} (try /help)")
            return True
        if intent.action == "set_mode_chat":
            self.controller.set_mode(Mode.CHAT)
            self._say("Mode set to chat.")
            return True
        if intent.action == "set_mode_image":
            self.controller.set_mode(Mode.IMAGE)
            self._say(f"Mode set to image ({self.controller.aspect_ratio.ratio}).")
            return True
        if intent.action == "set_aspect_ratio":
            try:
                ratio = self.controller.set_aspect_ratio(intent.command_args.get("aspect_ratio") or "")
            except ValueError as exc:
                self._say(str(exc))
                return True
            self._say(f"Aspect ratio set to {ratio.value} ({ratio.ratio}).")
            return True
        if intent.action == "suggest":
            for idx, prompt in enumerate(SUGGESTED_PROMPTS, start=1):
                self._say(f"  {idx}. {prompt}")
            return True
        if intent.action == "history":
            for entry in self.controller.entries:
                self._say(format_entry(entry))
            return True
        if intent.action == "save_image":
            self._save_latest_image(intent.command_args.get("path") or "")
            return True
        if intent.action == "prompt" and intent.prompt:
            self._submit(intent.prompt)
        return True

    def _on_log_event(self, event: LogEvent) -> None:
        # The indicator is taken down before any reply is drawn on its line.
        if event.entry.speaker is Speaker.ASSISTANT and (event.action == "updated" or event.entry.body):
            self._stop_ticker(done=event.entry.is_image)
        self.printer(event)

    def _stop_ticker(self, done: bool = False) -> None:
        ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.stop(done=done)

    def _submit(self, prompt: str) -> None:
        if self.controller.mode is Mode.IMAGE:
            self._ticker = ProgressTicker("Generating image", stream=self.stream, done_label="Image ready in")
        else:
            self._ticker = ProgressTicker("Thinking", stream=self.stream)
        self._ticker.start_ticking()
        accepted = False
        try:
            accepted = self.controller.submit(prompt)
        finally:
            self._stop_ticker()
            self.printer.finish()
        if not accepted:
            self._say("Busy: a response is still in progress.")

    def _save_latest_image(self, raw_path: str) -> None:
        entry = self.controller.log.latest_image()
        if entry is None or not entry.image_payload:
            self._say("No generated image to save yet.")
            return
        path = Path(raw_path) if raw_path else self.out_dir / f"generated-gemini-{entry.id}"
        try:
            saved = save_data_uri(entry.image_payload, path)
        except (OSError, ValueError) as exc:
            self._say(f"Save failed: {exc}")
            return
        self._say(f"Saved image to {saved}")
