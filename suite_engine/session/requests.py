"""Provider-neutral request descriptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from .mode import AspectRatio, Mode
from .transcript import Speaker, TranscriptEntry


@dataclass(frozen=True)
class Turn:
    role: str  # "user" | "assistant"
    text: str


@dataclass(frozen=True)
class ChatRequest:
    turns: tuple[Turn, ...]
    prompt: str


@dataclass(frozen=True)
class ImageRequest:
    prompt: str
    aspect_ratio: AspectRatio


Request = Union[ChatRequest, ImageRequest]


def history_turns(prior_log: Iterable[TranscriptEntry]) -> tuple[Turn, ...]:
    """Translate prior transcript entries into a neutral turn list.

    Every chat request carries the full history. Entries with an empty body
    (an abandoned stream placeholder) are skipped; image entries contribute
    their caption.
    """
    turns: list[Turn] = []
    for entry in prior_log:
        if not entry.body:
            continue
        role = "user" if entry.speaker is Speaker.USER else "assistant"
        turns.append(Turn(role=role, text=entry.body))
    return tuple(turns)


def build_request(
    mode: Mode,
    prompt: str,
    aspect_ratio: AspectRatio,
    prior_log: Iterable[TranscriptEntry] = (),
) -> Request:
    if mode is Mode.IMAGE:
        return ImageRequest(prompt=prompt, aspect_ratio=aspect_ratio)
    return ChatRequest(turns=history_turns(prior_log), prompt=prompt)
