"""Interaction mode and image parameters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Mode(str, Enum):
    CHAT = "chat"
    IMAGE = "image"


class AspectRatio(str, Enum):
    SQUARE = "square"
    WIDE = "wide"
    TALL = "tall"
    STANDARD = "standard"

    @property
    def ratio(self) -> str:
        return _RATIO_LABELS[self]


_RATIO_LABELS = {
    AspectRatio.SQUARE: "1:1",
    AspectRatio.WIDE: "16:9",
    AspectRatio.TALL: "9:16",
    AspectRatio.STANDARD: "4:3",
}

_MODE_ALIASES = {
    "chat": Mode.CHAT,
    "text": Mode.CHAT,
    "image": Mode.IMAGE,
    "image-gen": Mode.IMAGE,
    "image_gen": Mode.IMAGE,
}

_RATIO_ALIASES = {
    "landscape": AspectRatio.WIDE,
    "portrait": AspectRatio.TALL,
    **{label: ratio for ratio, label in _RATIO_LABELS.items()},
    **{ratio.value: ratio for ratio in AspectRatio},
}


def parse_mode(value: Mode | str) -> Mode:
    if isinstance(value, Mode):
        return value
    normalized = str(value or "").strip().lower()
    if normalized not in _MODE_ALIASES:
        raise ValueError(f"Unknown mode '{value}'. Choose chat or image.")
    return _MODE_ALIASES[normalized]


def parse_aspect_ratio(value: AspectRatio | str) -> AspectRatio:
    if isinstance(value, AspectRatio):
        return value
    normalized = str(value or "").strip().lower()
    if normalized not in _RATIO_ALIASES:
        choices = ", ".join(f"{r.value} ({r.ratio})" for r in AspectRatio)
        raise ValueError(f"Unknown aspect ratio '{value}'. Choose one of: {choices}.")
    return _RATIO_ALIASES[normalized]


@dataclass
class ModeState:
    mode: Mode = Mode.CHAT
    aspect_ratio: AspectRatio = AspectRatio.SQUARE

    def set_mode(self, mode: Mode | str) -> Mode:
        self.mode = parse_mode(mode)
        return self.mode

    def set_aspect_ratio(self, aspect_ratio: AspectRatio | str) -> AspectRatio:
        # Stored in every mode so switching back to image restores the last choice.
        self.aspect_ratio = parse_aspect_ratio(aspect_ratio)
        return self.aspect_ratio

    @property
    def is_image(self) -> bool:
        return self.mode is Mode.IMAGE
