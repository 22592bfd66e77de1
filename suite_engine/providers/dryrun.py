"""Dry-run provider (offline)."""

from __future__ import annotations

import hashlib
import io
import re
import time
from typing import Iterator, Sequence

from PIL import Image, ImageDraw, ImageFont

from ..session.mode import AspectRatio
from ..session.requests import Turn
from .base import ImagePayload
from .google_utils import gemini_ratio, pixel_size

_WORD_RE = re.compile(r"\S+\s*")


class DryRunProvider:
    name = "dryrun"

    def __init__(self, delay_s: float = 0.0, scale: float = 0.25) -> None:
        self.delay_s = max(0.0, delay_s)
        self.scale = scale
        self._font = None

    def stream_chat(self, turns: Sequence[Turn], prompt: str) -> Iterator[str]:
        reply = _compose_reply(turns, prompt)
        for fragment in _WORD_RE.findall(reply):
            if self.delay_s:
                time.sleep(self.delay_s)
            yield fragment

    def generate_image(self, prompt: str, aspect_ratio: AspectRatio) -> ImagePayload | None:
        width, height = pixel_size(aspect_ratio)
        width = max(16, int(width * self.scale))
        height = max(16, int(height * self.scale))
        image = Image.new("RGB", (width, height), _color_from_prompt(prompt))
        draw = ImageDraw.Draw(image)
        font = self._font or ImageFont.load_default()
        draw.text((8, 8), f"dryrun {gemini_ratio(aspect_ratio)}\n{prompt[:40]}", fill=(255, 255, 255), font=font)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return ImagePayload(mime_type="image/png", data=buffer.getvalue())


def _compose_reply(turns: Sequence[Turn], prompt: str) -> str:
    prior = sum(1 for turn in turns if turn.role == "user")
    return f"(dryrun) You said: {prompt.strip()} [turn {prior + 1}]"


def _color_from_prompt(prompt: str) -> tuple[int, int, int]:
    digest = hashlib.sha256(prompt.encode("utf-8")).digest()
    return digest[0], digest[1], digest[2]
