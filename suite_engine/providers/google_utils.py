"""Shared helpers for Google providers."""

from __future__ import annotations

import base64
import binascii
import re
from pathlib import Path
from typing import Any, Optional, Sequence

from ..session.mode import AspectRatio
from .base import ImagePayload

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)

_GEMINI_RATIOS = {
    AspectRatio.SQUARE: "1:1",
    AspectRatio.WIDE: "16:9",
    AspectRatio.TALL: "9:16",
    AspectRatio.STANDARD: "4:3",
}

_PIXEL_SIZES = {
    AspectRatio.SQUARE: (1024, 1024),
    AspectRatio.WIDE: (1344, 768),
    AspectRatio.TALL: (768, 1344),
    AspectRatio.STANDARD: (1184, 864),
}


def gemini_ratio(aspect_ratio: AspectRatio) -> str:
    return _GEMINI_RATIOS[aspect_ratio]


def pixel_size(aspect_ratio: AspectRatio) -> tuple[int, int]:
    return _PIXEL_SIZES[aspect_ratio]


def normalize_mime_type(value: Optional[str], default: str = "image/png") -> str:
    if not value:
        return default
    lowered = value.strip().lower()
    if lowered in {"image/jpg", "jpg", "jpeg"}:
        return "image/jpeg"
    if lowered in {"png", "webp", "gif"}:
        return f"image/{lowered}"
    if lowered.startswith("image/"):
        return lowered
    return default


def extract_inline_image(candidates: Sequence[Any]) -> ImagePayload | None:
    """Return the first inline image part across response candidates."""
    for candidate in candidates:
        content = getattr(candidate, "content", None)
        parts = getattr(content, "parts", None) or getattr(candidate, "parts", None) or []
        for part in parts:
            inline_data = getattr(part, "inline_data", None)
            data = getattr(inline_data, "data", None) if inline_data else None
            if data is None:
                continue
            if isinstance(data, str):
                try:
                    data = base64.b64decode(data, validate=True)
                except (binascii.Error, ValueError):
                    data = data.encode("latin1")
            if isinstance(data, (bytes, bytearray)) and data:
                mime_type = normalize_mime_type(getattr(inline_data, "mime_type", None))
                return ImagePayload(mime_type=mime_type, data=bytes(data))
    return None


def parse_data_uri(uri: str) -> ImagePayload:
    match = _DATA_URI_RE.match(uri or "")
    if not match:
        raise ValueError("Not a base64 data URI.")
    return ImagePayload(mime_type=match.group("mime"), data=base64.b64decode(match.group("data")))


def extension_for_mime(mime_type: str) -> str:
    normalized = normalize_mime_type(mime_type)
    if normalized == "image/jpeg":
        return ".jpg"
    return "." + normalized.split("/", 1)[1]


def save_data_uri(uri: str, path: Path) -> Path:
    payload = parse_data_uri(uri)
    if not path.suffix:
        path = path.with_suffix(extension_for_mime(payload.mime_type))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload.data)
    return path
