"""Provider base classes."""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass
from typing import Iterable, Iterator, Protocol, Sequence

from PIL import Image, UnidentifiedImageError

from ..session.mode import AspectRatio
from ..session.requests import Turn


@dataclass(frozen=True)
class ImagePayload:
    mime_type: str
    data: bytes

    def to_data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    def is_decodable(self) -> bool:
        if not self.data:
            return False
        try:
            with Image.open(io.BytesIO(self.data)) as image:
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
            return False
        return True


class GenerativeProvider(Protocol):
    name: str

    def stream_chat(self, turns: Sequence[Turn], prompt: str) -> Iterator[str]:
        ...

    def generate_image(self, prompt: str, aspect_ratio: AspectRatio) -> ImagePayload | None:
        ...


class ProviderRegistry:
    def __init__(self, providers: Iterable[GenerativeProvider]) -> None:
        self._providers = {provider.name: provider for provider in providers}

    def get(self, name: str) -> GenerativeProvider | None:
        return self._providers.get(name)

    def list(self) -> list[str]:
        return sorted(self._providers.keys())
