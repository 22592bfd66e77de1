"""Environment-driven configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_CHAT_MODEL = "gemini-3-flash-preview"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a helpful, creative, and highly intelligent AI assistant. "
    "Keep responses concise and insightful."
)


def resolve_api_key() -> str | None:
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")


@dataclass
class SuiteSettings:
    provider: str = "gemini"
    chat_model: str = DEFAULT_CHAT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION
    aspect_ratio: str = "square"
    api_key: str | None = None

    @classmethod
    def from_env(cls) -> "SuiteSettings":
        return cls(
            provider=_env_str("SUITE_PROVIDER", "gemini").lower(),
            chat_model=_env_str("SUITE_CHAT_MODEL", DEFAULT_CHAT_MODEL),
            image_model=_env_str("SUITE_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            system_instruction=_env_str("SUITE_SYSTEM_INSTRUCTION", DEFAULT_SYSTEM_INSTRUCTION),
            aspect_ratio=_env_str("SUITE_ASPECT_RATIO", "square").lower(),
            api_key=resolve_api_key(),
        )


def _env_str(key: str, default: str) -> str:
    return str(os.getenv(key) or "").strip() or default
