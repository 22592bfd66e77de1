"""Provider registry."""

from __future__ import annotations

from ..settings import SuiteSettings
from .base import ProviderRegistry
from .dryrun import DryRunProvider
from .gemini import GeminiProvider


def default_registry(settings: SuiteSettings | None = None) -> ProviderRegistry:
    settings = settings or SuiteSettings.from_env()
    return ProviderRegistry(
        [
            DryRunProvider(),
            GeminiProvider(
                chat_model=settings.chat_model,
                image_model=settings.image_model,
                system_instruction=settings.system_instruction,
                api_key=settings.api_key,
            ),
        ]
    )
