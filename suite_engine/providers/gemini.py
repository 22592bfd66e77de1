"""Gemini provider."""

from __future__ import annotations

from typing import Any, Iterator, Sequence

try:
    from google import genai  # type: ignore
    from google.genai import errors as genai_errors  # type: ignore
    from google.genai import types  # type: ignore
except Exception:  # pragma: no cover
    genai = None  # type: ignore
    genai_errors = None  # type: ignore
    types = None  # type: ignore

from ..session.errors import ProviderError
from ..session.mode import AspectRatio
from ..session.requests import Turn
from ..settings import DEFAULT_CHAT_MODEL, DEFAULT_IMAGE_MODEL, DEFAULT_SYSTEM_INSTRUCTION, resolve_api_key
from .base import ImagePayload
from .google_utils import extract_inline_image, gemini_ratio


class GeminiProvider:
    name = "gemini"

    def __init__(
        self,
        chat_model: str = DEFAULT_CHAT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        system_instruction: str | None = DEFAULT_SYSTEM_INSTRUCTION,
        api_key: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.chat_model = chat_model
        self.image_model = image_model
        self.system_instruction = system_instruction
        self._api_key = api_key
        self._client = client

    def stream_chat(self, turns: Sequence[Turn], prompt: str) -> Iterator[str]:
        client = self._resolve_client()
        chat = client.chats.create(
            model=self.chat_model,
            config=_build_chat_config(self.system_instruction),
            history=_build_history(turns),
        )
        try:
            for chunk in chat.send_message_stream(prompt):
                text = getattr(chunk, "text", None)
                if text:
                    yield text
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(_describe_api_error(exc)) from exc

    def generate_image(self, prompt: str, aspect_ratio: AspectRatio) -> ImagePayload | None:
        client = self._resolve_client()
        try:
            response = client.models.generate_content(
                model=self.image_model,
                contents=_build_prompt_content(prompt),
                config=_build_image_config(gemini_ratio(aspect_ratio)),
            )
        except Exception as exc:
            raise ProviderError(_describe_api_error(exc)) from exc
        candidates = getattr(response, "candidates", None) or []
        # Only the first candidate is inspected; later ones are alternates.
        return extract_inline_image(candidates[:1])

    def _resolve_client(self) -> Any:
        if self._client is not None:
            return self._client
        api_key = self._api_key or resolve_api_key()
        if not api_key:
            raise ProviderError("GEMINI_API_KEY or GOOGLE_API_KEY not set.")
        if genai is None:
            raise ProviderError("google-genai package not installed. Run: pip install google-genai")
        self._client = genai.Client(api_key=api_key)
        return self._client


def _build_chat_config(system_instruction: str | None) -> Any:
    if not system_instruction:
        return None
    return types.GenerateContentConfig(system_instruction=system_instruction)


def _build_history(turns: Sequence[Turn]) -> list[Any]:
    history: list[Any] = []
    for turn in turns:
        role = "user" if turn.role == "user" else "model"
        history.append(types.Content(role=role, parts=[types.Part(text=turn.text)]))
    return history


def _build_prompt_content(prompt: str) -> Any:
    return types.Content(role="user", parts=[types.Part(text=prompt)])


def _build_image_config(aspect_ratio: str) -> Any:
    return types.GenerateContentConfig(
        response_modalities=["IMAGE"],
        image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
    )


def _describe_api_error(exc: Exception) -> str:
    if genai_errors is not None and isinstance(exc, genai_errors.APIError):
        message = getattr(exc, "message", None) or str(exc)
        code = getattr(exc, "code", None)
        return f"Gemini request failed ({code}): {message}" if code else f"Gemini request failed: {message}"
    return str(exc).strip() or type(exc).__name__
