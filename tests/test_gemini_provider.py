from __future__ import annotations

from types import SimpleNamespace

import pytest

from suite_engine.providers.gemini import GeminiProvider
from suite_engine.session.errors import ProviderError
from suite_engine.session.mode import AspectRatio
from suite_engine.session.requests import Turn


class _FakeChat:
    def __init__(self, chunks, error=None) -> None:
        self.chunks = chunks
        self.error = error
        self.sent: list[str] = []

    def send_message_stream(self, message):
        self.sent.append(message)
        for chunk in self.chunks:
            yield SimpleNamespace(text=chunk)
        if self.error is not None:
            raise self.error


class _FakeClient:
    def __init__(self, chat=None, response=None, image_error=None) -> None:
        self.chat = chat
        self.response = response
        self.image_error = image_error
        self.chat_kwargs: dict = {}
        self.image_kwargs: dict = {}
        self.chats = SimpleNamespace(create=self._create_chat)
        self.models = SimpleNamespace(generate_content=self._generate_content)

    def _create_chat(self, **kwargs):
        self.chat_kwargs = kwargs
        return self.chat

    def _generate_content(self, **kwargs):
        self.image_kwargs = kwargs
        if self.image_error is not None:
            raise self.image_error
        return self.response


def _image_response(parts):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])


def test_stream_chat_yields_text_chunks_and_sends_history() -> None:
    chat = _FakeChat(["Hel", None, "lo"])
    client = _FakeClient(chat=chat)
    provider = GeminiProvider(chat_model="gemini-test", client=client)

    fragments = list(provider.stream_chat([Turn("user", "hi"), Turn("assistant", "hey")], "how are you"))

    assert fragments == ["Hel", "lo"]
    assert chat.sent == ["how are you"]
    assert client.chat_kwargs["model"] == "gemini-test"
    history = client.chat_kwargs["history"]
    assert [item.role for item in history] == ["user", "model"]
    assert [item.parts[0].text for item in history] == ["hi", "hey"]
    assert client.chat_kwargs["config"].system_instruction


def test_stream_chat_wraps_sdk_failures() -> None:
    chat = _FakeChat(["partial"], error=ConnectionError("socket closed"))
    provider = GeminiProvider(client=_FakeClient(chat=chat))

    received: list[str] = []
    with pytest.raises(ProviderError, match="socket closed"):
        for fragment in provider.stream_chat([], "hello"):
            received.append(fragment)
    assert received == ["partial"]


def test_generate_image_returns_first_inline_image(png_bytes: bytes) -> None:
    response = _image_response(
        [
            SimpleNamespace(text="Here you go", inline_data=None),
            SimpleNamespace(text=None, inline_data=SimpleNamespace(data=png_bytes, mime_type="image/png")),
            SimpleNamespace(text=None, inline_data=SimpleNamespace(data=b"second", mime_type="image/png")),
        ]
    )
    client = _FakeClient(response=response)
    provider = GeminiProvider(image_model="gemini-image-test", client=client)

    payload = provider.generate_image("a red fox", AspectRatio.WIDE)

    assert payload is not None
    assert payload.data == png_bytes
    assert payload.mime_type == "image/png"
    assert client.image_kwargs["model"] == "gemini-image-test"
    assert client.image_kwargs["config"].image_config.aspect_ratio == "16:9"


def test_generate_image_without_inline_data_returns_none() -> None:
    client = _FakeClient(response=_image_response([SimpleNamespace(text="I can't draw that", inline_data=None)]))
    provider = GeminiProvider(client=client)
    assert provider.generate_image("a red fox", AspectRatio.SQUARE) is None

    client.response = SimpleNamespace(candidates=None)
    assert provider.generate_image("a red fox", AspectRatio.SQUARE) is None


def test_generate_image_wraps_sdk_failures() -> None:
    provider = GeminiProvider(client=_FakeClient(image_error=TimeoutError("deadline exceeded")))
    with pytest.raises(ProviderError, match="deadline exceeded"):
        provider.generate_image("a red fox", AspectRatio.SQUARE)


def test_missing_api_key_raises_provider_error(monkeypatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    provider = GeminiProvider()
    with pytest.raises(ProviderError, match="GEMINI_API_KEY or GOOGLE_API_KEY not set."):
        provider.generate_image("a red fox", AspectRatio.SQUARE)
    with pytest.raises(ProviderError, match="not set"):
        next(iter(provider.stream_chat([], "hi")))
