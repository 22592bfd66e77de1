from __future__ import annotations

from suite_engine.session.mode import AspectRatio, Mode
from suite_engine.session.requests import ChatRequest, ImageRequest, Turn, build_request
from suite_engine.session.transcript import EntryKind, MessageLog, Speaker


def _prior_log() -> MessageLog:
    log = MessageLog()
    log.append_text(Speaker.USER, "What is a fox?")
    log.append_text(Speaker.ASSISTANT, "A small canid.")
    log.append_text(Speaker.ASSISTANT, "")
    log.append(Speaker.ASSISTANT, EntryKind.IMAGE, "Generated: a fox", image_payload="data:image/png;base64,AA")
    return log


def test_chat_request_carries_full_history() -> None:
    request = build_request(Mode.CHAT, "Tell me more", AspectRatio.SQUARE, _prior_log().entries)

    assert isinstance(request, ChatRequest)
    assert request.prompt == "Tell me more"
    assert request.turns == (
        Turn(role="user", text="What is a fox?"),
        Turn(role="assistant", text="A small canid."),
        Turn(role="assistant", text="Generated: a fox"),
    )


def test_chat_request_with_empty_history() -> None:
    request = build_request(Mode.CHAT, "hi", AspectRatio.WIDE)
    assert isinstance(request, ChatRequest)
    assert request.turns == ()


def test_image_request_has_no_history() -> None:
    request = build_request(Mode.IMAGE, "a red fox", AspectRatio.TALL, _prior_log().entries)
    assert request == ImageRequest(prompt="a red fox", aspect_ratio=AspectRatio.TALL)
