from __future__ import annotations

import pytest

from suite_engine.session.mode import AspectRatio, Mode, ModeState, parse_aspect_ratio, parse_mode


def test_defaults() -> None:
    state = ModeState()
    assert state.mode is Mode.CHAT
    assert state.aspect_ratio is AspectRatio.SQUARE


def test_aspect_ratio_retained_across_mode_switches() -> None:
    state = ModeState()
    state.set_mode(Mode.IMAGE)
    state.set_aspect_ratio("wide")
    state.set_mode("chat")
    assert state.aspect_ratio is AspectRatio.WIDE
    state.set_mode("image")
    assert state.is_image
    assert state.aspect_ratio is AspectRatio.WIDE


def test_aspect_ratio_stored_in_chat_mode() -> None:
    state = ModeState()
    state.set_aspect_ratio(AspectRatio.TALL)
    assert state.mode is Mode.CHAT
    assert state.aspect_ratio is AspectRatio.TALL


def test_parse_aspect_ratio_aliases() -> None:
    assert parse_aspect_ratio("1:1") is AspectRatio.SQUARE
    assert parse_aspect_ratio("16:9") is AspectRatio.WIDE
    assert parse_aspect_ratio("portrait") is AspectRatio.TALL
    assert parse_aspect_ratio(" Standard ") is AspectRatio.STANDARD
    assert AspectRatio.STANDARD.ratio == "4:3"


def test_parse_rejects_unknown_values() -> None:
    with pytest.raises(ValueError, match="Unknown aspect ratio"):
        parse_aspect_ratio("3:2")
    with pytest.raises(ValueError, match="Unknown mode"):
        parse_mode("about")
    assert parse_mode("image-gen") is Mode.IMAGE
