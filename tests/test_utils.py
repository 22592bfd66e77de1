from __future__ import annotations

import os
from pathlib import Path

from suite_engine.settings import DEFAULT_CHAT_MODEL, SuiteSettings
from suite_engine.utils import load_dotenv, preview_text


def test_load_dotenv_respects_existing_values(tmp_path: Path, monkeypatch) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "# comment\nexport SUITE_PROVIDER='dryrun'\nSUITE_CHAT_MODEL=\"gemini-custom\"\nBROKEN_LINE\n",
        encoding="utf-8",
    )
    monkeypatch.delenv("SUITE_PROVIDER", raising=False)
    monkeypatch.setenv("SUITE_CHAT_MODEL", "already-set")

    assert load_dotenv(env_path) is True
    assert os.environ["SUITE_PROVIDER"] == "dryrun"
    assert os.environ["SUITE_CHAT_MODEL"] == "already-set"
    monkeypatch.delenv("SUITE_PROVIDER", raising=False)


def test_load_dotenv_missing_file(tmp_path: Path) -> None:
    assert load_dotenv(tmp_path / "nope.env") is False


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("SUITE_PROVIDER", " DryRun ")
    monkeypatch.setenv("SUITE_ASPECT_RATIO", "WIDE")
    monkeypatch.delenv("SUITE_CHAT_MODEL", raising=False)
    monkeypatch.setenv("GOOGLE_API_KEY", "key-123")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    settings = SuiteSettings.from_env()

    assert settings.provider == "dryrun"
    assert settings.aspect_ratio == "wide"
    assert settings.chat_model == DEFAULT_CHAT_MODEL
    assert settings.api_key == "key-123"


def test_preview_text_collapses_and_truncates() -> None:
    assert preview_text("a\n  b") == "a b"
    assert preview_text("x" * 100, limit=10) == "x" * 9 + "…"
