"""Shared slash-command metadata for parse + chat handling."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandSpec:
    command: str
    action: str
    arg_kind: str
    description: str


COMMAND_SPECS: tuple[CommandSpec, ...] = (
    CommandSpec("chat", "set_mode_chat", "none", "Switch to streamed text chat"),
    CommandSpec("image", "set_mode_image", "none", "Switch to image generation"),
    CommandSpec("ratio", "set_aspect_ratio", "raw", "Set image aspect ratio (square, wide, tall, standard)"),
    CommandSpec("save", "save_image", "raw", "Save the latest generated image"),
    CommandSpec("suggest", "suggest", "none", "Show starter prompts"),
    CommandSpec("history", "history", "none", "Print the transcript so far"),
    CommandSpec("help", "help", "none", "Show help"),
    CommandSpec("quit", "quit", "none", "Leave the chat"),
)

COMMAND_MAP = {spec.command: spec for spec in COMMAND_SPECS}
COMMAND_ALIASES = {"exit": "quit", "aspect": "ratio"}

SUGGESTED_PROMPTS = (
    "Explain quantum computing like I'm five.",
    "Write a creative landing page headline.",
)


def help_text() -> str:
    width = max(len(spec.command) for spec in COMMAND_SPECS) + 1
    lines = [f"/{spec.command:<{width}} {spec.description}" for spec in COMMAND_SPECS]
    return "Commands:\n" + "\n".join(f"  {line}" for line in lines)
