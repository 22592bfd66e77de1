"""Parse user input into structured intents."""

from __future__ import annotations

import re
import shlex

from .command_registry import COMMAND_ALIASES, COMMAND_MAP
from .intent_schema import Intent

_SLASH_PATTERN = re.compile(r"^/(\w+)(?:\s+(.*))?$", re.DOTALL)


def _parse_single_path_arg(arg: str) -> str:
    """Parse a single path argument (best-effort).

    Accepts quoted paths for spaces. Unquoted paths with spaces are joined
    back together.
    """
    if not arg:
        return ""
    try:
        parts = shlex.split(arg)
    except ValueError:
        parts = arg.split()
    return " ".join(part for part in parts if part)


def parse_intent(text: str) -> Intent:
    raw = text.strip()
    if not raw:
        return Intent(action="noop", raw=text)
    match = _SLASH_PATTERN.match(raw)
    if not match:
        return Intent(action="prompt", raw=text, prompt=text)
    command = match.group(1).lower()
    arg = (match.group(2) or "").strip()
    command = COMMAND_ALIASES.get(command, command)
    if command == "mode":
        target = arg.lower()
        if target in {"chat", "image"}:
            return Intent(action=f"set_mode_{target}", raw=text)
        return Intent(action="unknown", raw=text, command_args={"command": "mode", "arg": arg})
    spec = COMMAND_MAP.get(command)
    if spec is None:
        return Intent(action="unknown", raw=text, command_args={"command": command})
    if spec.action == "set_aspect_ratio":
        return Intent(action=spec.action, raw=text, command_args={"aspect_ratio": arg})
    if spec.action == "save_image":
        return Intent(action=spec.action, raw=text, command_args={"path": _parse_single_path_arg(arg)})
    return Intent(action=spec.action, raw=text)
