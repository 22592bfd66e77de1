"""Suite CLI entrypoints."""

from __future__ import annotations

import argparse
import sys
import uuid
from pathlib import Path

from .chat.loop import ChatLoop, TranscriptPrinter
from .providers import default_registry
from .providers.google_utils import save_data_uri
from .runs.events import EventWriter
from .session.controller import SessionController
from .session.mode import Mode, ModeState, parse_aspect_ratio
from .settings import SuiteSettings
from .utils import load_dotenv


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="suite", description="Gemini chat and image studio")
    sub = parser.add_subparsers(dest="command")

    chat = sub.add_parser("chat", help="Interactive chat loop")
    _add_session_args(chat)

    run = sub.add_parser("run", help="Single turn")
    run.add_argument("--prompt", required=True)
    _add_session_args(run)

    return parser


def _add_session_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--out", default=".", help="Directory for saved images")
    parser.add_argument("--events", help="Path to events.jsonl")
    parser.add_argument("--provider", help="Provider name (gemini, dryrun)")
    parser.add_argument("--chat-model", dest="chat_model")
    parser.add_argument("--image-model", dest="image_model")
    parser.add_argument("--mode", choices=[mode.value for mode in Mode], default=Mode.CHAT.value)
    parser.add_argument("--aspect-ratio", dest="aspect_ratio", help="square, wide, tall, standard (or 1:1, 16:9, ...)")


def _settings_from_args(args: argparse.Namespace) -> SuiteSettings:
    settings = SuiteSettings.from_env()
    if args.provider:
        settings.provider = args.provider.strip().lower()
    if args.chat_model:
        settings.chat_model = args.chat_model
    if args.image_model:
        settings.image_model = args.image_model
    if args.aspect_ratio:
        settings.aspect_ratio = args.aspect_ratio
    return settings


def build_controller(args: argparse.Namespace) -> SessionController:
    settings = _settings_from_args(args)
    registry = default_registry(settings)
    provider = registry.get(settings.provider)
    if provider is None:
        raise SystemExit(f"Unknown provider '{settings.provider}'. Available: {', '.join(registry.list())}")
    try:
        aspect_ratio = parse_aspect_ratio(settings.aspect_ratio)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    session_id = str(uuid.uuid4())
    events = EventWriter(Path(args.events), session_id) if args.events else None
    return SessionController(
        provider,
        mode_state=ModeState(mode=Mode(args.mode), aspect_ratio=aspect_ratio),
        events=events,
        session_id=session_id,
    )


def _handle_chat(args: argparse.Namespace) -> int:
    controller = build_controller(args)
    ChatLoop(controller, out_dir=Path(args.out)).run()
    return 0


def _handle_run(args: argparse.Namespace) -> int:
    controller = build_controller(args)
    printer = TranscriptPrinter(sys.stdout)
    unsubscribe = controller.log.subscribe(printer)
    try:
        accepted = controller.submit(args.prompt)
    finally:
        printer.finish()
        unsubscribe()
        controller.shutdown()
    if not accepted:
        print("Prompt is empty.")
        return 2
    if controller.last_error:
        return 1
    image = controller.log.latest_image()
    if image is not None and image.image_payload:
        saved = save_data_uri(image.image_payload, Path(args.out) / f"generated-gemini-{image.id}")
        print(f"Saved image to {saved}")
    return 0


def main() -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args()
    if args.command == "chat":
        raise SystemExit(_handle_chat(args))
    if args.command == "run":
        raise SystemExit(_handle_run(args))
    parser.print_help()
    raise SystemExit(1)


if __name__ == "__main__":
    main()
