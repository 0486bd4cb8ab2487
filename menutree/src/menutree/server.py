"""Command line entry points: serve a menu, dump its markups, simulate dialogs."""

from __future__ import annotations

import argparse
import asyncio
import importlib
import itertools
import json
import logging
import sys
from typing import Any, Callable, Iterable, TextIO

from aiohttp import web

from .client import BotClient, MemoryClient, MessagingClient, Sent
from .config import MenuConfig
from .menu import Menu
from .types import Callback
from .webhook import create_app

MenuFactory = Callable[[MessagingClient, MenuConfig], Menu]


def load_factory(spec: str) -> MenuFactory:
    """Resolve ``package.module:function`` to a menu factory."""

    module_name, _, attr = spec.partition(":")
    if not module_name or not attr:
        raise ValueError(f"factory must look like module:function, got {spec!r}")
    module = importlib.import_module(module_name)
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ValueError(f"{spec!r} is not callable")
    return factory


def _sent_frame(kind: str, sent: Sent) -> dict[str, Any]:
    buttons = [b.text for b in sent.markup.buttons()] if sent.markup is not None else []
    return {
        "t": kind,
        "chat_id": sent.chat_id,
        "message_id": sent.message_id,
        "text": sent.text,
        "buttons": buttons,
    }


async def _simulate(menu: Menu, client: MemoryClient, frames: Iterable[dict], output: TextIO) -> None:
    callback_ids = itertools.count(1)
    sent_seen = 0
    edits_seen = 0

    for frame in frames:
        frame_type = frame.get("t")
        if frame_type == "start":
            await menu.start(
                int(frame["user_id"]),
                int(frame.get("chat_id", frame["user_id"])),
                frame.get("text", "Menu"),
                frame.get("locale"),
            )
        elif frame_type == "select":
            user_id = int(frame["user_id"])
            session = menu.get_dialog(user_id)
            if session is None:
                raise ValueError(f"user {user_id} has no dialog")
            node = menu.find(frame["path"])
            unique = client.handlers.current((node.id, session.locale))
            if unique is None:
                raise ValueError(f"{frame['path']!r} has no button in {session.locale!r}")
            callback = Callback(
                id=f"cb{next(callback_ids)}",
                sender_id=user_id,
                data=unique,
                message=session.message,
            )
            await client.handlers.dispatch(callback)
        else:
            raise ValueError(f"unsupported frame type: {frame_type}")

        for sent in client.sent[sent_seen:]:
            output.write(json.dumps(_sent_frame("send", sent)) + "\n")
        for sent in client.edits[edits_seen:]:
            output.write(json.dumps(_sent_frame("edit", sent)) + "\n")
        sent_seen = len(client.sent)
        edits_seen = len(client.edits)


def simulate(factory: MenuFactory, frames: Iterable[dict], output: TextIO, config: MenuConfig | None = None) -> None:
    """Replay ``start``/``select`` frames against an in-memory client and emit each send or edit."""

    config = config or MenuConfig()
    client = MemoryClient()
    menu = factory(client, config)
    menu.build_all()
    asyncio.run(_simulate(menu, client, frames, output))


def dump(factory: MenuFactory, locale: str, output: TextIO, config: MenuConfig | None = None) -> None:
    config = config or MenuConfig()
    menu = factory(MemoryClient(), config)
    menu.build(locale)
    screens = []
    for node in menu.walk():
        markup = node.markup(locale)
        screens.append(
            {
                "id": node.id,
                "path": node.path,
                "endpoint": node.endpoint is not None,
                "buttons": [b.text for b in markup.buttons()] if markup is not None else [],
            }
        )
    output.write(json.dumps({"locale": locale, "screens": screens}, indent=2, ensure_ascii=False) + "\n")


def _load_frames(handle: TextIO) -> list[dict]:
    """Read frames given either as one JSON array or as one JSON object per line."""

    content = handle.read().strip()
    if not content:
        return []
    if content.startswith("["):
        frames = json.loads(content)
    else:
        frames = [json.loads(line) for line in content.splitlines() if line.strip()]
    for frame in frames:
        if not isinstance(frame, dict):
            raise ValueError(f"frame must be an object, got {frame!r}")
    return frames


def _run_serve(args: argparse.Namespace, config: MenuConfig) -> int:
    factory = load_factory(args.factory)
    client = BotClient(config.token, base_url=config.api_base_url, timeout_s=config.request_timeout_s)
    menu = factory(client, config)
    menu.build_all()
    app = create_app(menu, start_text=args.start_text)
    web.run_app(app, host=args.host or config.host, port=args.port or config.port)
    return 0


def main(argv: list[str] | None = None, output: TextIO | None = None) -> int:
    """Entry point for CLI commands."""

    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(description="Menu tree CLI")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the aiohttp webhook server")
    serve_parser.add_argument("factory", help="Menu factory as module:function")
    serve_parser.add_argument("--host", default=None, help="Host to bind")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to bind")
    serve_parser.add_argument("--start-text", default="Menu", help="Text of the message sent on /start")

    dump_parser = subparsers.add_parser("dump", help="Print rendered markups as JSON")
    dump_parser.add_argument("factory", help="Menu factory as module:function")
    dump_parser.add_argument("--locale", default=None, help="Locale to render; defaults to the configured default")

    simulate_parser = subparsers.add_parser("simulate", help="Replay dialog frames against an in-memory client")
    simulate_parser.add_argument("factory", help="Menu factory as module:function")
    simulate_parser.add_argument(
        "-f",
        "--file",
        type=argparse.FileType("r"),
        default=None,
        help="Path to JSON frames file; defaults to stdin",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config = MenuConfig.from_env()
    stream = output or sys.stdout

    if args.command == "serve":
        return _run_serve(args, config)
    if args.command == "dump":
        dump(load_factory(args.factory), args.locale or config.default_locale, stream, config)
        return 0
    simulate(load_factory(args.factory), _load_frames(args.file or sys.stdin), stream, config)
    return 0


if __name__ == "__main__":  # pragma: no cover - convenience execution
    raise SystemExit(main())
