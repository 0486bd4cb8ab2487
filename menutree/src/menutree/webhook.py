from __future__ import annotations

from logging import getLogger
from typing import Any

from aiohttp import web

from .client import BotClient
from .errors import ApiError, NotRenderedError
from .menu import Menu
from .types import Callback

logger = getLogger(__name__)

MENU_KEY = web.AppKey("menu", Menu)
START_TEXT_KEY = web.AppKey("start_text", str)


async def handle_health(_: web.Request) -> web.Response:
    return web.Response(text="ok")


def _invalid_request(message: str) -> web.Response:
    return web.json_response({"code": "invalid_request", "message": message}, status=400)


async def _start_dialog(menu: Menu, message: dict[str, Any], start_text: str) -> None:
    try:
        user_id = int(message["from"]["id"])
        chat_id = int(message["chat"]["id"])
    except (KeyError, TypeError, ValueError):
        logger.warning("ignoring /start without sender or chat")
        return
    locale = message["from"].get("language_code")
    if locale not in menu.rendered_locales:
        locale = menu.default_locale
    try:
        await menu.start(user_id, chat_id, start_text, locale)
    except (ApiError, NotRenderedError) as exc:
        logger.warning(f"failed to start dialog for {user_id}: {exc}")


async def handle_update(request: web.Request) -> web.Response:
    menu = request.app[MENU_KEY]
    try:
        update = await request.json()
    except Exception:
        return _invalid_request("malformed json")
    if not isinstance(update, dict):
        return _invalid_request("update must be an object")

    if "callback_query" in update:
        query = update["callback_query"]
        if not isinstance(query, dict):
            return _invalid_request("callback_query must be an object")
        try:
            callback = Callback.from_dict(query)
        except (KeyError, TypeError, ValueError):
            return _invalid_request("callback_query requires id and from")
        await menu.client.dispatch_callback(callback)
        return web.json_response({"status": "ok"})

    message = update.get("message")
    if not isinstance(message, dict):
        return web.json_response({"status": "ok"})
    text = str(message.get("text", ""))
    if text.startswith("/start"):
        await _start_dialog(menu, message, request.app[START_TEXT_KEY])
    elif text.startswith("/stop"):
        sender = message.get("from")
        if isinstance(sender, dict) and isinstance(sender.get("id"), int):
            menu.stop(sender["id"])
    return web.json_response({"status": "ok"})


def create_app(menu: Menu, *, path: str = "/v1/updates", start_text: str = "Menu") -> web.Application:
    app = web.Application()
    app[MENU_KEY] = menu
    app[START_TEXT_KEY] = start_text
    app.router.add_get("/healthz", handle_health)
    app.router.add_post(path, handle_update)

    async def close_client(_: web.Application) -> None:
        if isinstance(menu.client, BotClient):
            await menu.client.close()

    app.on_cleanup.append(close_client)
    return app
