from __future__ import annotations

import asyncio
import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import Any, Dict, Hashable, List, Optional, Protocol

import aiohttp

from .dispatch import Binding, Handler, HandlerRegistry
from .errors import ApiError
from .types import Callback, Message, ReplyMarkup

logger = getLogger(__name__)


class MessagingClient(Protocol):
    handlers: HandlerRegistry

    async def send(self, chat_id: int, text: str, markup: ReplyMarkup | None = None) -> Message:
        ...

    async def edit(self, message: Message, text: str, markup: ReplyMarkup | None = None) -> Message:
        ...

    async def respond(self, callback: Callback, text: str | None = None) -> None:
        ...

    def handle(self, unique: str, handler: Handler, *, slot: Optional[Hashable] = None) -> Binding:
        ...

    async def dispatch_callback(self, callback: Callback) -> bool:
        ...

    async def process_update(self, update: Dict[str, Any]) -> bool:
        ...


class _Dispatching(ABC):
    """Handler registration and update routing shared by the clients."""

    handlers: HandlerRegistry

    def handle(self, unique: str, handler: Handler, *, slot: Optional[Hashable] = None) -> Binding:
        return self.handlers.handle(unique, handler, slot=slot)

    @abstractmethod
    async def respond(self, callback: Callback, text: str | None = None) -> None:
        ...

    async def dispatch_callback(self, callback: Callback) -> bool:
        """Run the handler bound to the pressed button.

        Presses on buttons with no current handler are acknowledged and
        dropped. Returns True when a handler ran.
        """

        if await self.handlers.dispatch(callback):
            return True
        try:
            await self.respond(callback)
        except ApiError as exc:
            logger.warning(f"failed to respond to stale button from {callback.sender_id}: {exc}")
        return False

    async def process_update(self, update: Dict[str, Any]) -> bool:
        query = update.get("callback_query")
        if not isinstance(query, dict):
            return False
        return await self.dispatch_callback(Callback.from_dict(query))


class BotClient(_Dispatching):
    """Telegram-style Bot API client over aiohttp."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = "https://api.telegram.org",
        session: aiohttp.ClientSession | None = None,
        timeout_s: float = 10.0,
    ) -> None:
        if not token:
            raise ValueError("token is required")
        self.handlers = HandlerRegistry()
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)

    def _url(self, method: str) -> str:
        return f"{self._base_url}/bot{self._token}/{method}"

    def _http(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def _call(self, method: str, payload: Dict[str, Any]) -> Any:
        try:
            async with self._http().post(self._url(method), json=payload, timeout=self._timeout) as response:
                status = response.status
                body = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise ApiError(0, f"{method} failed: {exc}") from exc
        if not isinstance(body, dict):
            raise ApiError(status, f"{method} returned a malformed reply")
        if not body.get("ok"):
            raise ApiError(int(body.get("error_code") or status), str(body.get("description", "")))
        return body.get("result")

    async def send(self, chat_id: int, text: str, markup: ReplyMarkup | None = None) -> Message:
        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if markup is not None:
            payload["reply_markup"] = markup.to_dict()
        result = await self._call("sendMessage", payload)
        if not isinstance(result, dict):
            raise ApiError(0, "sendMessage returned no message")
        return Message.from_dict(result)

    async def edit(self, message: Message, text: str, markup: ReplyMarkup | None = None) -> Message:
        payload: Dict[str, Any] = {
            "chat_id": message.chat_id,
            "message_id": message.message_id,
            "text": text,
        }
        if markup is not None:
            payload["reply_markup"] = markup.to_dict()
        result = await self._call("editMessageText", payload)
        if isinstance(result, dict):
            return Message.from_dict(result)
        return Message(chat_id=message.chat_id, message_id=message.message_id, text=text)

    async def respond(self, callback: Callback, text: str | None = None) -> None:
        payload: Dict[str, Any] = {"callback_query_id": callback.id}
        if text:
            payload["text"] = text
        await self._call("answerCallbackQuery", payload)


@dataclass(frozen=True)
class Sent:
    chat_id: int
    message_id: int
    text: str
    markup: ReplyMarkup | None


class MemoryClient(_Dispatching):
    """In-process client that records every call instead of talking to a platform.

    Set ``fail_edit`` or ``fail_respond`` to make the next calls raise ``ApiError``.
    """

    def __init__(self) -> None:
        self.handlers = HandlerRegistry()
        self.sent: List[Sent] = []
        self.edits: List[Sent] = []
        self.responded: List[str] = []
        self.fail_edit = False
        self.fail_respond = False
        self._message_ids = itertools.count(1)

    async def send(self, chat_id: int, text: str, markup: ReplyMarkup | None = None) -> Message:
        message = Message(chat_id=chat_id, message_id=next(self._message_ids), text=text)
        self.sent.append(Sent(chat_id, message.message_id, text, markup))
        return message

    async def edit(self, message: Message, text: str, markup: ReplyMarkup | None = None) -> Message:
        if self.fail_edit:
            raise ApiError(400, "message can't be edited")
        self.edits.append(Sent(message.chat_id, message.message_id, text, markup))
        return Message(chat_id=message.chat_id, message_id=message.message_id, text=text)

    async def respond(self, callback: Callback, text: str | None = None) -> None:
        if self.fail_respond:
            raise ApiError(400, "query is too old")
        self.responded.append(callback.id)
