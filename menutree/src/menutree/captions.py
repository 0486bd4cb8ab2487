from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from . import navigation
from .types import Callback

if TYPE_CHECKING:  # pragma: no cover
    from .node import Node

logger = getLogger(__name__)


def set_caption(node: "Node", callback: Callback, text: str, *args: object) -> "Node":
    """Change the displayed text; the edit happens on the next navigation step.

    ``args`` are substituted with ``str.format`` when given.
    """

    session = node.menu.sessions.get(callback.sender_id)
    if session is None:
        logger.warning(f"{callback.sender_id} does not have an active dialog")
        return node
    if args:
        text = text.format(*args)
    if session.message.text != text:
        session.message.text = text
        session.mark_dirty(node.id)
    return node


def get_language(node: "Node", callback: Callback) -> str:
    session = node.menu.sessions.get(callback.sender_id)
    if session is None:
        return node.menu.default_locale
    return session.locale


async def set_language(node: "Node", callback: Callback, locale: str) -> "Node":
    """Switch the dialog locale and push the re-localised menu right away."""

    session = node.menu.sessions.get(callback.sender_id)
    if session is None:
        logger.warning(f"{callback.sender_id} does not have an active dialog")
        return node
    session.locale = locale
    session.mark_dirty(node.id)
    await navigation.next_screen(node, callback)
    return node
