"""Navigation state machine driven by endpoint directives.

Every collaborator failure ends the handling of that one event: it is
logged and the session keeps its previous message and position.
"""

from __future__ import annotations

import inspect
from logging import getLogger
from typing import TYPE_CHECKING, Optional

from .errors import ApiError
from .types import Callback, Directive, ReplyMarkup

if TYPE_CHECKING:  # pragma: no cover
    from .node import Node
    from .sessions import Session

logger = getLogger(__name__)


def _dialog(node: "Node", callback: Callback) -> Optional["Session"]:
    session = node.menu.sessions.get(callback.sender_id)
    if session is None:
        logger.warning(f"{callback.sender_id} does not have an active dialog")
    return session


async def _acknowledge(node: "Node", callback: Callback) -> bool:
    try:
        await node.menu.client.respond(callback)
    except ApiError as exc:
        logger.warning(f"failed to respond to {callback.sender_id}: {exc}")
        return False
    return True


async def _update(
    node: "Node",
    session: "Session",
    markup: Optional[ReplyMarkup],
    position: "Node",
) -> bool:
    if markup is None:
        logger.warning(f"no markup for locale {session.locale!r}, cannot update {session.user_id}")
        return False
    try:
        message = await node.menu.client.edit(session.message, session.message.text, markup)
    except ApiError as exc:
        logger.warning(f"failed to update menu for {session.user_id}: {exc}")
        return False
    session.clear_dirty(node.id)
    session.message = message
    session.position = position
    return True


async def next_screen(node: "Node", callback: Callback) -> bool:
    """Show ``node``'s own options, or refresh its parent's page for a leaf.

    A leaf whose caption is unchanged needs no edit. Returns True when the
    display was updated.
    """

    session = _dialog(node, callback)
    if session is None:
        return False
    if not node.children and not session.is_dirty(node.id):
        return False
    source = node
    if not node.children and node.parent is not None:
        source = node.parent
    return await _update(node, session, source.markup(session.locale), node)


async def back(node: "Node", callback: Callback) -> Optional["Node"]:
    """Step one menu level up. Returns the new position, or None when nothing moved."""

    session = _dialog(node, callback)
    if session is None:
        return None
    parent = node.parent
    if parent is None or parent.parent is None:
        if not session.is_dirty(node.id):
            return None
        root = node.menu.root
        if await _update(node, session, root.markup(session.locale), root):
            return root
        return None
    if await _update(node, session, parent.parent.markup(session.locale), parent):
        return parent
    return None


async def handle(node: "Node", callback: Callback) -> None:
    """Handler for buttons whose node has an endpoint."""

    if not await _acknowledge(node, callback):
        return
    result = node.endpoint(node, callback)
    if inspect.isawaitable(result):
        result = await result
    if result == Directive.FORWARD:
        await next_screen(node, callback)
    elif result == Directive.BACK:
        await back(node, callback)


async def handle_dead_end(node: "Node", callback: Callback) -> None:
    """Handler for buttons whose node has no endpoint."""

    if not await _acknowledge(node, callback):
        return
    await next_screen(node, callback)
