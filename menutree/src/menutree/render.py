from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .types import InlineButton, ReplyMarkup

if TYPE_CHECKING:  # pragma: no cover
    from .node import Node

logger = getLogger(__name__)

UNIQUE_PREFIX = "_node_"


def button_unique(timestamp_ms: int, locale: str, node_id: str) -> str:
    return f"{timestamp_ms}{UNIQUE_PREFIX}{locale}{node_id}"


def render(node: "Node", base_path: str, locale: str, timestamp_ms: int) -> ReplyMarkup:
    """Render ``node`` and its subtree for ``locale``, depth first.

    Paths are refreshed on the way down. Each child becomes one button row
    on ``node``'s markup, and a handler is bound for every button: the
    endpoint handler when the child has one, the dead-end handler otherwise.
    """

    menu = node.menu
    if node.parent is not None:
        node.path = f"{base_path}/{node.text}"
    else:
        node.path = base_path

    rows = []
    for child in node.children:
        render(child, node.path, locale, timestamp_ms)
        button = InlineButton(
            unique=button_unique(timestamp_ms, locale, child.id),
            text=menu.translator.tr(locale, child.path),
        )
        handler = child.handle if child.endpoint is not None else child.handle_dead_end
        menu.client.handle(button.unique, handler, slot=(child.id, locale))
        rows.append([button])

    markup = ReplyMarkup(inline_keyboard=rows)
    node.markups[locale] = markup
    return markup
