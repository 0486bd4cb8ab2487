from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable, Dict, List, Optional, Union

from . import captions, navigation
from .types import Callback, ReplyMarkup

if TYPE_CHECKING:  # pragma: no cover
    from .menu import Menu

Endpoint = Callable[["Node", Callback], Union[int, Awaitable[int]]]


class Node:
    """One menu screen: a button that holds the buttons of the next page.

    Structure is built once through the ``add*`` helpers. The parent is kept
    as an id resolved through the owning menu, never as an owning reference.
    """

    def __init__(
        self,
        menu: "Menu",
        node_id: str,
        text: str,
        endpoint: Optional[Endpoint] = None,
        parent_id: Optional[str] = None,
    ) -> None:
        self._menu = menu
        self._id = node_id
        self._text = text
        self._endpoint = endpoint
        self._parent_id = parent_id
        self._children: List[Node] = []
        self.path = text
        self.markups: Dict[str, ReplyMarkup] = {}

    def __repr__(self) -> str:
        return f"Node(id={self._id!r}, text={self._text!r})"

    @property
    def menu(self) -> "Menu":
        return self._menu

    @property
    def id(self) -> str:
        return self._id

    @property
    def text(self) -> str:
        return self._text

    @property
    def endpoint(self) -> Optional[Endpoint]:
        return self._endpoint

    @property
    def parent(self) -> Optional["Node"]:
        if self._parent_id is None:
            return None
        return self._menu.get_node(self._parent_id)

    @property
    def children(self) -> List["Node"]:
        return list(self._children)

    def markup(self, locale: str) -> Optional[ReplyMarkup]:
        """Return the rendered markup for ``locale``, or None before it is built."""

        return self.markups.get(locale)

    def is_ancestor_of(self, other: "Node") -> bool:
        current = other.parent
        while current is not None:
            if current is self:
                return True
            current = current.parent
        return False

    # -- assembly --------------------------------------------------------

    def add_child(self, text: str, endpoint: Optional[Endpoint] = None) -> "Node":
        """Append a new child and return it."""

        child = self._menu._new_node(text, endpoint, parent_id=self._id)
        self._children.append(child)
        return child

    def add(self, text: str, endpoint: Optional[Endpoint] = None) -> "Node":
        """Append a new child and return this node for chaining."""

        self.add_child(text, endpoint)
        return self

    def add_with(self, text: str, endpoint: Optional[Endpoint], *nodes: "Node") -> "Node":
        """Append a new child holding ``nodes`` and return this node."""

        self.add_child(text, endpoint).add_many(*nodes)
        return self

    def add_many(self, *nodes: "Node") -> "Node":
        """Re-parent ``nodes`` under this node, keeping their order."""

        for node in nodes:
            if node.menu is not self._menu:
                raise ValueError(f"{node!r} belongs to another menu")
            if node is self or node.is_ancestor_of(self):
                raise ValueError(f"{node!r} cannot be placed under its own subtree")
            previous = node.parent
            if previous is not None:
                previous._children.remove(node)
            node._parent_id = self._id
            self._children.append(node)
        return self

    # -- handlers bound by the renderer -----------------------------------

    async def handle(self, callback: Callback) -> None:
        await navigation.handle(self, callback)

    async def handle_dead_end(self, callback: Callback) -> None:
        await navigation.handle_dead_end(self, callback)

    # -- caption and language --------------------------------------------

    def set_caption(self, callback: Callback, text: str, *args: object) -> "Node":
        return captions.set_caption(self, callback, text, *args)

    def get_language(self, callback: Callback) -> str:
        return captions.get_language(self, callback)

    async def set_language(self, callback: Callback, locale: str) -> "Node":
        return await captions.set_language(self, callback, locale)
