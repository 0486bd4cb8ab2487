from __future__ import annotations

import itertools
import threading
import time
from logging import getLogger
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Set

from .config import MenuConfig
from .errors import NotRenderedError, UnknownNodeError
from .i18n import Translator
from .node import Endpoint, Node
from .render import render
from .sessions import Session, SessionStore

if TYPE_CHECKING:  # pragma: no cover
    from .client import MessagingClient

logger = getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class Menu:
    """Root context of a menu tree.

    Owns every node (looked up by id), the id counter, the collaborators the
    navigation handlers talk to, and the set of locales already rendered.
    """

    def __init__(
        self,
        client: "MessagingClient",
        translator: Translator,
        *,
        sessions: SessionStore | None = None,
        config: MenuConfig | None = None,
        now_func=_now_ms,
    ) -> None:
        self.config = config or MenuConfig()
        self.client = client
        self.translator = translator
        self.sessions = sessions or SessionStore()
        self._now = now_func
        self._serial = itertools.count(1)
        self._serial_lock = threading.Lock()
        self._nodes: Dict[str, Node] = {}
        self._rendered: Set[str] = set()
        self.root = self._new_node(self.config.base_path, None, parent_id=None)

    @property
    def default_locale(self) -> str:
        return self.config.default_locale

    def _next_id(self) -> str:
        with self._serial_lock:
            return str(next(self._serial))

    def _new_node(self, text: str, endpoint: Optional[Endpoint], *, parent_id: Optional[str]) -> Node:
        node = Node(self, self._next_id(), text, endpoint, parent_id)
        self._nodes[node.id] = node
        return node

    def node(self, text: str, endpoint: Optional[Endpoint] = None) -> Node:
        """Create a detached node, to be placed with ``add_with``/``add_many``."""

        return self._new_node(text, endpoint, parent_id=None)

    def get_node(self, node_id: str) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise UnknownNodeError(f"unknown node id {node_id!r}") from None

    def find(self, path: str) -> Node:
        """Resolve a ``/``-joined caption path relative to the root."""

        node = self.root
        for part in (p for p in path.split("/") if p):
            for child in node.children:
                if child.text == part:
                    node = child
                    break
            else:
                raise UnknownNodeError(f"no node at {path!r}")
        return node

    def walk(self) -> Iterator[Node]:
        """Yield the nodes reachable from the root, depth first."""

        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __len__(self) -> int:
        return len(self._nodes)

    # -- rendering -------------------------------------------------------

    def build(self, locale: str) -> None:
        """Render the whole tree for ``locale`` and bind fresh button handlers."""

        render(self.root, self.config.base_path, locale, self._now())
        self._rendered.add(locale)
        logger.info(f"menu built for {locale!r}")

    def build_all(self) -> None:
        for locale in self.config.locales:
            self.build(locale)

    def rendered(self, locale: str) -> bool:
        return locale in self._rendered

    @property
    def rendered_locales(self) -> Set[str]:
        return set(self._rendered)

    # -- dialogs ---------------------------------------------------------

    def get_dialog(self, user_id: int) -> Session | None:
        return self.sessions.get(user_id)

    async def start(self, user_id: int, chat_id: int, text: str, locale: str | None = None) -> Session:
        """Send a fresh root menu and (re)start the user's dialog at the root."""

        locale = locale or self.default_locale
        markup = self.root.markup(locale)
        if markup is None:
            raise NotRenderedError(locale)
        message = await self.client.send(chat_id, text, markup)
        session = self.sessions.create(user_id, message, self.root, locale)
        logger.info(f"dialog started for {user_id} in {locale!r}")
        return session

    def stop(self, user_id: int) -> bool:
        """End the user's dialog; its buttons stop navigating until the next ``start``."""

        if self.sessions.get(user_id) is None:
            return False
        self.sessions.drop(user_id)
        logger.info(f"dialog stopped for {user_id}")
        return True
