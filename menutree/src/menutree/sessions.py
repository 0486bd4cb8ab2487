from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Set

from .types import Message

if TYPE_CHECKING:  # pragma: no cover
    from .node import Node


@dataclass
class Session:
    """Per-user dialog state.

    ``position`` always references a node of the shared tree. ``dirty`` holds
    the ids of nodes whose caption changed in ``message.text`` without being
    pushed to the remote display yet.
    """

    user_id: int
    message: Message
    position: "Node"
    locale: str
    dirty: Set[str] = field(default_factory=set)

    def mark_dirty(self, node_id: str) -> None:
        self.dirty.add(node_id)

    def is_dirty(self, node_id: str) -> bool:
        return node_id in self.dirty

    def clear_dirty(self, node_id: str) -> None:
        self.dirty.discard(node_id)


class SessionStore:
    """Tracks active dialogs keyed by user id."""

    def __init__(self) -> None:
        self._by_user: Dict[int, Session] = {}

    def create(self, user_id: int, message: Message, position: "Node", locale: str) -> Session:
        session = Session(user_id=user_id, message=message, position=position, locale=locale)
        self._by_user[user_id] = session
        return session

    def get(self, user_id: int) -> Session | None:
        return self._by_user.get(user_id)

    def drop(self, user_id: int) -> None:
        self._by_user.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._by_user)
