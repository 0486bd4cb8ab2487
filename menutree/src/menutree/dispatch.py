from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import Awaitable, Callable, Dict, Hashable, Optional

from .types import Callback

logger = getLogger(__name__)

Handler = Callable[[Callback], Awaitable[None]]


@dataclass
class Binding:
    unique: str
    handler: Handler
    slot: Optional[Hashable] = None

    async def deliver(self, callback: Callback) -> None:
        await self.handler(callback)


class HandlerRegistry:
    """Routes button identifiers to handlers.

    A binding registered with a ``slot`` replaces whatever binding held the
    same slot before, so each slot routes to exactly one current identifier.
    """

    def __init__(self) -> None:
        self._bindings: Dict[str, Binding] = {}
        self._slots: Dict[Hashable, str] = {}

    def handle(self, unique: str, handler: Handler, *, slot: Optional[Hashable] = None) -> Binding:
        if not unique:
            raise ValueError("unique must not be empty")
        binding = Binding(unique=unique, handler=handler, slot=slot)
        if slot is not None:
            previous = self._slots.get(slot)
            if previous is not None and previous != unique:
                self._bindings.pop(previous, None)
            self._slots[slot] = unique
        self._bindings[unique] = binding
        return binding

    def unhandle(self, unique: str) -> None:
        binding = self._bindings.pop(unique, None)
        if binding is None or binding.slot is None:
            return
        if self._slots.get(binding.slot) == unique:
            self._slots.pop(binding.slot, None)

    def get(self, unique: str) -> Binding | None:
        return self._bindings.get(unique)

    def current(self, slot: Hashable) -> str | None:
        """Return the identifier currently bound to ``slot``."""

        return self._slots.get(slot)

    async def dispatch(self, callback: Callback) -> bool:
        """Deliver ``callback`` to its handler; return False for unknown identifiers."""

        binding = self._bindings.get(callback.data)
        if binding is None:
            logger.warning(f"no handler for button {callback.data!r} from {callback.sender_id}")
            return False
        await binding.deliver(callback)
        return True

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, unique: object) -> bool:
        return unique in self._bindings
