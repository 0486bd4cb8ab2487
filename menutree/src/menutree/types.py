from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List


@dataclass
class Message:
    """A remote message the menu is displayed in."""

    chat_id: int
    message_id: int
    text: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            chat_id=int(data["chat"]["id"]),
            message_id=int(data["message_id"]),
            text=str(data.get("text", "")),
        )


@dataclass(frozen=True)
class Callback:
    """A button press delivered by the messaging platform."""

    id: str
    sender_id: int
    data: str
    message: Message | None = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Callback":
        message = data.get("message")
        return cls(
            id=str(data["id"]),
            sender_id=int(data["from"]["id"]),
            data=str(data.get("data", "")),
            message=Message.from_dict(message) if message else None,
        )


@dataclass(frozen=True)
class InlineButton:
    unique: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"text": self.text, "callback_data": self.unique}


@dataclass
class ReplyMarkup:
    """Inline keyboard layout: one button per row."""

    inline_keyboard: List[List[InlineButton]] = field(default_factory=list)

    def buttons(self) -> List[InlineButton]:
        return [button for row in self.inline_keyboard for button in row]

    def to_dict(self) -> Dict[str, Any]:
        return {"inline_keyboard": [[b.to_dict() for b in row] for row in self.inline_keyboard]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReplyMarkup":
        rows = data.get("inline_keyboard") or []
        return cls(
            inline_keyboard=[
                [InlineButton(unique=str(b["callback_data"]), text=str(b["text"])) for b in row] for row in rows
            ]
        )


class Directive(IntEnum):
    """Navigation decision returned by an endpoint."""

    STAY = 0
    FORWARD = 1
    BACK = -1
