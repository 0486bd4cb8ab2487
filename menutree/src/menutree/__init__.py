"""Hierarchical menu navigation for chat bots."""

from .client import BotClient, MemoryClient, MessagingClient
from .config import MenuConfig
from .dispatch import HandlerRegistry
from .errors import ApiError, MenuError, NotRenderedError, UnknownNodeError
from .i18n import CatalogTranslator, Translator
from .menu import Menu
from .node import Endpoint, Node
from .sessions import Session, SessionStore
from .types import Callback, Directive, InlineButton, Message, ReplyMarkup

__all__ = [
    "ApiError",
    "BotClient",
    "Callback",
    "CatalogTranslator",
    "Directive",
    "Endpoint",
    "HandlerRegistry",
    "InlineButton",
    "MemoryClient",
    "Menu",
    "MenuConfig",
    "MenuError",
    "Message",
    "MessagingClient",
    "Node",
    "NotRenderedError",
    "ReplyMarkup",
    "Session",
    "SessionStore",
    "Translator",
    "UnknownNodeError",
]
