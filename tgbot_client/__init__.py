"""Клиент Telegram Bot API: Router, Bot, DependencyResolver, Pagination, Poll, Inline, FSM. Приём обновлений — LongPoll или Webhook."""

__version__ = "0.1.0"

from .action import Action
from .api import ApiClient, LocalFile
from .bot import Bot
from .cache import FileCache, MemoryCache
from .context import UpdateContext
from .enums import (
    ChatAction,
    InlineType,
    MessageAction,
    MessageDice,
    PaginationLayout,
    PaginationMode,
    PaginationNumberStyle,
    ParseMode,
    PollType,
    UpdateType,
)
from .exceptions import (
    BotError,
    ConfigurationError,
    ContextLookupError,
    FileTooLargeError,
    PaginationError,
    ResolutionError,
    TelegramApiError,
)
from .file import File
from .inline import Inline
from .fsm import FSMContext, State, clear_state, get_state, set_state
from .keyboard import Button, Keyboard
from .message import OutgoingMessage
from .middleware import logging_middleware
from .pagination import Pagination
from .poll import Poll
from .polling import LongPoll
from .resolver import DependencyResolver, Handler, ParamSpec
from .router import DispatchResult, DispatchStatus, Router
from .storage import FileStorage, MemoryStorage, RedisStorage
from .types import Chat, Message, User
from .webhook import Webhook

__all__ = [
    "Action",
    "ApiClient",
    "Bot",
    "BotError",
    "Button",
    "Chat",
    "ChatAction",
    "ConfigurationError",
    "ContextLookupError",
    "DependencyResolver",
    "DispatchResult",
    "DispatchStatus",
    "FSMContext",
    "File",
    "FileCache",
    "FileStorage",
    "FileTooLargeError",
    "Handler",
    "Inline",
    "InlineType",
    "Keyboard",
    "LocalFile",
    "LongPoll",
    "MemoryCache",
    "MemoryStorage",
    "Message",
    "MessageAction",
    "MessageDice",
    "OutgoingMessage",
    "Pagination",
    "PaginationError",
    "PaginationLayout",
    "PaginationMode",
    "PaginationNumberStyle",
    "ParamSpec",
    "ParseMode",
    "Poll",
    "PollType",
    "RedisStorage",
    "ResolutionError",
    "Router",
    "State",
    "TelegramApiError",
    "UpdateContext",
    "UpdateType",
    "User",
    "Webhook",
    "clear_state",
    "get_state",
    "logging_middleware",
    "set_state",
]
