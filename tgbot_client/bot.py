"""Bot — фасад одного обновления: контекст update + вызовы API + FSM/сессия.

Новый экземпляр на каждый update, между задачами не делится. Внутри хендлера
его можно получить аргументом с аннотацией Bot или через Bot.current().
"""

import contextvars
from typing import Any, Dict, List, Optional, Sequence, Union

from loguru import logger

from .context import UpdateContext, _message_of
from .enums import ChatAction, InlineType, ParseMode, PollType
from .exceptions import ConfigurationError, ContextLookupError
from .file import File
from .inline import Inline
from .message import OutgoingMessage
from .pagination import Pagination
from .poll import Poll
from .types import Chat, Message, User

ChatId = Union[int, str]

# Bot текущего update, чтобы Bot.current() работал без передачи аргументом
_current_bot: contextvars.ContextVar[Optional["Bot"]] = contextvars.ContextVar("current_bot", default=None)

_CHAT_PATHS = (
    ("message", "chat"),
    ("edited_message", "chat"),
    ("channel_post", "chat"),
    ("edited_channel_post", "chat"),
    ("my_chat_member", "chat"),
    ("chat_member", "chat"),
    ("chat_join_request", "chat"),
    ("callback_query", "message", "chat"),
)

_USER_KEYS = (
    "message",
    "edited_message",
    "callback_query",
    "inline_query",
    "my_chat_member",
    "chat_member",
    "chat_join_request",
)


class Bot:
    """Фасад над ApiClient для одного update.

    api — объект с async call_api(method, params) (обычно ApiClient).
    storage — хранилище FSM/сессий, если бот использует step()/session().
    buttons — {id: text} кнопок роутера, для подстановки id в клавиатуры.
    """

    def __init__(
        self,
        api: Any,
        context: UpdateContext,
        *,
        storage: Optional[Any] = None,
        buttons: Optional[Dict[str, str]] = None,
        parse_mode: ParseMode = ParseMode.NONE,
        log: Optional[Any] = None,
    ) -> None:
        self.api = api
        self.context = context
        self.storage = storage
        self.buttons: Dict[str, str] = buttons if buttons is not None else {}
        self.parse_mode = ParseMode(parse_mode)
        self._log = log if log is not None else logger

    @staticmethod
    def current() -> Optional["Bot"]:
        """Bot, который сейчас обрабатывает update. Вне обработки — None."""
        return _current_bot.get()

    def activate(self) -> contextvars.Token:
        """Делает self текущим для Bot.current(). Вернуть токен в deactivate() по окончании."""
        return _current_bot.set(self)

    @staticmethod
    def deactivate(token: contextvars.Token) -> None:
        _current_bot.reset(token)

    async def call_api(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self.api.call_api(method, params or {})

    # --- построители ---

    def msg(self, text: Optional[str] = None) -> OutgoingMessage:
        return OutgoingMessage(self, text)

    def pagination(self) -> Pagination:
        return Pagination()

    def file(self, file_id: str) -> File:
        return File(file_id, self.api)

    def poll(self, poll_type: PollType = PollType.REGULAR) -> Poll:
        return Poll(self, poll_type)

    def inline(self, inline_type: InlineType = InlineType.ARTICLE) -> Inline:
        """Результат для answer_inline_query. parse_mode и кнопки берутся у бота."""
        return Inline(inline_type, self.parse_mode, self.buttons)

    # --- FSM и сессия ---

    def _require_storage(self) -> Any:
        if self.storage is None:
            raise ConfigurationError("Storage не подключён: router.set_storage(...)")
        return self.storage

    async def step(self, state: str) -> None:
        """Переводит пользователя в состояние state. Следующий его update уйдёт в on_state(state)."""
        storage = self._require_storage()
        if self.context.user_id is not None:
            await storage.set_state(self.context.user_id, state)

    async def end_step(self, clear_data: bool = True) -> None:
        """Сбрасывает состояние; clear_data — заодно и данные сессии."""
        storage = self._require_storage()
        user_id = self.context.user_id
        if user_id is None:
            return
        await storage.clear_state(user_id)
        if clear_data:
            await storage.clear_session_data(user_id)

    async def session(self, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Без аргумента — текущие данные сессии. С dict — мержит и возвращает итог."""
        storage = self._require_storage()
        user_id = self.context.user_id
        if user_id is None:
            return {}
        if data is not None:
            await storage.set_session_data(user_id, data)
        return await storage.get_session_data(user_id)

    # --- отправка ---

    async def send_message(self, chat_id: ChatId, text: str, **params: Any) -> Dict[str, Any]:
        return await self.call_api("sendMessage", {"chat_id": chat_id, "text": text, **params})

    async def reply(self, text: str, **params: Any) -> Dict[str, Any]:
        """Текст в текущий чат."""
        params.setdefault("chat_id", self.context.chat_id)
        return await self.call_api("sendMessage", {**params, "text": text})

    async def answer_callback_query(
        self,
        text: Optional[str] = None,
        *,
        show_alert: bool = False,
        query_id: Optional[str] = None,
        **params: Any,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"callback_query_id": query_id or self.context.query_id}
        if text:
            payload["text"] = text
        if show_alert:
            payload["show_alert"] = True
        payload.update(params)
        return await self.call_api("answerCallbackQuery", payload)

    async def answer_inline_query(
        self,
        results: List[Dict[str, Any]],
        *,
        query_id: Optional[str] = None,
        **params: Any,
    ) -> Dict[str, Any]:
        payload = {"inline_query_id": query_id or self.context.query_id, "results": results}
        payload.update(params)
        return await self.call_api("answerInlineQuery", payload)

    async def del_msg(
        self,
        msg_ids: Optional[Union[int, Sequence[int]]] = None,
        chat_id: Optional[ChatId] = None,
    ) -> Dict[str, Any]:
        """Удаляет одно сообщение или пачку (список id → deleteMessages). По умолчанию — текущее."""
        msg_ids = msg_ids if msg_ids is not None else self.context.message_id
        chat_id = chat_id if chat_id is not None else self.context.chat_id
        if isinstance(msg_ids, (list, tuple)):
            return await self.call_api("deleteMessages", {"chat_id": chat_id, "message_ids": list(msg_ids)})
        return await self.call_api("deleteMessage", {"chat_id": chat_id, "message_id": msg_ids})

    async def _copy_or_forward(
        self,
        single: str,
        batch: str,
        msg_ids: Optional[Union[int, Sequence[int]]],
        chat_id: Optional[ChatId],
        from_chat_id: Optional[ChatId],
        params: Dict[str, Any],
    ) -> Dict[str, Any]:
        msg_ids = msg_ids if msg_ids is not None else self.context.message_id
        chat_id = chat_id if chat_id is not None else self.context.chat_id
        from_chat_id = from_chat_id if from_chat_id is not None else chat_id
        payload: Dict[str, Any] = {"chat_id": chat_id, "from_chat_id": from_chat_id}
        if isinstance(msg_ids, (list, tuple)):
            method = batch
            payload["message_ids"] = list(msg_ids)
        else:
            method = single
            payload["message_id"] = msg_ids
        payload.update(params)
        return await self.call_api(method, payload)

    async def copy_msg(
        self,
        msg_ids: Optional[Union[int, Sequence[int]]] = None,
        chat_id: Optional[ChatId] = None,
        from_chat_id: Optional[ChatId] = None,
        **params: Any,
    ) -> Dict[str, Any]:
        return await self._copy_or_forward("copyMessage", "copyMessages", msg_ids, chat_id, from_chat_id, params)

    async def fwd_msg(
        self,
        msg_ids: Optional[Union[int, Sequence[int]]] = None,
        chat_id: Optional[ChatId] = None,
        from_chat_id: Optional[ChatId] = None,
        **params: Any,
    ) -> Dict[str, Any]:
        return await self._copy_or_forward(
            "forwardMessage", "forwardMessages", msg_ids, chat_id, from_chat_id, params
        )

    async def pin_msg(
        self,
        msg_id: Optional[int] = None,
        chat_id: Optional[ChatId] = None,
        disable_notification: bool = False,
    ) -> Dict[str, Any]:
        return await self.call_api("pinChatMessage", {
            "chat_id": chat_id if chat_id is not None else self.context.chat_id,
            "message_id": msg_id if msg_id is not None else self.context.message_id,
            "disable_notification": disable_notification,
        })

    async def unpin_msg(
        self,
        msg_id: Optional[int] = None,
        chat_id: Optional[ChatId] = None,
        all_messages: bool = False,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"chat_id": chat_id if chat_id is not None else self.context.chat_id}
        if all_messages:
            return await self.call_api("unpinAllChatMessages", params)
        params["message_id"] = msg_id if msg_id is not None else self.context.message_id
        return await self.call_api("unpinChatMessage", params)

    async def send_action(self, action: ChatAction = ChatAction.TYPING) -> "Bot":
        await self.call_api("sendChatAction", {"chat_id": self.context.chat_id, "action": ChatAction(action).value})
        return self

    # --- данные update ---

    @property
    def update(self) -> Dict[str, Any]:
        return self.context.update

    @property
    def type(self) -> Optional[str]:
        return self.context.type

    @property
    def chat_id(self) -> Optional[int]:
        return self.context.chat_id

    @property
    def user_id(self) -> Optional[int]:
        return self.context.user_id

    @property
    def message_id(self) -> Optional[int]:
        return self.context.message_id

    @property
    def message_thread_id(self) -> Optional[int]:
        return self.context.message_thread_id

    @property
    def text(self) -> Optional[str]:
        return self.context.text

    @property
    def callback_data(self) -> Optional[str]:
        return self.context.callback_data

    @property
    def query_id(self) -> Optional[str]:
        return self.context.query_id

    def get_user(self) -> User:
        """Автор update. Нет поля from — ContextLookupError."""
        update = self.context.update
        for key in _USER_KEYS:
            source = update.get(key)
            if isinstance(source, dict) and isinstance(source.get("from"), dict):
                return User(source["from"])
        raise ContextLookupError("Не удалось найти данные пользователя ('from') в текущем событии")

    def get_chat(self) -> Chat:
        update = self.context.update
        for path in _CHAT_PATHS:
            node: Any = update
            for key in path:
                node = node.get(key) if isinstance(node, dict) else None
                if node is None:
                    break
            if isinstance(node, dict):
                return Chat(node)
        raise ContextLookupError("Не удалось найти данные чата ('chat') в текущем событии")

    def get_message(self) -> Message:
        message = _message_of(self.context.update)
        if message is None:
            raise ContextLookupError("Не удалось найти данные сообщения в текущем событии")
        return Message(message)

    def __repr__(self) -> str:
        return f"Bot(update_id={self.context.update_id!r}, type={self.context.type!r})"
