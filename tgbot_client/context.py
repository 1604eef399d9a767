"""UpdateContext — неизменяемый срез одного update: тип, chat_id, user_id, текст, callback_data и т.п."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Откуда брать user: первый найденный ключ
_USER_SOURCES = (
    "message",
    "edited_message",
    "callback_query",
    "inline_query",
    "my_chat_member",
    "chat_member",
    "chat_join_request",
)


def _message_of(update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Сообщение, к которому относится update: message, edited_message, сообщение с кнопкой, пост в канале."""
    for key in ("message", "edited_message"):
        if isinstance(update.get(key), dict):
            return update[key]
    cb = update.get("callback_query")
    if isinstance(cb, dict) and isinstance(cb.get("message"), dict):
        return cb["message"]
    for key in ("channel_post", "edited_channel_post"):
        if isinstance(update.get(key), dict):
            return update[key]
    return None


def _detect_type(update: Dict[str, Any]) -> Optional[str]:
    message = update.get("message")
    if isinstance(message, dict):
        entities = message.get("entities") or []
        if entities and entities[0].get("type") == "bot_command" and entities[0].get("offset") == 0:
            return "bot_command"
        return "text"
    for key in ("edited_message", "callback_query", "inline_query"):
        if key in update:
            return key
    for key in update:
        if key != "update_id":
            return key
    return None


@dataclass(frozen=True)
class UpdateContext:
    """Создаётся один раз на update через from_update. Поля только для чтения."""

    update: Dict[str, Any] = field(repr=False)
    update_id: Optional[int] = None
    type: Optional[str] = None
    chat_id: Optional[int] = None
    user_id: Optional[int] = None
    message_id: Optional[int] = None
    message_thread_id: Optional[int] = None
    text: Optional[str] = None
    callback_data: Optional[str] = None
    query_id: Optional[str] = None
    reply_message_id: Optional[int] = None
    reply_user_id: Optional[int] = None
    reply_text: Optional[str] = None

    @classmethod
    def from_update(cls, update: Dict[str, Any]) -> "UpdateContext":
        update = update or {}
        message = _message_of(update)
        callback = update.get("callback_query") if isinstance(update.get("callback_query"), dict) else None
        inline = update.get("inline_query") if isinstance(update.get("inline_query"), dict) else None

        user_id = None
        for key in _USER_SOURCES:
            source = update.get(key)
            if isinstance(source, dict) and isinstance(source.get("from"), dict):
                user_id = source["from"].get("id")
                break

        text = None
        if inline is not None:
            text = inline.get("query")
        elif callback is None and message is not None:
            text = message.get("text", message.get("caption"))

        query_id = None
        if callback is not None:
            query_id = callback.get("id")
        elif inline is not None:
            query_id = inline.get("id")

        reply = (message or {}).get("reply_to_message") if inline is None else None
        reply = reply if isinstance(reply, dict) else None

        chat_id = None
        message_id = None
        thread_id = None
        if message is not None and inline is None:
            chat_id = (message.get("chat") or {}).get("id")
            message_id = message.get("message_id")
            thread_id = message.get("message_thread_id")

        return cls(
            update=update,
            update_id=update.get("update_id"),
            type=_detect_type(update),
            chat_id=chat_id,
            user_id=user_id,
            message_id=message_id,
            message_thread_id=thread_id,
            text=text,
            callback_data=callback.get("data") if callback is not None else None,
            query_id=query_id,
            reply_message_id=reply.get("message_id") if reply else None,
            reply_user_id=(reply.get("from") or {}).get("id") if reply else None,
            reply_text=reply.get("text", reply.get("caption")) if reply else None,
        )

    @property
    def is_callback(self) -> bool:
        return self.type == "callback_query"

    def get(self, key: str, default: Any = None) -> Any:
        """Сырое поле верхнего уровня update."""
        return self.update.get(key, default)
