"""User, Chat и Message — обёртки над сырыми dict из update. Хендлер получает их через аннотацию типа."""

from typing import Any, Dict, List, Optional


class User:
    """Пользователь из update[...]["from"]. Поля: id, is_bot, first_name, last_name, username, language_code, is_premium."""

    __slots__ = ("id", "is_bot", "first_name", "last_name", "username", "language_code", "is_premium", "raw")

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        data = data or {}
        self.id: Optional[int] = data.get("id")
        self.is_bot: bool = bool(data.get("is_bot"))
        self.first_name: Optional[str] = data.get("first_name")
        self.last_name: Optional[str] = data.get("last_name")
        self.username: Optional[str] = data.get("username")
        self.language_code: Optional[str] = data.get("language_code")
        self.is_premium: bool = bool(data.get("is_premium"))
        self.raw: Dict[str, Any] = data

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, User) and other.raw == self.raw

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r})"


class Chat:
    """Чат: id, type (private/group/supergroup/channel), title, username, first_name, last_name, is_forum."""

    __slots__ = ("id", "type", "title", "username", "first_name", "last_name", "is_forum", "raw")

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        data = data or {}
        self.id: Optional[int] = data.get("id")
        self.type: Optional[str] = data.get("type")
        self.title: Optional[str] = data.get("title")
        self.username: Optional[str] = data.get("username")
        self.first_name: Optional[str] = data.get("first_name")
        self.last_name: Optional[str] = data.get("last_name")
        self.is_forum: bool = bool(data.get("is_forum"))
        self.raw: Dict[str, Any] = data

    def __repr__(self) -> str:
        return f"Chat(id={self.id!r}, type={self.type!r})"


class Message:
    """Сообщение. Вложенные chat/from_user/reply_to_message уже обёрнуты. Медиа — сырые dict/list, как в API."""

    __slots__ = (
        "message_id", "date", "chat", "message_thread_id", "from_user", "sender_chat",
        "reply_to_message", "pinned_message", "text", "caption", "entities", "caption_entities",
        "dice", "photo", "sticker", "video", "audio", "voice", "document",
        "is_topic_message", "new_chat_members", "left_chat_member", "raw",
    )

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        data = data or {}
        self.raw: Dict[str, Any] = data
        self.message_id: Optional[int] = data.get("message_id")
        self.date: Optional[int] = data.get("date")
        self.chat: Chat = Chat(data.get("chat"))
        self.message_thread_id: Optional[int] = data.get("message_thread_id")
        self.from_user: Optional[User] = User(data["from"]) if data.get("from") else None
        self.sender_chat: Optional[Chat] = Chat(data["sender_chat"]) if data.get("sender_chat") else None
        # ответ на сообщение: то же Message, рекурсивно
        self.reply_to_message: Optional[Message] = (
            Message(data["reply_to_message"]) if data.get("reply_to_message") else None
        )
        self.pinned_message: Optional[Message] = (
            Message(data["pinned_message"]) if data.get("pinned_message") else None
        )
        self.text: Optional[str] = data.get("text")
        self.caption: Optional[str] = data.get("caption")
        self.entities: Optional[List[Dict[str, Any]]] = data.get("entities")
        self.caption_entities: Optional[List[Dict[str, Any]]] = data.get("caption_entities")
        self.dice: Optional[Dict[str, Any]] = data.get("dice")
        self.photo: Optional[List[Dict[str, Any]]] = data.get("photo")
        self.sticker: Optional[Dict[str, Any]] = data.get("sticker")
        self.video: Optional[Dict[str, Any]] = data.get("video")
        self.audio: Optional[Dict[str, Any]] = data.get("audio")
        self.voice: Optional[Dict[str, Any]] = data.get("voice")
        self.document: Optional[Dict[str, Any]] = data.get("document")
        self.is_topic_message: bool = bool(data.get("is_topic_message"))
        members = data.get("new_chat_members") or []
        self.new_chat_members: Optional[List[User]] = [User(m) for m in members] or None
        self.left_chat_member: Optional[User] = (
            User(data["left_chat_member"]) if data.get("left_chat_member") else None
        )

    @property
    def effective_text(self) -> Optional[str]:
        """text, а для медиа — caption."""
        return self.text if self.text is not None else self.caption

    @property
    def is_reply(self) -> bool:
        return self.reply_to_message is not None

    @property
    def dice_emoji(self) -> Optional[str]:
        return (self.dice or {}).get("emoji")

    def __repr__(self) -> str:
        text = self.effective_text or ""
        return f"Message(id={self.message_id!r}, text={text[:20]!r})"
