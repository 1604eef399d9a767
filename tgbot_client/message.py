"""OutgoingMessage — отправка и редактирование черновика. Сам выбирает метод API по содержимому."""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

from .api import LocalFile
from .draft import MediaInput, MessageBuilder, MessageDraft
from .enums import ParseMode
from .exceptions import ConfigurationError
from .keyboard import resolve_rows

if TYPE_CHECKING:
    from .bot import Bot

INVISIBLE_CHAR = "\u200b"

# send{Method} и имя поля для одиночной отправки
_SINGLE_METHODS = {
    "photo": ("sendPhoto", "photo"),
    "animation": ("sendAnimation", "animation"),
    "voice": ("sendVoice", "voice"),
    "audio": ("sendAudio", "audio"),
    "video": ("sendVideo", "video"),
    "document": ("sendDocument", "document"),
}

# фото, видео и gif можно смешивать в одной группе; аудио и документы только между собой
_MEDIA_GROUPS = {
    "photo": "visual",
    "video": "visual",
    "animation": "visual",
    "audio": "audio",
    "document": "document",
}


def can_be_grouped(media: List[Tuple[str, MediaInput]]) -> bool:
    """Можно ли отправить очередь одним sendMediaGroup. Голосовые — никогда."""
    if not media:
        return False
    if any(kind == "voice" for kind, _ in media):
        return False
    first = _MEDIA_GROUPS.get(media[0][0], "unknown")
    return all(_MEDIA_GROUPS.get(kind, "unknown") == first for kind, _ in media)


def _utf16_len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


class OutgoingMessage(MessageBuilder):
    """Создаётся через bot.msg(text) или из черновика Action. Отправка — await .send()."""

    def __init__(self, bot: "Bot", text: Optional[str] = None, draft: Optional[MessageDraft] = None) -> None:
        self._bot = bot
        if draft is not None:
            self.draft = draft.copy()
        else:
            self.draft = MessageDraft(parse_mode=ParseMode(bot.parse_mode).value)
        if text is not None:
            self.draft.text = text

    # --- отправка ---

    async def send(self, chat_id: Optional[Union[int, str]] = None) -> Dict[str, Any]:
        """Текст — sendMessage, одно медиа — send{Photo,Video,...}, несколько — sendMediaGroup. Dice и стикер — свои методы."""
        draft = self.draft
        common: Dict[str, Any] = {"chat_id": chat_id if chat_id is not None else self._bot.context.chat_id}
        common.update(self._base_params())
        common.update(draft.params)

        if draft.dice:
            return await self._bot.call_api("sendDice", {**common, "emoji": draft.dice})

        if draft.sticker:
            return await self._bot.call_api("sendSticker", {**common, "sticker": draft.sticker})

        if not draft.media:
            return await self._bot.call_api("sendMessage", {**common, **self._text_params("text")})

        caption = self._text_params("caption")
        if len(draft.media) == 1:
            kind, payload = draft.media[0]
            method, field_name = _SINGLE_METHODS.get(kind, ("sendDocument", "document"))
            return await self._bot.call_api(method, {**common, **caption, field_name: payload})

        if not can_be_grouped(draft.media):
            raise ConfigurationError(
                "Несовместимые типы медиа: голосовые не группируются, "
                "аудио и документы нельзя смешивать с фото и видео"
            )
        # sendMediaGroup не принимает reply_markup
        common.pop("reply_markup", None)
        return await self._bot.call_api("sendMediaGroup", {**common, **self._media_group_params(caption)})

    async def edit_text(
        self,
        message_id: Optional[int] = None,
        chat_id: Optional[Union[int, str]] = None,
    ) -> Dict[str, Any]:
        params = self._edit_target(message_id, chat_id)
        params.update(self._text_params("text"))
        params.update(self._markup_params())
        params.update(self.draft.params)
        return await self._bot.call_api("editMessageText", params)

    async def edit_caption(
        self,
        message_id: Optional[int] = None,
        chat_id: Optional[Union[int, str]] = None,
    ) -> Dict[str, Any]:
        params = self._edit_target(message_id, chat_id)
        params.update(self._text_params("caption"))
        params.update(self._markup_params())
        params.update(self.draft.params)
        return await self._bot.call_api("editMessageCaption", params)

    async def edit_media(
        self,
        message_id: Optional[int] = None,
        chat_id: Optional[Union[int, str]] = None,
    ) -> Dict[str, Any]:
        """Заменяет медиа сообщения на первое из очереди. Текст черновика уходит в caption."""
        if not self.draft.media:
            raise ConfigurationError("edit_media: в сообщении нет медиа")
        kind, payload = self.draft.media[0]
        if kind == "voice":
            raise ConfigurationError("edit_media: голосовое сообщение нельзя заменить")
        params = self._edit_target(message_id, chat_id)
        media: Dict[str, Any] = {"type": kind}
        if isinstance(payload, LocalFile):
            params["media_attach_0"] = payload
            media["media"] = "attach://media_attach_0"
        else:
            media["media"] = payload
        caption = self._text_params("caption")
        if caption.get("caption"):
            media["caption"] = caption["caption"]
        if caption.get("parse_mode"):
            media["parse_mode"] = caption["parse_mode"]
        if caption.get("caption_entities"):
            media["caption_entities"] = caption["caption_entities"]
        params["media"] = media
        params.update(self._markup_params())
        params.update(self.draft.params)
        return await self._bot.call_api("editMessageMedia", params)

    # --- сборка параметров ---

    def _edit_target(self, message_id: Optional[int], chat_id: Optional[Union[int, str]]) -> Dict[str, Any]:
        ctx = self._bot.context
        return {
            "chat_id": chat_id if chat_id is not None else ctx.chat_id,
            "message_id": message_id if message_id is not None else ctx.message_id,
        }

    def _base_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        reply_to = self.draft.reply_to_message_id
        if reply_to is None and self.draft.reply_to_current:
            reply_to = self._bot.context.message_id
        if reply_to is not None:
            params["reply_to_message_id"] = reply_to
        params.update(self._markup_params())
        return params

    def _markup_params(self) -> Dict[str, Any]:
        markup = self.build_reply_markup()
        return {"reply_markup": markup} if markup is not None else {}

    def _text_params(self, text_field: str) -> Dict[str, Any]:
        """text/caption + parse_mode + entities с учётом превью ссылки."""
        draft = self.draft
        text = draft.text or ""
        entities = list(draft.entities) if draft.entities else []
        if draft.media_preview_url:
            url = draft.media_preview_url
            if draft.parse_mode in (ParseMode.MARKDOWN.value, ParseMode.MARKDOWN_V2.value):
                text = f"[{INVISIBLE_CHAR}]({url}){text}"
            elif draft.parse_mode == ParseMode.HTML.value:
                text = f'<a href="{url}">{INVISIBLE_CHAR}</a>{text}'
            else:
                text = INVISIBLE_CHAR + text
                shift = _utf16_len(INVISIBLE_CHAR)
                entities = [{**e, "offset": e.get("offset", 0) + shift} for e in entities]
                entities.insert(0, {"type": "text_link", "offset": 0, "length": shift, "url": url})
        params: Dict[str, Any] = {text_field: text}
        if draft.parse_mode:
            params["parse_mode"] = draft.parse_mode
        if entities:
            params["entities" if text_field == "text" else "caption_entities"] = entities
        return params

    def _media_group_params(self, caption: Dict[str, Any]) -> Dict[str, Any]:
        media_array: List[Dict[str, Any]] = []
        attachments: Dict[str, Any] = {}
        for index, (kind, payload) in enumerate(self.draft.media):
            # gif внутри группы отправляется как video
            item: Dict[str, Any] = {"type": "video" if kind == "animation" else kind}
            if isinstance(payload, LocalFile):
                key = f"media_attach_{index}"
                attachments[key] = payload
                item["media"] = f"attach://{key}"
            else:
                item["media"] = payload
            if index == 0:
                if caption.get("caption"):
                    item["caption"] = caption["caption"]
                if caption.get("parse_mode"):
                    item["parse_mode"] = caption["parse_mode"]
                if caption.get("caption_entities"):
                    item["caption_entities"] = caption["caption_entities"]
            media_array.append(item)
        return {"media": media_array, **attachments}

    def build_reply_markup(self) -> Optional[Dict[str, Any]]:
        """Готовый reply_markup. Строковые id в рядах заменяются на кнопки из router.btn."""
        draft = self.draft
        if draft.reply_markup is not None:
            return draft.reply_markup
        raw = draft.reply_markup_raw
        if raw is None:
            return None
        is_inline = "inline_keyboard" in raw
        key = "inline_keyboard" if is_inline else "keyboard"
        markup = dict(raw)
        markup[key] = resolve_rows(raw[key], self._bot.buttons, is_inline)
        return markup

