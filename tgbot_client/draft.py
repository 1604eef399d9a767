"""Черновик сообщения и построитель над ним.

MessageDraft — только данные: текст, клавиатура, медиа, dice, стикер.
MessageBuilder — fluent-методы (.text(), .kbd(), .img() ...), меняют self.draft.
Его подмешивают Action (декларативный ответ маршрута) и OutgoingMessage (bot.msg()).
"""

import copy
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .api import LocalFile
from .enums import MessageDice, ParseMode

MediaInput = Union[str, LocalFile]

_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)


@dataclass
class MessageDraft:
    """Что отправить. Пустой черновик (без текста, медиа, dice и стикера) — ничего не отправлять."""

    text: Optional[str] = None
    parse_mode: str = ParseMode.NONE.value
    reply_to_message_id: Optional[int] = None
    reply_to_current: bool = False
    entities: Optional[List[Dict[str, Any]]] = None
    # remove_keyboard / force_reply: уже готовые, без подстановки кнопок
    reply_markup: Optional[Dict[str, Any]] = None
    # keyboard / inline_keyboard: строки в рядах заменяются кнопками роутера при отправке
    reply_markup_raw: Optional[Dict[str, Any]] = None
    params: Dict[str, Any] = field(default_factory=dict)
    media: List[Tuple[str, MediaInput]] = field(default_factory=list)
    dice: Optional[str] = None
    sticker: Optional[str] = None
    media_preview_url: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.text and not self.media and not self.dice and not self.sticker

    def copy(self) -> "MessageDraft":
        return copy.deepcopy(self)


def detect_input(value: MediaInput) -> MediaInput:
    """URL и file_id — как есть. Путь к существующему файлу — LocalFile для загрузки."""
    if isinstance(value, LocalFile):
        return value
    if _URL_RE.match(value):
        return value
    if os.path.isfile(value):
        return LocalFile(value)
    return value


class MessageBuilder:
    """Fluent-построитель. Наследнику достаточно завести self.draft: MessageDraft."""

    draft: MessageDraft

    def text(self, text: str = ""):
        self.draft.text = text
        return self

    def params(self, params: Dict[str, Any]):
        """Доп. параметры метода API (disable_notification, message_thread_id, ...). Мержатся."""
        self.draft.params.update(params)
        return self

    def parse_mode(self, mode: ParseMode):
        self.draft.parse_mode = ParseMode(mode).value
        return self

    def entities(self, entities: List[Dict[str, Any]]):
        self.draft.entities = list(entities)
        return self

    def reply(self, message_id: Optional[int] = None):
        """Ответить на сообщение. Без id — на текущее сообщение update."""
        if message_id is None:
            self.draft.reply_to_current = True
            self.draft.reply_to_message_id = None
        else:
            self.draft.reply_to_current = False
            self.draft.reply_to_message_id = message_id
        return self

    def kbd(self, buttons: List[List[Any]], one_time: bool = False, resize: bool = True):
        """Reply-клавиатура. В рядах — dict-кнопки или id кнопок из router.btn."""
        self.draft.reply_markup_raw = {
            "keyboard": buttons,
            "resize_keyboard": resize,
            "one_time_keyboard": one_time,
        }
        self.draft.reply_markup = None
        return self

    def inline_kbd(self, buttons: List[List[Any]]):
        self.draft.reply_markup_raw = {"inline_keyboard": buttons}
        self.draft.reply_markup = None
        return self

    def remove_kbd(self):
        self.draft.reply_markup = {"remove_keyboard": True}
        self.draft.reply_markup_raw = None
        return self

    def force_reply(self, placeholder: str = "", selective: bool = False):
        self.draft.reply_markup = {
            "force_reply": True,
            "input_field_placeholder": placeholder,
            "selective": selective,
        }
        self.draft.reply_markup_raw = None
        return self

    def _add_media(self, media_type: str, value: Union[MediaInput, List[MediaInput]]):
        items = value if isinstance(value, (list, tuple)) else [value]
        for item in items:
            self.draft.media.append((media_type, detect_input(item)))
        return self

    def img(self, img: Union[MediaInput, List[MediaInput]]):
        return self._add_media("photo", img)

    def gif(self, gif: Union[MediaInput, List[MediaInput]]):
        return self._add_media("animation", gif)

    def voice(self, voice: MediaInput):
        return self._add_media("voice", voice)

    def audio(self, audio: Union[MediaInput, List[MediaInput]]):
        return self._add_media("audio", audio)

    def video(self, video: Union[MediaInput, List[MediaInput]]):
        return self._add_media("video", video)

    def doc(self, document: Union[MediaInput, List[MediaInput]]):
        return self._add_media("document", document)

    def dice(self, dice: MessageDice = MessageDice.DICE):
        self.draft.dice = MessageDice(dice).value
        return self

    def sticker(self, sticker: str):
        self.draft.sticker = sticker
        return self

    def media_preview(self, url: str):
        """Превью ссылки над текстом через невидимую ссылку."""
        self.draft.media_preview_url = url
        return self
