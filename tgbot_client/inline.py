"""Результаты inline-запроса: один Inline — один InlineQueryResult для answerInlineQuery.

    results = [
        bot.inline(InlineType.ARTICLE).title("Привет").text("<b>Привет</b>").create(),
        bot.inline(InlineType.PHOTO).file_url(url).thumb(thumb_url).create(),
    ]
    await bot.answer_inline_query(results)

Для медиа text уходит в caption. Для article, location и venue — в
input_message_content вместе с params().
"""

import uuid
from typing import Any, Dict, List, Optional

from .enums import InlineType, ParseMode
from .exceptions import ConfigurationError
from .keyboard import resolve_rows

# префикс полей файла: photo_url / photo_file_id, mpeg4_url / mpeg4_file_id
_FILE_FIELD = {
    InlineType.PHOTO: "photo",
    InlineType.GIF: "gif",
    InlineType.MPEG4_GIF: "mpeg4",
    InlineType.VIDEO: "video",
    InlineType.AUDIO: "audio",
    InlineType.VOICE: "voice",
    InlineType.DOCUMENT: "document",
}

_WITH_DESCRIPTION = {InlineType.ARTICLE, InlineType.PHOTO, InlineType.VIDEO, InlineType.DOCUMENT}


class Inline:
    """Fluent-сборка одного результата. create() отдаёт dict в формате Bot API."""

    def __init__(
        self,
        inline_type: InlineType = InlineType.ARTICLE,
        parse_mode: ParseMode = ParseMode.NONE,
        buttons: Optional[Dict[str, str]] = None,
    ) -> None:
        self._type = InlineType(inline_type)
        self._parse_mode = ParseMode(parse_mode)
        self._buttons: Dict[str, str] = buttons if buttons is not None else {}
        self._id: Optional[str] = None
        self._title: Optional[str] = None
        self._description: Optional[str] = None
        self._text: Optional[str] = None
        self._file_url: Optional[str] = None
        self._file_id: Optional[str] = None
        self._thumb: Optional[str] = None
        self._mime_type: Optional[str] = None
        self._latitude: Optional[float] = None
        self._longitude: Optional[float] = None
        self._address: Optional[str] = None
        self._kbd: Optional[List[List[Any]]] = None
        self._params: Dict[str, Any] = {}

    def id(self, result_id: str) -> "Inline":
        """Уникальный id результата (до 64 байт). Без него create() сгенерирует случайный."""
        self._id = str(result_id)
        return self

    def title(self, title: str) -> "Inline":
        self._title = title
        return self

    def description(self, description: str) -> "Inline":
        self._description = description
        return self

    def text(self, text: str) -> "Inline":
        self._text = text
        return self

    def parse_mode(self, mode: ParseMode) -> "Inline":
        self._parse_mode = ParseMode(mode)
        return self

    def file_url(self, url: str) -> "Inline":
        self._file_url = url
        self._file_id = None
        return self

    def file_id(self, file_id: str) -> "Inline":
        self._file_id = file_id
        self._file_url = None
        return self

    def thumb(self, url: str) -> "Inline":
        self._thumb = url
        return self

    def mime_type(self, mime_type: str) -> "Inline":
        self._mime_type = mime_type
        return self

    def coordinates(self, latitude: float, longitude: float) -> "Inline":
        self._latitude = latitude
        self._longitude = longitude
        return self

    def address(self, address: str) -> "Inline":
        self._address = address
        return self

    def kbd(self, rows: List[List[Any]]) -> "Inline":
        """Inline-клавиатура под результатом. Строки в рядах — id кнопок router.btn."""
        self._kbd = rows
        return self

    def params(self, params: Dict[str, Any]) -> "Inline":
        self._params.update(params)
        return self

    def create(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self._type.value, "id": self._id or uuid.uuid4().hex}
        if self._title is not None:
            result["title"] = self._title
        if self._description is not None and self._type in _WITH_DESCRIPTION:
            result["description"] = self._description
        if self._thumb is not None:
            result["thumbnail_url"] = self._thumb

        if self._type in _FILE_FIELD:
            result.update(self._media_fields())
            result.update(self._params)
        else:
            result.update(self._place_fields())
            if self._text is not None:
                result["input_message_content"] = {**self._text_fields("message_text"), **self._params}
            elif self._type is InlineType.ARTICLE:
                raise ConfigurationError("Inline article: нужен text()")
            else:
                result.update(self._params)

        if self._kbd is not None:
            result["reply_markup"] = {"inline_keyboard": resolve_rows(self._kbd, self._buttons, True)}
        return result

    def _text_fields(self, field: str) -> Dict[str, Any]:
        fields: Dict[str, Any] = {field: self._text}
        if self._parse_mode:
            fields["parse_mode"] = self._parse_mode.value
        return fields

    def _media_fields(self) -> Dict[str, Any]:
        prefix = _FILE_FIELD[self._type]
        fields: Dict[str, Any] = {}
        if self._file_url is not None:
            fields[f"{prefix}_url"] = self._file_url
        elif self._file_id is not None:
            fields[f"{prefix}_file_id"] = self._file_id
        else:
            raise ConfigurationError(f"Inline {self._type.value}: нужен file_url() или file_id()")
        if self._type is InlineType.VIDEO and self._file_url is not None:
            fields["mime_type"] = self._mime_type or "video/mp4"
        elif self._type is InlineType.DOCUMENT and self._mime_type:
            fields["mime_type"] = self._mime_type
        if self._text is not None:
            fields.update(self._text_fields("caption"))
        return fields

    def _place_fields(self) -> Dict[str, Any]:
        if self._type is InlineType.ARTICLE:
            return {}
        if self._latitude is None or self._longitude is None:
            raise ConfigurationError(f"Inline {self._type.value}: нужны coordinates()")
        fields: Dict[str, Any] = {"latitude": self._latitude, "longitude": self._longitude}
        if self._type is InlineType.VENUE:
            fields["address"] = self._address or ""
        return fields
