"""Файлы из update: file_id, размер, ссылка, скачивание."""

import os
from typing import Any, Dict, Optional, Union

from .exceptions import FileTooLargeError

MAX_DOWNLOAD_SIZE = 20 * 1024 * 1024

_FILE_TYPES = ("photo", "document", "video", "audio", "voice", "sticker", "video_note", "animation")

_UNITS = {"B": 1, "KB": 1024, "MB": 1024 * 1024}


class File:
    """Обёртка над getFile. Ответ getFile запрашивается один раз и запоминается."""

    def __init__(self, file_id: str, api: Any) -> None:
        self.file_id = file_id
        self.api = api
        self._info: Dict[str, Any] = {}

    async def get_file_info(self) -> Dict[str, Any]:
        if not self._info:
            response = await self.api.call_api("getFile", {"file_id": self.file_id})
            self._info = response.get("result") or {}
        return self._info

    async def get_file_size(self, units: str = "B", precision: int = 5) -> Union[int, float]:
        """Размер в B, KB или MB, округлённый до precision знаков."""
        size = (await self.get_file_info()).get("file_size", 0)
        divisor = _UNITS.get(units.upper(), 1)
        if divisor == 1:
            return size
        return round(size / divisor, precision)

    async def get_file_path(self) -> str:
        """Полная ссылка на скачивание (содержит токен — не показывай пользователям)."""
        return self.api.file_url + (await self.get_file_info()).get("file_path", "")

    async def save(self, path: str) -> str:
        """Скачивает файл. path — файл или каталог (тогда имя берётся из file_path). Возвращает итоговый путь."""
        if await self.get_file_size() >= MAX_DOWNLOAD_SIZE:
            raise FileTooLargeError("Размер файла превышает 20 МБ")
        remote = (await self.get_file_info()).get("file_path", "")
        if path.endswith(("/", os.sep)) or os.path.isdir(path):
            path = os.path.join(path, os.path.basename(remote))
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        await self.api.download_file(remote, path)
        return path

    @staticmethod
    def get_file_id(update: Dict[str, Any], file_type: Optional[str] = None) -> Optional[str]:
        """file_id из сообщения update. Для фото — последний (самый большой) размер.

        Без file_type — первый найденный из photo, document, video, audio, voice, sticker, video_note.
        """
        message = update.get("result") or update.get("message") or {}
        if not message:
            return None
        if file_type is not None:
            obj = message.get(file_type)
            if file_type == "photo":
                obj = obj[-1] if obj else None
            return (obj or {}).get("file_id")
        for kind in _FILE_TYPES:
            if message.get(kind):
                obj = message[kind][-1] if kind == "photo" else message[kind]
                return obj.get("file_id")
        return None
