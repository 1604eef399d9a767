"""Сборка клавиатур. Button — фабрики dict-кнопок, Keyboard — ряды через .row(...).

В ряд можно класть и строку — id кнопки, зарегистрированной через router.btn(id, text).
При отправке она заменится на callback-кнопку (inline) или текстовую (reply).
"""

from typing import Any, Dict, List, Union

from .exceptions import ConfigurationError

ButtonLike = Union[Dict[str, Any], str]


class Button:
    """Фабрики кнопок в формате Bot API."""

    @staticmethod
    def cb(text: str, callback_data: str) -> Dict[str, Any]:
        """Inline-кнопка с callback_data (до 64 байт)."""
        return {"text": text, "callback_data": callback_data}

    @staticmethod
    def url(text: str, url: str) -> Dict[str, Any]:
        return {"text": text, "url": url}

    @staticmethod
    def web_app(text: str, url: str) -> Dict[str, Any]:
        return {"text": text, "web_app": {"url": url}}

    @staticmethod
    def text(text: str) -> Dict[str, Any]:
        """Обычная кнопка reply-клавиатуры: нажатие шлёт её текст."""
        return {"text": text}

    @staticmethod
    def contact(text: str) -> Dict[str, Any]:
        return {"text": text, "request_contact": True}

    @staticmethod
    def location(text: str) -> Dict[str, Any]:
        return {"text": text, "request_location": True}


class Keyboard:
    """Ряды кнопок через .row(...). В конце — .build() и передать в .kbd(...) или .inline_kbd(...)."""

    def __init__(self) -> None:
        self._rows: List[List[ButtonLike]] = []

    def row(self, *buttons: ButtonLike) -> "Keyboard":
        """Добавляет ряд. Возвращает self для цепочки."""
        self._rows.append(list(buttons))
        return self

    def rows(self, rows: List[List[ButtonLike]]) -> "Keyboard":
        """Добавляет сразу несколько готовых рядов (например, из Pagination.create())."""
        for r in rows:
            self._rows.append(list(r))
        return self

    def build(self) -> List[List[ButtonLike]]:
        return [list(r) for r in self._rows]


def resolve_rows(rows: Any, buttons: Dict[str, str], inline: bool) -> List[List[Dict[str, Any]]]:
    """Ряды с id кнопок → ряды dict-кнопок: callback-кнопка для inline, текстовая для reply."""
    if not isinstance(rows, (list, tuple)):
        raise ConfigurationError("Неправильный формат клавиатуры: ожидается список рядов")
    resolved: List[List[Dict[str, Any]]] = []
    for row in rows:
        if not isinstance(row, (list, tuple)):
            raise ConfigurationError("Неправильный формат клавиатуры: ряд должен быть списком")
        out_row: List[Dict[str, Any]] = []
        for btn in row:
            if isinstance(btn, str):
                if btn not in buttons:
                    raise ConfigurationError(f"Не удалось найти кнопку {btn}")
                out_row.append(Button.cb(buttons[btn], btn) if inline else Button.text(buttons[btn]))
            else:
                out_row.append(btn)
        resolved.append(out_row)
    return resolved
