"""Пагинация inline-клавиатуры: элементы страницы по колонкам + ряд навигации.

Чистое вычисление: create() каждый раз считает всё заново из настроек, состояния между вызовами нет.

    kb = (
        bot.pagination()
        .set_items([Button.cb(name, f"item_{i}") for i, name in enumerate(names)])
        .set_page(page)
        .set_mode(PaginationMode.NUMBERS)
        .create()
    )
"""

import math
from typing import Any, Dict, List, Optional, Tuple

from .enums import PaginationLayout, PaginationMode, PaginationNumberStyle
from .exceptions import PaginationError
from .keyboard import Button

Row = List[Dict[str, Any]]

EMOJI_SUFFIX = "\uFE0F\u20E3"


class Pagination:
    """Fluent-настройка + create(). Неверные значения — PaginationError сразу в сеттере."""

    def __init__(self) -> None:
        self._items: List[Dict[str, Any]] = []
        self._per_page = 10
        self._page = 1
        self._columns = 1
        self._prefix = "page_"
        self._mode = PaginationMode.ARROWS
        self._layout = PaginationLayout.ROW
        self._number_style = PaginationNumberStyle.CLASSIC
        self._max_page_btn = 5
        self._active_left: Optional[str] = None
        self._active_right: Optional[str] = None
        self._prev_sign = "<"
        self._next_sign = ">"
        self._first_sign: Optional[str] = None
        self._last_sign: Optional[str] = None
        self._header_rows: List[Row] = []
        self._footer_rows: List[Row] = []

    # --- настройки ---

    def set_items(self, items: List[Dict[str, Any]]) -> "Pagination":
        self._items = list(items)
        return self

    def set_per_page(self, per_page: int) -> "Pagination":
        if per_page <= 0:
            raise PaginationError("per_page must be >= 1")
        self._per_page = per_page
        return self

    def set_page(self, page: int) -> "Pagination":
        if page < 0:
            raise PaginationError("page must be >= 0")
        self._page = page
        return self

    def set_columns(self, columns: int) -> "Pagination":
        if columns <= 0:
            raise PaginationError("columns must be >= 1")
        self._columns = columns
        return self

    def set_prefix(self, prefix: str) -> "Pagination":
        """Префикс callback_data навигации: кнопка страницы 3 получит f"{prefix}3"."""
        if not prefix:
            raise PaginationError("prefix must not be empty")
        self._prefix = prefix
        return self

    def set_mode(self, mode: PaginationMode) -> "Pagination":
        self._mode = PaginationMode(mode)
        return self

    def set_navigation_layout(self, layout: PaginationLayout) -> "Pagination":
        self._layout = PaginationLayout(layout)
        return self

    def set_number_style(self, style: PaginationNumberStyle) -> "Pagination":
        self._number_style = PaginationNumberStyle(style)
        return self

    def set_max_page_btn(self, count: int) -> "Pagination":
        if count <= 0:
            raise PaginationError("max_page_btn must be >= 1")
        self._max_page_btn = count
        return self

    def set_active_page_format(self, left: str, right: Optional[str] = None) -> "Pagination":
        """Как подписать текущую страницу в режиме NUMBERS.

        Один аргумент с %s — шаблон: "- %s -". Два — обрамление слева и справа: (">> ", " <<").
        Без вызова номер текущей страницы выводится как есть.
        """
        if right is None and "%s" in left:
            self._active_left, self._active_right = left.split("%s", 1)
        else:
            self._active_left, self._active_right = left, right or ""
        return self

    def set_arrows(self, prev: str, next_: str) -> "Pagination":
        self._prev_sign = prev
        self._next_sign = next_
        return self

    def set_side_signs(self, first: Optional[str], last: Optional[str]) -> "Pagination":
        """Кнопки «в начало» / «в конец». None — не показывать."""
        self._first_sign = first
        self._last_sign = last
        return self

    def add_header_btn(self, row: Row) -> "Pagination":
        self._header_rows.append(list(row))
        return self

    def add_return_btn(self, text: str, callback_data: str) -> "Pagination":
        self._footer_rows.append([Button.cb(text, callback_data)])
        return self

    # --- вычисление ---

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self._items) / self._per_page)

    def get_total_page(self) -> int:
        return self.total_pages

    def _current_page(self, total: int) -> int:
        if total == 0:
            return 0
        return min(max(self._page, 1), total)

    def _page_items(self, page: int) -> List[Dict[str, Any]]:
        if page == 0:
            return []
        start = (page - 1) * self._per_page
        return self._items[start:start + self._per_page]

    def _nav_button(self, text: str, page: int) -> Dict[str, Any]:
        return Button.cb(text, f"{self._prefix}{page}")

    def _format_number(self, number: int) -> str:
        text = str(number)
        if self._number_style == PaginationNumberStyle.EMOJI:
            return "".join(digit + EMOJI_SUFFIX for digit in text)
        return text

    def _window(self, page: int, total: int) -> range:
        """Окно номеров ширины min(max_page_btn, total) вокруг page. У краёв сдвигается, а не сужается."""
        width = min(self._max_page_btn, total)
        start = page - width // 2
        start = max(1, min(start, total - width + 1))
        return range(start, start + width)

    def _inner_buttons(self, page: int, total: int) -> Row:
        if total == 0:
            return []
        if self._mode == PaginationMode.ARROWS:
            row: Row = []
            if page > 1:
                row.append(self._nav_button(self._prev_sign, page - 1))
            if page < total:
                row.append(self._nav_button(self._next_sign, page + 1))
            return row
        row = []
        for number in self._window(page, total):
            label = self._format_number(number)
            if number == page and self._active_left is not None:
                label = f"{self._active_left}{label}{self._active_right or ''}"
            row.append(self._nav_button(label, number))
        return row

    def _side_buttons(self, page: int, total: int) -> Tuple[Row, Row]:
        first: Row = []
        last: Row = []
        if self._first_sign is not None and page > 1:
            first.append(self._nav_button(self._first_sign, 1))
        if self._last_sign is not None and page < total:
            last.append(self._nav_button(self._last_sign, total))
        return first, last

    def _navigation_rows(self, page: int, total: int) -> List[Row]:
        inner = self._inner_buttons(page, total)
        first, last = self._side_buttons(page, total)
        single = first + inner + last
        if self._layout == PaginationLayout.ROW:
            rows = [single]
        elif self._layout == PaginationLayout.SMART and len(single) == 2:
            rows = [single]
        else:
            rows = [inner, first + last]
        return [r for r in rows if r]

    def create(self) -> List[Row]:
        """Ряды кнопок: шапка, элементы страницы по колонкам, навигация, кнопка возврата."""
        total = self.total_pages
        page = self._current_page(total)
        items = self._page_items(page)

        keyboard: List[Row] = [list(r) for r in self._header_rows]
        for i in range(0, len(items), self._columns):
            keyboard.append(items[i:i + self._columns])
        keyboard.extend(self._navigation_rows(page, total))
        keyboard.extend(list(r) for r in self._footer_rows)
        return keyboard
