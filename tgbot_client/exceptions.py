"""Исключения библиотеки.

Иерархия:
    BotError (база)
    ├── ConfigurationError — ошибка в настройке маршрутов (нет redirect-цели, дубль id, кривая клавиатура)
    ├── ResolutionError — не нашлось значение для аргумента хендлера
    ├── TelegramApiError — Bot API ответил не 200 или ok=false
    ├── PaginationError — некорректные параметры пагинации
    ├── ContextLookupError — в обновлении нет нужной сущности (user, chat, message)
    └── FileTooLargeError — файл больше лимита скачивания

ConfigurationError — баг разработчика, библиотека её не ловит. ResolutionError и
TelegramApiError касаются одного обновления и не должны ронять цикл.
"""

from typing import Any, Dict, Optional


class BotError(Exception):
    """База для всех ошибок библиотеки."""


class ConfigurationError(BotError):
    """Маршруты настроены неправильно. Бросается сразу, не ретраится."""


class ResolutionError(BotError):
    """DependencyResolver не смог подобрать значение для параметра хендлера."""

    def __init__(self, parameter: str, type_name: Optional[str], handler_name: str) -> None:
        self.parameter = parameter
        self.type_name = type_name
        self.handler_name = handler_name
        super().__init__(
            f"DependencyResolver: не удалось найти значение для аргумента {parameter} "
            f"(тип: {type_name or 'не указан'}) в {handler_name}"
        )


class TelegramApiError(BotError):
    """Bot API отказал. Хранит код, описание и параметры запроса для отладки."""

    def __init__(
        self,
        description: str,
        error_code: int = 0,
        *,
        method: str = "",
        parameters: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.description = description
        self.error_code = error_code
        self.method = method
        self.parameters: Dict[str, Any] = dict(parameters or {})
        super().__init__(f"[{error_code}] {method}: {description}" if method else f"[{error_code}] {description}")


class PaginationError(BotError, ValueError):
    """Пагинации передали недопустимое значение (per_page <= 0, пустой префикс и т.п.)."""


class ContextLookupError(BotError, LookupError):
    """В текущем обновлении нет запрошенной сущности."""


class FileTooLargeError(BotError):
    """Bot API не отдаёт файлы больше 20 МБ через getFile."""
