"""Готовые middleware для router.middleware(...). Сигнатура — как у хендлера: аргументы подбираются по типам, next — async."""

import time
from typing import Any, Awaitable, Callable

from loguru import logger

from .bot import Bot

Next = Callable[[], Awaitable[Any]]


async def logging_middleware(bot: Bot, next: Next) -> Any:
    """Пишет в лог тип update, пользователя и время обработки."""
    started = time.monotonic()
    logger.debug("update {}: {} от {}", bot.context.update_id, bot.type, bot.user_id)
    result = await next()
    logger.info(
        "update {}: {} за {:.1f} мс",
        bot.context.update_id,
        getattr(getattr(result, "status", None), "value", result),
        (time.monotonic() - started) * 1000,
    )
    return result
