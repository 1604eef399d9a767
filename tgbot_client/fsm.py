"""FSM по пользователю поверх Storage: состояние — строка, данные сессии — dict."""

from typing import TYPE_CHECKING, Any, Dict, Optional

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .bot import Bot
    from .storage import Storage


class State:
    """Наследуй и задавай атрибуты-строки (wait_name = "wait_name"). Используй в router.on_state(...) и bot.step(...)."""

    pass


def _require_storage(bot: "Bot") -> "Storage":
    if bot.storage is None:
        raise ConfigurationError("Storage не подключён: router.set_storage(...)")
    return bot.storage


async def get_state(bot: "Bot") -> Optional[str]:
    """Состояние пользователя текущего update. Нет user_id или состояния — None."""
    storage = _require_storage(bot)
    user_id = bot.context.user_id
    if user_id is None:
        return None
    return await storage.get_state(user_id)


async def set_state(bot: "Bot", state: Optional[str]) -> None:
    """Ставит состояние. None — сброс."""
    storage = _require_storage(bot)
    user_id = bot.context.user_id
    if user_id is None:
        return
    if state is None:
        await storage.clear_state(user_id)
    else:
        await storage.set_state(user_id, state)


async def clear_state(bot: "Bot") -> None:
    await set_state(bot, None)


class FSMContext:
    """Обёртка для хендлера: состояние и данные текущего пользователя.

        async def ask_name(fsm: FSMContext):
            await fsm.set_state(AppState.wait_name)
    """

    def __init__(self, bot: "Bot") -> None:
        self._bot = bot

    async def get_state(self) -> Optional[str]:
        return await get_state(self._bot)

    async def set_state(self, state: Optional[str]) -> None:
        await set_state(self._bot, state)

    async def clear_state(self) -> None:
        await clear_state(self._bot)

    async def get_data(self) -> Dict[str, Any]:
        storage = _require_storage(self._bot)
        user_id = self._bot.context.user_id
        if user_id is None:
            return {}
        return await storage.get_session_data(user_id)

    async def update_data(self, **data: Any) -> Dict[str, Any]:
        """Мержит data в сессию и возвращает итог."""
        storage = _require_storage(self._bot)
        user_id = self._bot.context.user_id
        if user_id is None:
            return {}
        await storage.set_session_data(user_id, data)
        return await storage.get_session_data(user_id)

    async def clear(self) -> None:
        """Сброс и состояния, и данных."""
        storage = _require_storage(self._bot)
        user_id = self._bot.context.user_id
        if user_id is None:
            return
        await storage.clear_state(user_id)
        await storage.clear_session_data(user_id)
