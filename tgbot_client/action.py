"""Action — один зарегистрированный маршрут: условие, хендлер или декларативный ответ, доступ, редирект."""

from typing import Any, Callable, Iterable, List, Optional, Union

from .draft import MessageBuilder, MessageDraft
from .enums import MessageAction
from .resolver import Handler

Ids = Union[int, str, Iterable[Union[int, str]]]


def _ids(ids: Ids) -> List[Union[int, str]]:
    if isinstance(ids, (int, str)):
        return [ids]
    return list(ids)


class Action(MessageBuilder):
    """Создаётся методами Router.on_*. Настройка — цепочкой, хендлер можно повесить декоратором:

        @router.on_text("ping", "Пинг")
        async def ping(bot: Bot):
            await bot.reply("pong")

        router.on_callback("back", "menu").redirect("menu_cmd").query("Назад")
    """

    def __init__(self, action_id: str, condition: Any = None) -> None:
        self.id = action_id
        self.condition = condition
        self.handler: Optional[Handler] = None
        self.draft = MessageDraft()
        self.message_action = MessageAction.SEND
        self.access_ids: List[Union[int, str]] = []
        self.no_access_ids: List[Union[int, str]] = []
        self.access_handler: Optional[Handler] = None
        self.no_access_handler: Optional[Handler] = None
        self.redirect_to: Optional[str] = None
        self.middleware_handler: Optional[Handler] = None
        self.query_text: Optional[str] = None

    def __call__(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Декоратор: вешает func хендлером и возвращает её без изменений."""
        self.func(func)
        return func

    def func(self, handler: Callable[..., Any]) -> "Action":
        self.handler = Handler.wrap(handler)
        return self

    def middleware(self, handler: Callable[..., Any]) -> "Action":
        """Обёртка только для этого маршрута. Получает аргументы маршрута и next; не вызвал next — хендлер не запустится."""
        self.middleware_handler = Handler.wrap(handler)
        return self

    def redirect(self, action_id: str) -> "Action":
        self.redirect_to = action_id
        return self

    def query(self, text: str) -> "Action":
        """Текст всплывашки answerCallbackQuery для кнопок."""
        self.query_text = text
        return self

    def access(self, ids: Ids, handler: Optional[Callable[..., Any]] = None) -> "Action":
        """Только для этих user_id. Остальным — handler (если задан) вместо основного."""
        self.access_ids = _ids(ids)
        self.access_handler = Handler.wrap(handler) if handler is not None else None
        return self

    def no_access(self, ids: Ids, handler: Optional[Callable[..., Any]] = None) -> "Action":
        """Для этих user_id основной хендлер не запускается, вместо него — handler (если задан)."""
        self.no_access_ids = _ids(ids)
        self.no_access_handler = Handler.wrap(handler) if handler is not None else None
        return self

    def edit_text(self, text: str = "") -> "Action":
        self.draft.text = text
        self.message_action = MessageAction.EDIT_TEXT
        return self

    def edit_caption(self, text: str = "") -> "Action":
        self.draft.text = text
        self.message_action = MessageAction.EDIT_CAPTION
        return self

    def edit_media(self) -> "Action":
        self.message_action = MessageAction.EDIT_MEDIA
        return self

    def copy_from(self, target: "Action") -> None:
        """Редирект: забрать у target хендлер, черновик и текст всплывашки."""
        self.handler = target.handler
        self.draft = target.draft.copy()
        self.message_action = target.message_action
        self.query_text = target.query_text

    def __repr__(self) -> str:
        return f"Action(id={self.id!r}, condition={self.condition!r})"
