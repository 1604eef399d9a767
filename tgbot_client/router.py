"""Router — таблица маршрутов и диспетчеризация одного update.

Порядок проверки (первое совпадение побеждает):
    1. команды бота: /start <payload> → on_referral, /start → on_start, /cmd → on_bot_command;
    2. состояние пользователя (если подключён storage) → on_state;
    3. текст: on_command (шаблоны %s/%w/%n/{name} или префикс), on_text, кнопки btn по тексту,
       on_text_preg, on_message;
    4. медиа: on_photo, on_audio, on_video, on_sticker, on_voice, on_document, on_video_note;
    5. on_new_chat_member / on_left_chat_member;
    6. callback: btn по id, on_callback (точно или шаблон), on_callback_preg;
    7. on_edited_message, on_inline;
    8. on_default.

Таблица маршрутов после старта только читается, так что один Router обслуживает все задачи сразу.
Всё, что относится к одному update, живёт в Bot и в аргументах вызовов.
"""

import functools
import inspect
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Pattern, Tuple, Union

from loguru import logger

from .action import Action
from .bot import Bot
from .cache import MetadataCache
from .enums import MessageAction, ParseMode
from .exceptions import BotError, ConfigurationError, ResolutionError, TelegramApiError
from .file import File
from .message import OutgoingMessage
from .resolver import DependencyResolver, Handler
from .types import User

Condition = Union[str, Pattern, Iterable[Union[str, Pattern]]]
RouteArgs = Tuple[Dict[str, Any], List[Any]]

_MEDIA_FALLBACKS = ("photo", "audio", "video", "sticker", "voice", "document", "video_note")

# слоты «один маршрут на тип»; ключ слота он же id маршрута
_SLOTS = (
    "start_command",
    "referral_command",
    "edit_message",
    "inline_fallback",
    "message_fallback",
    "photo_fallback",
    "video_fallback",
    "audio_fallback",
    "voice_fallback",
    "document_fallback",
    "sticker_fallback",
    "video_note_fallback",
    "new_chat_members",
    "left_chat_member",
    "fallback",
)

_PLACEHOLDER_RE = re.compile(r"(\{[a-zA-Z0-9_]+\}|%[swn])")


class DispatchStatus(str, Enum):
    HANDLED = "handled"
    NOT_FOUND = "not_found"
    DENIED = "denied"
    ABORTED = "aborted"
    FAILED = "failed"


@dataclass
class DispatchResult:
    """Итог run(): что сработало и чем закончилось.

    status:    DispatchStatus    — HANDLED, NOT_FOUND, DENIED (доступ), ABORTED (middleware не вызвал next), FAILED
    action_id: Optional[str]     — id сработавшего маршрута
    error:     Optional[BotError] — для FAILED: TelegramApiError или ResolutionError
    """

    status: DispatchStatus
    action_id: Optional[str] = None
    error: Optional[BotError] = None

    @property
    def ok(self) -> bool:
        return self.status is not DispatchStatus.FAILED


@functools.lru_cache(maxsize=512)
def compile_command_pattern(pattern: str) -> Pattern:
    """Шаблон команды → регулярка на весь текст.

    {name} — именованный токен без пробелов, %w — токен без пробелов, %n — цифры, %s — всё до конца.
    Токены шаблона разделяются любыми пробельными символами. Регистр не важен.

        compile_command_pattern("/ban {user_id}").match("/ban 555").group("user_id") == "555"
    """
    parts: List[str] = []
    for token in pattern.split():
        piece = []
        for chunk in _PLACEHOLDER_RE.split(token):
            if not chunk:
                continue
            if chunk.startswith("{"):
                piece.append(f"(?P<{chunk[1:-1]}>\\S+)")
            elif chunk == "%s":
                piece.append("(.+)")
            elif chunk == "%w":
                piece.append("(\\S+)")
            elif chunk == "%n":
                piece.append("(\\d+)")
            else:
                piece.append(re.escape(chunk))
        parts.append("".join(piece))
    return re.compile("^" + "\\s+".join(parts) + "$", re.IGNORECASE | re.DOTALL)


@functools.lru_cache(maxsize=512)
def compile_callback_pattern(pattern: str) -> Pattern:
    """Шаблон callback_data → регулярка. {name} и %w — буквы/цифры/_ ({name} ещё и -), %n — цифры, %s — что угодно."""
    regex = re.escape(pattern)
    regex = re.sub(r"\\\{([a-zA-Z0-9_]+)\\\}", r"(?P<\1>[a-zA-Z0-9_-]+)", regex)
    regex = regex.replace("%n", r"(\d+)").replace("%w", r"([a-zA-Z0-9_]+)").replace("%s", r"(.+)")
    return re.compile("^" + regex + "$", re.DOTALL)


def split_match(match: "re.Match") -> RouteArgs:
    """Именованные группы → dict, остальные по порядку → list. Именованные в list не попадают."""
    named = {k: v for k, v in match.groupdict().items()}
    named_indexes = set(match.re.groupindex.values())
    positional = [g for i, g in enumerate(match.groups(), start=1) if i not in named_indexes]
    return named, positional


def _is_template(condition: str) -> bool:
    return "%" in condition or "{" in condition


def _conditions(condition: Any) -> List[Any]:
    if condition is None:
        return []
    if isinstance(condition, (str, re.Pattern)):
        return [condition]
    return list(condition)


def _compile_preg(pattern: Union[str, Pattern]) -> Pattern:
    return pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)


def _command_token(condition: str) -> str:
    token = condition.strip().lower()
    return token if token.startswith("/") else f"/{token}"


class Router:
    """Маршруты бота. Регистрация — методы on_*, запуск на update — await router.run(bot).

        router = Router()
        router.on_start().text("Привет!").kbd([["menu"]])
        router.btn("menu", "Меню").text("Выберите пункт")

        @router.on_command("ban", "/ban {user_id}")
        async def ban(bot: Bot, user_id: str):
            ...
    """

    def __init__(self, *, log: Optional[Any] = None) -> None:
        self._log = log if log is not None else logger
        self._bot_commands: Dict[str, Action] = {}
        self._commands: Dict[str, Action] = {}
        self._text_exact: Dict[str, Action] = {}
        self._text_preg: Dict[str, Action] = {}
        self._callbacks: Dict[str, Action] = {}
        self._callbacks_preg: Dict[str, Action] = {}
        self._states: Dict[str, Action] = {}
        self._buttons: Dict[str, Action] = {}
        self._button_texts: Dict[str, str] = {}
        self._slots: Dict[str, Optional[Action]] = {key: None for key in _SLOTS}
        self._middleware: Optional[Handler] = None
        self._pending_redirects: List[Tuple[str, str]] = []
        self._resolver = DependencyResolver(log=self._log)
        self._storage: Optional[Any] = None
        self._error_handler: Optional[Callable[..., Any]] = None
        self.parse_mode = ParseMode.NONE

    # --- настройка ---

    def set_container(self, container: Any) -> "Router":
        """Сервис-локатор с has(type)/get(type): хендлер получит из него аргументы своих классов."""
        self._resolver.set_container(container)
        return self

    def set_cache(self, cache: MetadataCache) -> "Router":
        self._resolver.set_cache(cache)
        return self

    def set_storage(self, storage: Any) -> "Router":
        self._storage = storage
        return self

    def default_parse_mode(self, mode: ParseMode) -> "Router":
        self.parse_mode = ParseMode(mode)
        return self

    @property
    def storage(self) -> Optional[Any]:
        return self._storage

    @property
    def resolver(self) -> DependencyResolver:
        return self._resolver

    @property
    def buttons(self) -> Dict[str, str]:
        """{id: текст} кнопок, зарегистрированных через btn()."""
        return self._button_texts

    def on_error(self, callback: Callable[..., Any]) -> Callable[..., Any]:
        """Хук ошибок: callback(bot, exc), sync или async. Можно декоратором."""
        self._error_handler = callback
        return callback

    def middleware(self, handler: Callable[..., Any]) -> Callable[..., Any]:
        """Глобальная обёртка вокруг всей маршрутизации. Аргумент next — async, без вызова update дальше не пойдёт."""
        self._middleware = Handler.wrap(handler)
        return handler

    # --- регистрация ---

    def _all_tables(self) -> Tuple[Dict[str, Action], ...]:
        return (
            self._bot_commands, self._commands, self._text_exact, self._text_preg,
            self._callbacks, self._callbacks_preg, self._states, self._buttons,
        )

    def _check_unique(self, action_id: str) -> None:
        if self.find_action(action_id) is not None:
            raise ConfigurationError(f"Маршрут с id '{action_id}' уже зарегистрирован")

    def _add(self, table: Dict[str, Action], key: str, action: Action) -> Action:
        self._check_unique(action.id)
        table[key] = action
        return action

    def _slot(self, key: str) -> Action:
        if self._slots[key] is None:
            self._check_unique(key)
        action = Action(key)
        self._slots[key] = action
        return action

    def on_bot_command(self, action_id: str, command: Optional[Condition] = None) -> Action:
        """Команда из меню бота: сравнивается первое слово (/help, /help@my_bot). Остаток текста — первым позиционным аргументом."""
        return self._add(self._bot_commands, action_id, Action(action_id, command if command is not None else action_id))

    def on_command(self, action_id: str, command: Optional[Condition] = None) -> Action:
        """Текстовая команда: шаблон с %s/%w/%n/{name} или префикс ("!ping" → аргументы через пробел)."""
        return self._add(self._commands, action_id, Action(action_id, command if command is not None else action_id))

    def on_text(self, action_id: str, text: Optional[Condition] = None) -> Action:
        return self._add(self._text_exact, action_id, Action(action_id, text if text is not None else action_id))

    def on_text_preg(self, action_id: str, pattern: Optional[Condition] = None) -> Action:
        return self._add(self._text_preg, action_id, Action(action_id, pattern if pattern is not None else action_id))

    def on_callback(self, action_id: str, data: Optional[Condition] = None) -> Action:
        return self._add(self._callbacks, action_id, Action(action_id, data if data is not None else action_id))

    def on_callback_preg(self, action_id: str, pattern: Optional[Condition] = None) -> Action:
        return self._add(self._callbacks_preg, action_id, Action(action_id, pattern if pattern is not None else action_id))

    def on_state(self, state: str) -> Action:
        """Маршрут для пользователей в состоянии state (bot.step(state)). Перехватывает текст и кнопки."""
        return self._add(self._states, state, Action(f"state_{state}", state))

    def btn(self, action_id: str, text: Optional[str] = None) -> Action:
        """Кнопка: id подставляется в клавиатуры, нажатие (inline) или её текст (reply) ведут сюда."""
        action = self._add(self._buttons, action_id, Action(action_id, text if text is not None else action_id))
        self._button_texts[action_id] = text if text is not None else action_id
        return action

    def on_start(self) -> Action:
        return self._slot("start_command")

    def on_referral(self) -> Action:
        """/start <payload>: payload — первым позиционным аргументом."""
        return self._slot("referral_command")

    def on_edited_message(self) -> Action:
        return self._slot("edit_message")

    def on_inline(self) -> Action:
        return self._slot("inline_fallback")

    def on_message(self) -> Action:
        """Любой текст, который не подошёл под текстовые маршруты."""
        return self._slot("message_fallback")

    def on_photo(self) -> Action:
        """Фото: хендлер получит File (аргумент file или первый позиционный)."""
        return self._slot("photo_fallback")

    def on_video(self) -> Action:
        return self._slot("video_fallback")

    def on_audio(self) -> Action:
        return self._slot("audio_fallback")

    def on_voice(self) -> Action:
        return self._slot("voice_fallback")

    def on_document(self) -> Action:
        return self._slot("document_fallback")

    def on_sticker(self) -> Action:
        return self._slot("sticker_fallback")

    def on_video_note(self) -> Action:
        return self._slot("video_note_fallback")

    def on_new_chat_member(self) -> Action:
        """Новые участники: аргумент members — список User."""
        return self._slot("new_chat_members")

    def on_left_chat_member(self) -> Action:
        """Вышедший участник: аргумент member — User."""
        return self._slot("left_chat_member")

    def on_default(self) -> Action:
        return self._slot("fallback")

    def redirect(self, from_id: str, to_id: str) -> "Router":
        """При старте run() маршрут from_id получит хендлер и ответ маршрута to_id."""
        self._pending_redirects.append((from_id, to_id))
        return self

    def include_router(self, router: "Router") -> "Router":
        """Добавляет маршруты другого роутера после своих. Дубли id — ConfigurationError. Свои слоты не перезаписываются."""
        pairs = (
            (self._bot_commands, router._bot_commands),
            (self._commands, router._commands),
            (self._text_exact, router._text_exact),
            (self._text_preg, router._text_preg),
            (self._callbacks, router._callbacks),
            (self._callbacks_preg, router._callbacks_preg),
            (self._states, router._states),
            (self._buttons, router._buttons),
        )
        for own, other in pairs:
            for key, action in other.items():
                self._add(own, key, action)
        self._button_texts.update(router._button_texts)
        for key, action in router._slots.items():
            if action is not None and self._slots[key] is None:
                self._slots[key] = action
        self._pending_redirects.extend(router._pending_redirects)
        return self

    def find_action(self, action_id: str) -> Optional[Action]:
        for table in self._all_tables():
            for action in table.values():
                if action.id == action_id:
                    return action
        for action in self._slots.values():
            if action is not None and action.id == action_id:
                return action
        return None

    def _process_redirects(self) -> None:
        for from_id, to_id in self._pending_redirects:
            source = self.find_action(from_id)
            if source is None:
                raise ConfigurationError(f"Redirect: исходный маршрут '{from_id}' не найден")
            target = self.find_action(to_id)
            if target is None:
                raise ConfigurationError(f"Redirect: целевой маршрут '{to_id}' не найден")
            source.copy_from(target)
        self._pending_redirects = []

    # --- запуск ---

    def prepare(self, bot: Bot) -> Bot:
        """Подключает к Bot кнопки и storage роутера, если у него своих нет."""
        if not bot.buttons:
            bot.buttons = self._button_texts
        if bot.storage is None:
            bot.storage = self._storage
        return bot

    async def run(self, bot: Bot, action_id: Optional[str] = None) -> DispatchResult:
        """Обрабатывает update из bot.context. action_id — сразу выполнить этот маршрут, минуя поиск.

        TelegramApiError и ResolutionError не выходят наружу: отдаются в on_error и возвращаются как FAILED.
        ConfigurationError пробрасывается — это ошибка в настройке маршрутов.
        """
        self.prepare(bot)
        token = bot.activate()
        try:
            if action_id is None:
                self._process_redirects()
                return await self._dispatch(bot)
            action = self.find_action(action_id)
            if action is None:
                raise ConfigurationError(f"Маршрут с id '{action_id}' не найден")
            await self._execute_action(bot, action, {}, [])
            return DispatchResult(DispatchStatus.HANDLED, action.id)
        except (TelegramApiError, ResolutionError) as e:
            self._log.error("update {}: {}", bot.context.update_id, e)
            await self.report_error(bot, e)
            return DispatchResult(DispatchStatus.FAILED, action_id, e)
        finally:
            Bot.deactivate(token)

    async def report_error(self, bot: Bot, exc: BaseException) -> None:
        """Отдаёт ошибку в хук on_error. Ошибки самого хука только логируются."""
        if self._error_handler is None:
            return
        try:
            result = self._error_handler(bot, exc)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self._log.exception("on_error: {}", e)

    async def _dispatch(self, bot: Bot) -> DispatchResult:
        if self._middleware is None:
            return await self._process_routes(bot)
        outcome: List[DispatchResult] = []

        async def next_() -> DispatchResult:
            result = await self._process_routes(bot)
            outcome.append(result)
            return result

        await self._resolver.invoke(self._middleware, bot, {"next": next_})
        return outcome[0] if outcome else DispatchResult(DispatchStatus.ABORTED)

    async def _process_routes(self, bot: Bot) -> DispatchResult:
        ctx = bot.context
        kind = ctx.type
        update = ctx.update
        message = update.get("message") or {}
        # подпись к медиа текстом не считается
        text = message.get("text") if kind in ("text", "bot_command") else None

        if text is not None and (kind == "bot_command" or text.startswith("/")):
            result = await self._match_bot_command(bot, kind, text)
            if result is not None:
                return result

        storage = bot.storage
        if storage is not None and ctx.user_id is not None:
            state = await storage.get_state(ctx.user_id)
            if state and state in self._states:
                value = ctx.text if ctx.text is not None else ctx.callback_data
                return await self._dispatch_answer(bot, self._states[state], "state", {}, [value])

        if kind in ("text", "bot_command"):
            if text:
                result = await self._match_text(bot, kind, text)
                if result is not None:
                    return result

            for media in _MEDIA_FALLBACKS:
                action = self._slots[f"{media}_fallback"]
                if message.get(media) and action is not None:
                    file = File(File.get_file_id(update, media), bot.api)
                    return await self._dispatch_answer(bot, action, "text", {"file": file}, [file])

            members = message.get("new_chat_members")
            if members and self._slots["new_chat_members"] is not None:
                users = [User(m) for m in members]
                return await self._dispatch_answer(
                    bot, self._slots["new_chat_members"], "text", {"members": users}, users
                )
            left = message.get("left_chat_member")
            if left and self._slots["left_chat_member"] is not None:
                user = User(left)
                return await self._dispatch_answer(
                    bot, self._slots["left_chat_member"], "text", {"member": user}, [user]
                )

        if kind == "callback_query":
            result = await self._match_callback(bot, ctx.callback_data or "")
            if result is not None:
                return result

        if kind == "edited_message" and self._slots["edit_message"] is not None:
            return await self._dispatch_answer(bot, self._slots["edit_message"], "text", {}, [])

        if kind == "inline_query" and self._slots["inline_fallback"] is not None:
            return await self._dispatch_answer(bot, self._slots["inline_fallback"], kind, {}, [])

        if self._slots["fallback"] is not None:
            return await self._dispatch_answer(bot, self._slots["fallback"], "text", {}, [])

        self._log.debug("update {}: маршрут не найден (type={})", ctx.update_id, kind)
        return DispatchResult(DispatchStatus.NOT_FOUND)

    async def _match_bot_command(self, bot: Bot, kind: str, text: str) -> Optional[DispatchResult]:
        words = text.split(maxsplit=1)
        if not words:
            return None
        # регистр важен только для имени команды, payload остаётся как есть
        command = words[0].lower().split("@", 1)[0]
        rest = words[1].strip() if len(words) > 1 else ""

        if command == "/start":
            referral = self._slots["referral_command"]
            if rest and referral is not None:
                return await self._dispatch_answer(bot, referral, kind, {}, [rest])
            start = self._slots["start_command"]
            if start is not None:
                return await self._dispatch_answer(bot, start, kind, {}, [])

        for action in self._bot_commands.values():
            for condition in _conditions(action.condition):
                if _command_token(condition) == command:
                    return await self._dispatch_answer(bot, action, kind, {}, [rest])
        return None

    async def _match_text(self, bot: Bot, kind: str, text: str) -> Optional[DispatchResult]:
        for action in self._commands.values():
            for condition in _conditions(action.condition):
                if _is_template(condition):
                    match = compile_command_pattern(condition).match(text)
                    if match:
                        named, positional = split_match(match)
                        return await self._dispatch_answer(bot, action, kind, named, positional)
                elif text.lower().startswith(condition.lower()):
                    tail = text[len(condition):]
                    if not tail or tail[0] in " \n":
                        return await self._dispatch_answer(bot, action, kind, {}, tail.split())

        for action in self._text_exact.values():
            if text in _conditions(action.condition):
                return await self._dispatch_answer(bot, action, kind, {}, [])

        for action in self._buttons.values():
            if text in _conditions(action.condition):
                return await self._dispatch_answer(bot, action, "text_button", {}, [])

        for action in self._text_preg.values():
            for pattern in _conditions(action.condition):
                match = _compile_preg(pattern).search(text)
                if match:
                    named, positional = split_match(match)
                    return await self._dispatch_answer(bot, action, kind, named, positional)

        fallback = self._slots["message_fallback"]
        if fallback is not None:
            return await self._dispatch_answer(bot, fallback, "text", {}, [])
        return None

    async def _match_callback(self, bot: Bot, data: str) -> Optional[DispatchResult]:
        button = self._buttons.get(data)
        if button is not None:
            return await self._dispatch_answer(bot, button, "button_callback_query", {}, [])

        for action in self._callbacks.values():
            for condition in _conditions(action.condition):
                if _is_template(condition):
                    match = compile_callback_pattern(condition).match(data)
                    if match:
                        named, positional = split_match(match)
                        return await self._dispatch_answer(bot, action, "callback_query", named, positional)
                elif condition == data:
                    return await self._dispatch_answer(bot, action, "callback_query", {}, [])

        for action in self._callbacks_preg.values():
            for pattern in _conditions(action.condition):
                match = _compile_preg(pattern).search(data)
                if match:
                    named, positional = split_match(match)
                    return await self._dispatch_answer(bot, action, "callback_query", named, positional)
        return None

    async def _dispatch_answer(
        self,
        bot: Bot,
        action: Action,
        kind: str,
        named: Dict[str, Any],
        positional: List[Any],
    ) -> DispatchResult:
        self._log.debug("update {}: маршрут {} ({})", bot.context.update_id, action.id, kind)
        if action.middleware_handler is None:
            return await self._process_answer(bot, action, kind, named, positional)
        outcome: List[DispatchResult] = []

        async def next_() -> DispatchResult:
            result = await self._process_answer(bot, action, kind, named, positional)
            outcome.append(result)
            return result

        await self._resolver.invoke(action.middleware_handler, bot, {**named, "next": next_}, positional)
        return outcome[0] if outcome else DispatchResult(DispatchStatus.ABORTED, action.id)

    async def _process_answer(
        self,
        bot: Bot,
        action: Action,
        kind: str,
        named: Dict[str, Any],
        positional: List[Any],
    ) -> DispatchResult:
        ctx = bot.context

        if action.redirect_to:
            target = self.find_action(action.redirect_to)
            if target is None:
                raise ConfigurationError(f"Redirect: целевой маршрут '{action.redirect_to}' не найден")
            if ctx.is_callback and ctx.query_id and action.query_text:
                await bot.answer_callback_query(action.query_text)
            await self._execute_action(bot, target, named, positional)
            return DispatchResult(DispatchStatus.HANDLED, target.id)

        if ctx.user_id is not None:
            user = str(ctx.user_id)
            if action.access_ids and user not in {str(i) for i in action.access_ids}:
                if action.access_handler is not None:
                    await self._resolver.invoke(action.access_handler, bot, named, positional)
                return DispatchResult(DispatchStatus.DENIED, action.id)
            if action.no_access_ids and user in {str(i) for i in action.no_access_ids}:
                if action.no_access_handler is not None:
                    await self._resolver.invoke(action.no_access_handler, bot, named, positional)
                return DispatchResult(DispatchStatus.DENIED, action.id)

        if action.handler is not None:
            if ctx.is_callback and ctx.query_id and action.query_text:
                await bot.answer_callback_query(action.query_text)
            await self._resolver.invoke(action.handler, bot, named, positional)
            return DispatchResult(DispatchStatus.HANDLED, action.id)

        if kind in ("bot_command", "text", "text_button"):
            await self._construct_message(bot, action)
        elif kind == "state":
            if ctx.is_callback:
                await bot.answer_callback_query(action.query_text)
            await self._construct_message(bot, action)
        elif kind == "button_callback_query":
            if action.draft.is_empty():
                # пустая кнопка отдаёт нажатие on_callback с тем же data, отвечает уже он
                data = ctx.callback_data
                for route in self._callbacks.values():
                    if data in _conditions(route.condition):
                        return await self._dispatch_answer(bot, route, "callback_query", {}, [])
            await bot.answer_callback_query(action.query_text)
            await self._construct_message(bot, action)
        elif kind == "callback_query":
            await bot.answer_callback_query(action.query_text)
            await self._construct_message(bot, action)
        return DispatchResult(DispatchStatus.HANDLED, action.id)

    async def _execute_action(
        self,
        bot: Bot,
        action: Action,
        named: Dict[str, Any],
        positional: List[Any],
    ) -> Any:
        if action.handler is not None:
            return await self._resolver.invoke(action.handler, bot, named, positional)
        return await self._construct_message(bot, action)

    async def _construct_message(self, bot: Bot, action: Action) -> Optional[Dict[str, Any]]:
        """Декларативный ответ маршрута. Пустой черновик — ничего не делать."""
        if action.draft.is_empty() and action.message_action != MessageAction.EDIT_MEDIA:
            return None
        message = OutgoingMessage(bot, draft=action.draft)
        if not message.draft.parse_mode:
            message.draft.parse_mode = bot.parse_mode.value or self.parse_mode.value
        if action.message_action == MessageAction.EDIT_TEXT:
            return await message.edit_text()
        if action.message_action == MessageAction.EDIT_CAPTION:
            return await message.edit_caption()
        if action.message_action == MessageAction.EDIT_MEDIA:
            return await message.edit_media()
        return await message.send()
