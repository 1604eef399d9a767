"""
Тесты Router: маршрутизация update от сырого dict до вызовов API.

Покрывают:
- команды, /start и реферальный payload
- шаблоны команд и callback, регулярки
- кнопки, доступ, редиректы, состояния
- медиа и участники чата
- middleware, ошибки и хук on_error
"""

import re
from unittest.mock import MagicMock

import pytest

from conftest import CHAT_ID, USER_ID, api_calls, callback_update, inline_update, message_update
from tgbot_client import (
    Bot,
    ConfigurationError,
    DispatchStatus,
    File,
    MemoryStorage,
    ResolutionError,
    Router,
    TelegramApiError,
    User,
)
from tgbot_client.router import compile_callback_pattern, compile_command_pattern, split_match


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def dispatch(router: Router, make_bot):
    async def run(update, **kwargs):
        bot = make_bot(update, **kwargs)
        return await router.run(bot)

    return run


class TestPatterns:
    def test_command_named_placeholder(self) -> None:
        match = compile_command_pattern("/ban {user_id}").match("/ban 555")
        assert match.group("user_id") == "555"

    def test_command_placeholders(self) -> None:
        pattern = compile_command_pattern("/give %n %w %s")
        match = pattern.match("/give 10 gold за   помощь")
        assert match.groups() == ("10", "gold", "за   помощь")
        assert compile_command_pattern("/give %n").match("/give ten") is None

    def test_command_case_insensitive(self) -> None:
        assert compile_command_pattern("/Ban {id}").match("/BAN 1")

    def test_callback_pattern(self) -> None:
        match = compile_callback_pattern("item_{id}_page_%n").match("item_a-1_page_3")
        assert match.group("id") == "a-1"
        assert compile_callback_pattern("item_{id}").match("item_") is None
        assert compile_callback_pattern("vote.%w").match("voteXyes") is None

    def test_split_match_excludes_named(self) -> None:
        match = re.search(r"(?P<id>\d+) (\w+) (\w+)", "5 fast now")
        assert split_match(match) == ({"id": "5"}, ["fast", "now"])


class TestCommands:
    @pytest.mark.asyncio
    async def test_start_declarative(self, router: Router, dispatch, api) -> None:
        router.on_start().text("Привет")

        result = await dispatch(message_update("/start"))

        assert result.status is DispatchStatus.HANDLED
        assert result.action_id == "start_command"
        [params] = api_calls(api, "sendMessage")
        assert params["chat_id"] == CHAT_ID
        assert params["text"] == "Привет"

    @pytest.mark.asyncio
    async def test_start_with_bot_mention(self, router: Router, dispatch) -> None:
        router.on_start().text("Привет")
        result = await dispatch(message_update("/START@MyBot"))
        assert result.action_id == "start_command"

    @pytest.mark.asyncio
    async def test_referral_keeps_payload_case(self, router: Router, dispatch) -> None:
        seen = []
        router.on_start().text("Привет")

        @router.on_referral()
        def referral(payload: str):
            seen.append(payload)

        result = await dispatch(message_update("/start REF_AbC"))

        assert result.action_id == "referral_command"
        assert seen == ["REF_AbC"]

    @pytest.mark.asyncio
    async def test_start_payload_without_referral_goes_to_start(self, router: Router, dispatch) -> None:
        router.on_start().text("Привет")
        result = await dispatch(message_update("/start xyz"))
        assert result.action_id == "start_command"

    @pytest.mark.asyncio
    async def test_bot_command_rest_of_text(self, router: Router, dispatch) -> None:
        seen = []

        @router.on_bot_command("help", ["help", "/помощь"])
        def help_(rest: str):
            seen.append(rest)

        await dispatch(message_update("/Help@my_bot Про Оплату"))
        await dispatch(message_update("/помощь"))

        assert seen == ["Про Оплату", ""]

    @pytest.mark.asyncio
    async def test_command_template(self, router: Router, dispatch) -> None:
        seen = []

        @router.on_command("ban", "/ban {user_id}")
        async def ban(bot: Bot, user_id: str):
            seen.append((bot.user_id, user_id))

        result = await dispatch(message_update("/ban 555"))

        assert result.action_id == "ban"
        assert seen == [(USER_ID, "555")]

    @pytest.mark.asyncio
    async def test_command_prefix_splits_args(self, router: Router, dispatch) -> None:
        seen = []

        @router.on_command("ping", "!ping")
        def ping(a, b):
            seen.append((a, b))

        await dispatch(message_update("!PING раз два"))
        not_found = await dispatch(message_update("!pingpong"))

        assert seen == [("раз", "два")]
        assert not_found.status is DispatchStatus.NOT_FOUND


class TestText:
    @pytest.mark.asyncio
    async def test_exact_text(self, router: Router, dispatch, api) -> None:
        router.on_text("hello", ["Привет", "Здравствуй"]).text("И тебе привет")

        await dispatch(message_update("Здравствуй"))

        assert api_calls(api, "sendMessage")[0]["text"] == "И тебе привет"

    @pytest.mark.asyncio
    async def test_text_preg(self, router: Router, dispatch) -> None:
        seen = []

        @router.on_text_preg("order", r"^заказ (?P<order_id>\d+) (\w+)$")
        def order(order_id: str, speed: str):
            seen.append((order_id, speed))

        await dispatch(message_update("заказ 42 срочно"))

        assert seen == [("42", "срочно")]

    @pytest.mark.asyncio
    async def test_message_fallback_and_default(self, router: Router, dispatch) -> None:
        router.on_message().text("просто текст")
        router.on_default().text("что-то другое")

        text = await dispatch(message_update("абырвалг"))
        other = await dispatch(message_update(None, sticker={"file_id": "st"}))

        assert text.action_id == "message_fallback"
        assert other.action_id == "fallback"

    @pytest.mark.asyncio
    async def test_not_found(self, dispatch) -> None:
        result = await dispatch(message_update("тишина"))
        assert result.status is DispatchStatus.NOT_FOUND
        assert result.ok

    @pytest.mark.asyncio
    async def test_caption_is_not_text(self, router: Router, dispatch) -> None:
        router.on_text("hi", "привет").text("текст")
        router.on_photo().text("фото")

        result = await dispatch(message_update(None, caption="привет", photo=[{"file_id": "p"}]))

        assert result.action_id == "photo_fallback"


class TestButtons:
    @pytest.mark.asyncio
    async def test_inline_press_answers_before_handler(self, router: Router, dispatch, api) -> None:
        @router.btn("menu", "Меню").query("Открываю")
        async def menu(bot: Bot):
            await bot.reply("меню")

        result = await dispatch(callback_update("menu"))

        assert result.action_id == "menu"
        assert [name for name, _ in api_calls(api)] == ["answerCallbackQuery", "sendMessage"]
        answer = api_calls(api, "answerCallbackQuery")[0]
        assert answer == {"callback_query_id": "cbq-1", "text": "Открываю"}

    @pytest.mark.asyncio
    async def test_reply_button_text(self, router: Router, dispatch, api) -> None:
        router.btn("menu", "Меню").text("Вот меню")

        result = await dispatch(message_update("Меню"))

        assert result.action_id == "menu"
        assert api_calls(api, "sendMessage")[0]["text"] == "Вот меню"
        assert api_calls(api, "answerCallbackQuery") == []

    @pytest.mark.asyncio
    async def test_empty_button_delegates_to_callback(self, router: Router, dispatch, api) -> None:
        router.btn("menu", "Меню")
        router.on_callback("menu_cb", "menu").query("ок").text("Меню открыто")

        result = await dispatch(callback_update("menu"))

        assert result.action_id == "menu_cb"
        assert [name for name, _ in api_calls(api)] == ["answerCallbackQuery", "sendMessage"]

    @pytest.mark.asyncio
    async def test_keyboard_ids_resolved(self, router: Router, dispatch, api) -> None:
        router.btn("menu", "Меню")
        router.btn("help", "Справка")
        router.on_start().text("Привет").kbd([["menu", "help"]])
        router.on_text("inline", "inline").text("Кнопки").inline_kbd([["menu"]])

        await dispatch(message_update("/start"))
        await dispatch(message_update("inline"))

        reply, inline = api_calls(api, "sendMessage")
        assert reply["reply_markup"]["keyboard"] == [[{"text": "Меню"}, {"text": "Справка"}]]
        assert inline["reply_markup"]["inline_keyboard"] == [[{"text": "Меню", "callback_data": "menu"}]]

    @pytest.mark.asyncio
    async def test_unknown_keyboard_id(self, router: Router, dispatch) -> None:
        router.on_start().text("Привет").kbd([["nope"]])
        with pytest.raises(ConfigurationError):
            await dispatch(message_update("/start"))


class TestCallbacks:
    @pytest.mark.asyncio
    async def test_template_args(self, router: Router, dispatch) -> None:
        seen = []

        @router.on_callback("page", "page_%n")
        def page(bot: Bot, number: str):
            seen.append((bot.callback_data, number))

        await dispatch(callback_update("page_7"))

        assert seen == [("page_7", "7")]

    @pytest.mark.asyncio
    async def test_declarative_callback_answers(self, router: Router, dispatch, api) -> None:
        router.on_callback("ok", "ok").text("Готово")

        await dispatch(callback_update("ok"))

        assert api_calls(api, "answerCallbackQuery") == [{"callback_query_id": "cbq-1"}]
        assert api_calls(api, "sendMessage")[0]["text"] == "Готово"

    @pytest.mark.asyncio
    async def test_callback_preg(self, router: Router, dispatch) -> None:
        seen = []

        @router.on_callback_preg("vote", re.compile(r"^vote:(?P<choice>yes|no)$"))
        def vote(choice: str):
            seen.append(choice)

        await dispatch(callback_update("vote:no"))

        assert seen == ["no"]

    @pytest.mark.asyncio
    async def test_edit_text_action(self, router: Router, dispatch, api) -> None:
        router.on_callback("edit", "edit").edit_text("Новый текст")

        await dispatch(callback_update("edit", message_id=20))

        [params] = api_calls(api, "editMessageText")
        assert params["chat_id"] == CHAT_ID
        assert params["message_id"] == 20
        assert params["text"] == "Новый текст"


class TestAccess:
    @pytest.mark.asyncio
    async def test_access_list_denies_others(self, router: Router, dispatch) -> None:
        handled, denied = [], []

        def refuse(bot: Bot):
            denied.append(bot.user_id)

        @router.on_text("admin", "админка").access([999], refuse)
        def admin():
            handled.append(True)

        result = await dispatch(message_update("админка"))

        assert result.status is DispatchStatus.DENIED
        assert handled == []
        assert denied == [USER_ID]

    @pytest.mark.asyncio
    async def test_access_ids_compared_as_strings(self, router: Router, dispatch) -> None:
        router.on_text("admin", "админка").access([str(USER_ID)]).text("ok")
        result = await dispatch(message_update("админка"))
        assert result.status is DispatchStatus.HANDLED

    @pytest.mark.asyncio
    async def test_no_access(self, router: Router, dispatch, api) -> None:
        router.on_text("shop", "магазин").no_access(USER_ID).text("ok")

        result = await dispatch(message_update("магазин"))

        assert result.status is DispatchStatus.DENIED
        assert api_calls(api) == []


class TestRedirects:
    @pytest.mark.asyncio
    async def test_action_redirect(self, router: Router, dispatch, api) -> None:
        router.on_text("a", "А").redirect("b")
        router.on_text("b", "Б").text("из Б")

        result = await dispatch(message_update("А"))

        assert result.action_id == "b"
        assert api_calls(api, "sendMessage")[0]["text"] == "из Б"

    @pytest.mark.asyncio
    async def test_router_redirect_is_idempotent(self, router: Router, dispatch, api) -> None:
        router.on_text("old", "старое")
        router.on_text("new", "новое").text("новый ответ")
        router.redirect("old", "new")

        first = await dispatch(message_update("старое"))
        second = await dispatch(message_update("старое"))

        assert first.action_id == second.action_id == "old"
        assert [p["text"] for p in api_calls(api, "sendMessage")] == ["новый ответ", "новый ответ"]

    @pytest.mark.asyncio
    async def test_missing_redirect_target(self, router: Router, dispatch) -> None:
        router.on_text("a", "А")
        router.redirect("a", "nowhere")
        with pytest.raises(ConfigurationError):
            await dispatch(message_update("А"))


class TestStates:
    @pytest.mark.asyncio
    async def test_state_intercepts_text(self, router: Router, dispatch) -> None:
        storage = MemoryStorage()
        router.set_storage(storage)
        router.on_text("hi", "Привет").text("обычный ответ")
        seen = []

        @router.on_state("wait_name")
        async def got_name(bot: Bot, name: str):
            seen.append(name)
            await bot.end_step()

        await storage.set_state(USER_ID, "wait_name")
        result = await dispatch(message_update("Привет"))

        assert result.action_id == "state_wait_name"
        assert seen == ["Привет"]
        assert await storage.get_state(USER_ID) is None

    @pytest.mark.asyncio
    async def test_commands_win_over_state(self, router: Router, dispatch) -> None:
        storage = MemoryStorage()
        router.set_storage(storage).on_start().text("меню")
        router.on_state("wait_name").text("жду имя")

        await storage.set_state(USER_ID, "wait_name")
        result = await dispatch(message_update("/start"))

        assert result.action_id == "start_command"

    @pytest.mark.asyncio
    async def test_step_sets_state(self, router: Router, dispatch) -> None:
        storage = MemoryStorage()
        router.set_storage(storage)

        @router.on_text("ask", "Имя")
        async def ask(bot: Bot):
            await bot.step("wait_name")

        await dispatch(message_update("Имя"))

        assert await storage.get_state(USER_ID) == "wait_name"


class TestMessageKinds:
    @pytest.mark.asyncio
    async def test_photo_gets_file(self, router: Router, dispatch) -> None:
        seen = []

        @router.on_photo()
        def photo(file: File):
            seen.append(file.file_id)

        await dispatch(message_update(None, photo=[{"file_id": "small"}, {"file_id": "big"}]))

        assert seen == ["big"]

    @pytest.mark.asyncio
    async def test_document_positional_file(self, router: Router, dispatch) -> None:
        seen = []

        @router.on_document()
        def document(doc):
            seen.append(doc)

        await dispatch(message_update(None, document={"file_id": "doc-1"}))

        assert isinstance(seen[0], File)
        assert seen[0].file_id == "doc-1"

    @pytest.mark.asyncio
    async def test_new_chat_members(self, router: Router, dispatch) -> None:
        seen = []

        @router.on_new_chat_member()
        def welcome(members: list):
            seen.extend(m.first_name for m in members)

        members = [{"id": 1, "first_name": "Аня"}, {"id": 2, "first_name": "Боря"}]
        await dispatch(message_update(None, new_chat_members=members))

        assert seen == ["Аня", "Боря"]

    @pytest.mark.asyncio
    async def test_left_chat_member(self, router: Router, dispatch) -> None:
        seen = []

        @router.on_left_chat_member()
        def goodbye(member: User):
            seen.append(member.id)

        await dispatch(message_update(None, left_chat_member={"id": 5, "first_name": "Вера"}))

        assert seen == [5]

    @pytest.mark.asyncio
    async def test_edited_message(self, router: Router, dispatch) -> None:
        router.on_edited_message().text("Вы изменили сообщение")
        update = message_update("новый текст")
        update["edited_message"] = update.pop("message")

        result = await dispatch(update)

        assert result.action_id == "edit_message"

    @pytest.mark.asyncio
    async def test_inline_query(self, router: Router, dispatch, api) -> None:
        @router.on_inline()
        async def inline(bot: Bot):
            await bot.answer_inline_query([{"type": "article", "id": "1", "title": bot.text}])

        await dispatch(inline_update("котики"))

        [params] = api_calls(api, "answerInlineQuery")
        assert params["inline_query_id"] == "iq-1"
        assert params["results"][0]["title"] == "котики"


class TestMiddleware:
    @pytest.mark.asyncio
    async def test_global_middleware_wraps_dispatch(self, router: Router, dispatch) -> None:
        order = []

        @router.middleware
        async def mw(bot: Bot, next):
            order.append("before")
            result = await next()
            order.append("after")
            return result

        @router.on_text("hi", "hi")
        def hi():
            order.append("handler")

        result = await dispatch(message_update("hi"))

        assert order == ["before", "handler", "after"]
        assert result.action_id == "hi"

    @pytest.mark.asyncio
    async def test_global_middleware_can_stop(self, router: Router, dispatch, api) -> None:
        router.middleware(lambda next: None)
        router.on_text("hi", "hi").text("hello")

        result = await dispatch(message_update("hi"))

        assert result.status is DispatchStatus.ABORTED
        assert api_calls(api) == []

    @pytest.mark.asyncio
    async def test_action_middleware_sees_route_args(self, router: Router, dispatch) -> None:
        seen = []

        async def only_small(user_id: str, next):
            seen.append(user_id)
            if int(user_id) < 100:
                await next()

        @router.on_command("ban", "/ban {user_id}").middleware(only_small)
        def ban(user_id: str):
            seen.append(f"ban {user_id}")

        await dispatch(message_update("/ban 5"))
        blocked = await dispatch(message_update("/ban 500"))

        assert seen == ["5", "ban 5", "500"]
        assert blocked.status is DispatchStatus.ABORTED
        assert blocked.action_id == "ban"


class TestErrors:
    @pytest.mark.asyncio
    async def test_api_error_reported(self, router: Router, dispatch) -> None:
        errors = []
        error = TelegramApiError("Bad Request: chat not found", 400, method="sendMessage")

        @router.on_text("hi", "hi")
        async def hi():
            raise error

        router.on_error(lambda bot, exc: errors.append(exc))

        result = await dispatch(message_update("hi"))

        assert result.status is DispatchStatus.FAILED
        assert result.error is error
        assert not result.ok
        assert errors == [error]

    @pytest.mark.asyncio
    async def test_resolution_error_reported(self, router: Router, dispatch) -> None:
        @router.on_text("hi", "hi")
        def hi(amount: int):
            pass

        result = await dispatch(message_update("hi"))

        assert result.status is DispatchStatus.FAILED
        assert isinstance(result.error, ResolutionError)

    @pytest.mark.asyncio
    async def test_failing_error_hook_is_swallowed(self, router: Router, dispatch) -> None:
        @router.on_text("hi", "hi")
        def hi():
            raise TelegramApiError("boom")

        @router.on_error
        async def broken(bot, exc):
            raise RuntimeError("hook")

        result = await dispatch(message_update("hi"))

        assert result.status is DispatchStatus.FAILED

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, router: Router, dispatch) -> None:
        @router.on_text("hi", "hi")
        def hi():
            raise KeyError("bug")

        with pytest.raises(KeyError):
            await dispatch(message_update("hi"))


class TestRouterSetup:
    def test_duplicate_id(self, router: Router) -> None:
        router.on_text("hi", "hi")
        with pytest.raises(ConfigurationError):
            router.on_callback("hi", "hi")

    def test_find_action(self, router: Router) -> None:
        action = router.on_text("hi", "hi")
        start = router.on_start()
        assert router.find_action("hi") is action
        assert router.find_action("start_command") is start
        assert router.find_action("nope") is None

    @pytest.mark.asyncio
    async def test_include_router(self, router: Router, dispatch) -> None:
        child = Router()
        child.btn("menu", "Меню").text("меню")
        child.on_default().text("дочерний default")
        router.on_default().text("свой default")
        router.include_router(child)

        assert router.buttons == {"menu": "Меню"}
        assert (await dispatch(message_update("Меню"))).action_id == "menu"
        assert router.find_action("fallback").draft.text == "свой default"

    def test_include_router_duplicate(self, router: Router) -> None:
        router.on_text("hi", "hi")
        child = Router()
        child.on_text("hi", "привет")
        with pytest.raises(ConfigurationError):
            router.include_router(child)

    @pytest.mark.asyncio
    async def test_run_action_by_id(self, router: Router, make_bot, api) -> None:
        router.on_text("menu", "menu").text("меню")

        result = await router.run(make_bot(callback_update("anything")), "menu")

        assert result.action_id == "menu"
        assert api_calls(api, "sendMessage")[0]["text"] == "меню"

    @pytest.mark.asyncio
    async def test_current_bot_inside_handler(self, router: Router, make_bot) -> None:
        seen = []

        @router.on_text("hi", "hi")
        def hi():
            seen.append(Bot.current())

        bot = make_bot(message_update("hi"))
        await router.run(bot)

        assert seen == [bot]
        assert Bot.current() is None

    @pytest.mark.asyncio
    async def test_container_injection(self, router: Router, dispatch) -> None:
        class Repo:
            pass

        repo = Repo()
        container = MagicMock()
        container.has.side_effect = lambda cls: cls is Repo
        container.get.return_value = repo
        router.set_container(container)
        seen = []

        @router.on_text("hi", "hi")
        def hi(r: Repo):
            seen.append(r)

        await dispatch(message_update("hi"))

        assert seen == [repo]
