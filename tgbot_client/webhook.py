"""Приём обновлений через webhook на aiohttp.web.

    app = Webhook(api, router, secret_token="s3cr3t").make_app("/tg")
    web.run_app(app, port=8080)
"""

import hmac
import json
from typing import Any, Dict, Optional

from aiohttp import web
from loguru import logger

from .bot import Bot
from .context import UpdateContext
from .enums import ParseMode

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


class Webhook:
    """Обработчик POST от Telegram. update разбирается в том же запросе; ответ всегда 200 ok, иначе Telegram будет повторять."""

    def __init__(
        self,
        api: Any,
        router: Any,
        *,
        secret_token: Optional[str] = None,
        parse_mode: ParseMode = ParseMode.NONE,
        log: Optional[Any] = None,
    ) -> None:
        self.api = api
        self.router = router
        self._secret_token = secret_token
        self._parse_mode = ParseMode(parse_mode)
        self._log = log if log is not None else logger

    def _check_secret(self, request: web.Request) -> bool:
        if not self._secret_token:
            return True
        received = request.headers.get(SECRET_HEADER, "")
        return hmac.compare_digest(received, self._secret_token)

    async def process_update(self, update: Dict[str, Any]) -> Any:
        bot = Bot(
            self.api,
            UpdateContext.from_update(update),
            storage=self.router.storage,
            buttons=self.router.buttons,
            parse_mode=self._parse_mode,
            log=self._log,
        )
        try:
            return await self.router.run(bot)
        except Exception as e:
            self._log.exception("update {}: {}", update.get("update_id"), e)
            await self.router.report_error(bot, e)
            return None

    async def handle(self, request: web.Request) -> web.Response:
        if not self._check_secret(request):
            self._log.warning("webhook: неверный secret token от {}", request.remote)
            return web.Response(status=403, text="forbidden")
        try:
            update = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self._log.warning("webhook: тело не JSON: {}", e)
            return web.Response(text="ok")
        if not isinstance(update, dict):
            self._log.warning("webhook: ожидался объект, получено {}", type(update).__name__)
            return web.Response(text="ok")
        await self.process_update(update)
        return web.Response(text="ok")

    def make_app(self, path: str = "/") -> web.Application:
        """Приложение с одним маршрутом POST path. Сессия API закрывается при остановке."""
        app = web.Application()
        app.router.add_post(path, self.handle)

        async def on_cleanup(_app: web.Application) -> None:
            await self.api.close()

        app.on_cleanup.append(on_cleanup)
        return app
