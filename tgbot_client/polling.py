"""Long polling: getUpdates в цикле, каждый update — отдельная задача."""

import asyncio
from typing import Any, Dict, List, Optional, Set

import aiohttp
from loguru import logger

from .bot import Bot
from .context import UpdateContext
from .enums import ParseMode
from .exceptions import TelegramApiError


class LongPoll:
    """Забирает обновления и отдаёт их роутеру. Параллельно — не больше max_concurrency задач.

        api = ApiClient(BOT_TOKEN)
        await LongPoll(api, router).listen()
    """

    def __init__(
        self,
        api: Any,
        router: Any,
        *,
        timeout: int = 20,
        retry_delay: float = 2.0,
        max_concurrency: int = 128,
        skip_old_updates: bool = False,
        allowed_updates: Optional[List[str]] = None,
        parse_mode: ParseMode = ParseMode.NONE,
        log: Optional[Any] = None,
    ) -> None:
        """timeout — long polling getUpdates в секундах. retry_delay — пауза после сетевой ошибки."""
        if timeout < 0:
            raise ValueError("timeout must be >= 0")
        if retry_delay < 0:
            raise ValueError("retry_delay must be >= 0")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.api = api
        self.router = router
        self._timeout = int(timeout)
        self._retry_delay = float(retry_delay)
        self._max_concurrency = max_concurrency
        self._skip_old_updates = skip_old_updates
        self._allowed_updates = allowed_updates
        self._parse_mode = ParseMode(parse_mode)
        self._log = log if log is not None else logger
        self._offset = 0
        self._running = False
        self._pending_tasks: Set[asyncio.Task] = set()

    @property
    def offset(self) -> int:
        return self._offset

    async def get_updates(self) -> List[Dict[str, Any]]:
        """Один запрос getUpdates со сдвигом offset. Ошибки пробрасываются — их разбирает listen()."""
        params: Dict[str, Any] = {"offset": self._offset, "timeout": self._timeout}
        if self._allowed_updates is not None:
            params["allowed_updates"] = self._allowed_updates
        # ждём дольше, чем Telegram держит соединение
        response = await self.api.call_api("getUpdates", params, timeout=self._timeout + 15)
        updates = response.get("result") or []
        if updates:
            self._offset = updates[-1]["update_id"] + 1
        return updates

    async def skip_pending(self) -> None:
        """Пропускает накопившиеся обновления: offset=-1 отдаёт последнее, следующий запрос его подтверждает."""
        response = await self.api.call_api("getUpdates", {"offset": -1, "timeout": 0})
        updates = response.get("result") or []
        if updates:
            self._offset = updates[-1]["update_id"] + 1
        self._log.info("Пропущены старые обновления, offset={}", self._offset)

    def make_bot(self, update: Dict[str, Any]) -> Bot:
        return Bot(
            self.api,
            UpdateContext.from_update(update),
            storage=self.router.storage,
            buttons=self.router.buttons,
            parse_mode=self._parse_mode,
            log=self._log,
        )

    async def process_update(self, update: Dict[str, Any]) -> Any:
        """Один update: свой Bot и прогон через роутер. Исключение не роняет цикл — уходит в лог и on_error."""
        bot = self.make_bot(update)
        try:
            return await self.router.run(bot)
        except Exception as e:
            self._log.exception("update {}: {}", update.get("update_id"), e)
            await self.router.report_error(bot, e)
            return None

    def _task_done_callback(self, task: asyncio.Task) -> None:
        """Снимает задачу с учёта, при исключении — логирует."""
        self._pending_tasks.discard(task)
        try:
            exc = task.exception()
            if exc is not None:
                self._log.opt(exception=exc).error("update task: {}", exc)
        except asyncio.CancelledError:
            pass

    async def listen(self) -> None:
        """Long polling до stop() или отмены. Перед выходом ждёт активные задачи до 10 с, отмена затем пробрасывается."""
        self._running = True
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def process_one(update: Dict[str, Any]) -> None:
            async with semaphore:
                await self.process_update(update)

        self._log.info("Bot started")
        try:
            if self._skip_old_updates:
                await self.skip_pending()
            while self._running:
                try:
                    updates = await self.get_updates()
                except TelegramApiError as e:
                    self._log.warning("getUpdates: {} — повтор через {} с", e, self._retry_delay)
                    await asyncio.sleep(self._retry_delay)
                    continue
                except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
                    self._log.warning("getUpdates (сеть): {} — повтор через {} с", e, self._retry_delay)
                    await asyncio.sleep(self._retry_delay)
                    continue
                for update in updates:
                    task = asyncio.create_task(process_one(update))
                    self._pending_tasks.add(task)
                    task.add_done_callback(self._task_done_callback)
        finally:
            await self._drain()
            self._running = False
            self._log.info("Bot stopped")

    async def _drain(self) -> None:
        if not self._pending_tasks:
            return
        _, pending = await asyncio.wait(self._pending_tasks, timeout=10.0, return_when=asyncio.ALL_COMPLETED)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def run(self) -> None:
        """Синхронный запуск: asyncio.run(listen()) с закрытием сессии API. Ctrl+C — штатная остановка."""

        async def main() -> None:
            try:
                await self.listen()
            finally:
                await self.api.close()

        try:
            asyncio.run(main())
        except KeyboardInterrupt:
            pass

    def stop(self) -> None:
        """Останавливает цикл — listen() выйдет после текущего getUpdates."""
        self._running = False
