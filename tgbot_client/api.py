"""HTTP-клиент Bot API на aiohttp. Роутер и сборщик сообщений дают только dict параметров, запрос строится тут."""

import json
import os
from typing import Any, Dict, Optional

import aiohttp
from loguru import logger

from .exceptions import TelegramApiError

API_BASE_URL = "https://api.telegram.org"
DEFAULT_TIMEOUT = 10
CONNECT_TIMEOUT = 10


class LocalFile:
    """Файл с диска для загрузки. Передаётся вместо file_id/url: bot.msg().img(LocalFile("a.png"))."""

    __slots__ = ("path",)

    def __init__(self, path: str) -> None:
        self.path = path

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    def read(self) -> bytes:
        with open(self.path, "rb") as fh:
            return fh.read()

    def __repr__(self) -> str:
        return f"LocalFile({self.path!r})"


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


class ApiClient:
    """Один клиент на токен. Сессия создаётся при первом запросе, закрывается в close() или при выходе из async with."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = CONNECT_TIMEOUT,
        log: Optional[Any] = None,
    ) -> None:
        """token — токен от BotFather. timeout — на обычный вызов. connect_timeout — на установку соединения."""
        if not token:
            raise ValueError("token must not be empty")
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        if connect_timeout <= 0:
            raise ValueError("connect_timeout must be > 0")
        self.token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout)
        self._connect_timeout = float(connect_timeout)
        self._log = log if log is not None else logger
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def api_url(self) -> str:
        return f"{self._base_url}/bot{self.token}/"

    @property
    def file_url(self) -> str:
        return f"{self._base_url}/file/bot{self.token}/"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    def _build_form(self, params: Dict[str, Any]) -> aiohttp.FormData:
        form = aiohttp.FormData()
        for key, value in params.items():
            if value is None:
                continue
            if isinstance(value, LocalFile):
                form.add_field(key, value.read(), filename=value.name)
            else:
                form.add_field(key, _form_value(value))
        return form

    async def call_api(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """POST на метод API. Возвращает весь ответ ({"ok": true, "result": ...}). Не 200 или ok=false — TelegramApiError."""
        params = params or {}
        client_timeout = aiohttp.ClientTimeout(
            total=timeout if timeout is not None else self._timeout,
            sock_connect=self._connect_timeout,
        )
        session = self._get_session()
        async with session.post(
            self.api_url + method,
            data=self._build_form(params),
            timeout=client_timeout,
        ) as resp:
            body = await resp.text()
            status = resp.status
        try:
            data = json.loads(body) if body else {}
        except json.JSONDecodeError:
            data = {}
        if status == 200 and data.get("ok"):
            return data
        description = data.get("description") or body or f"HTTP {status}"
        error_code = int(data.get("error_code") or status)
        self._log.error("{} [{}]: {}", method, error_code, description)
        raise TelegramApiError(description, error_code, method=method, parameters=params)

    async def download_file(self, file_path: str, destination: str) -> str:
        """Скачивает файл по file_path из getFile и пишет в destination кусками. Возвращает destination."""
        session = self._get_session()
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=self._connect_timeout, sock_read=self._timeout)
        async with session.get(self.file_url + file_path, timeout=timeout) as resp:
            if resp.status != 200:
                raise TelegramApiError(
                    f"download failed: HTTP {resp.status}", resp.status,
                    method="download_file", parameters={"file_path": file_path},
                )
            with open(destination, "wb") as fh:
                async for chunk in resp.content.iter_chunked(64 * 1024):
                    fh.write(chunk)
        return destination

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
