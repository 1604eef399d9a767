"""Хранилища состояния (FSM) и данных сессии по user_id.

Все реализации ведут себя одинаково: нет состояния — None, нет сессии — {}.
set_session_data мержит переданный dict с уже сохранённым.
"""

import asyncio
import json
import os
from typing import Any, Dict, Optional, Protocol, Union

from loguru import logger
from redis.asyncio import Redis

UserId = Union[int, str]


class Storage(Protocol):
    async def get_state(self, user_id: UserId) -> Optional[str]: ...

    async def set_state(self, user_id: UserId, state: str) -> None: ...

    async def clear_state(self, user_id: UserId) -> None: ...

    async def get_session_data(self, user_id: UserId) -> Dict[str, Any]: ...

    async def set_session_data(self, user_id: UserId, data: Dict[str, Any]) -> None: ...

    async def clear_session_data(self, user_id: UserId) -> None: ...


class MemoryStorage:
    """В памяти процесса. Для тестов и ботов, которым не страшен перезапуск."""

    def __init__(self) -> None:
        self._states: Dict[str, str] = {}
        self._sessions: Dict[str, Dict[str, Any]] = {}

    async def get_state(self, user_id: UserId) -> Optional[str]:
        return self._states.get(str(user_id))

    async def set_state(self, user_id: UserId, state: str) -> None:
        self._states[str(user_id)] = state

    async def clear_state(self, user_id: UserId) -> None:
        self._states.pop(str(user_id), None)

    async def get_session_data(self, user_id: UserId) -> Dict[str, Any]:
        return dict(self._sessions.get(str(user_id), {}))

    async def set_session_data(self, user_id: UserId, data: Dict[str, Any]) -> None:
        self._sessions.setdefault(str(user_id), {}).update(data)

    async def clear_session_data(self, user_id: UserId) -> None:
        self._sessions.pop(str(user_id), None)


class FileStorage:
    """Один JSON-файл на пользователя: {"state": ..., "session": {...}}. Каталог создаётся при первой записи."""

    def __init__(self, path: str = "storage/sessions", *, log: Optional[Any] = None) -> None:
        self._dir = path.rstrip("/\\")
        self._log = log if log is not None else logger
        # чтение-изменение-запись одного файла не должны перемежаться между задачами
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock(self, user_id: UserId) -> asyncio.Lock:
        key = str(user_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def _file(self, user_id: UserId) -> str:
        return os.path.join(self._dir, f"{user_id}.json")

    def _load_sync(self, user_id: UserId) -> Dict[str, Any]:
        try:
            with open(self._file(user_id), encoding="utf-8") as fh:
                content = fh.read()
        except FileNotFoundError:
            return {}
        if not content.strip():
            return {}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            self._log.warning("FileStorage: битый файл {}: {}", self._file(user_id), e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save_sync(self, user_id: UserId, data: Dict[str, Any]) -> None:
        os.makedirs(self._dir, exist_ok=True)
        tmp = self._file(user_id) + ".tmp"
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=4)
        os.replace(tmp, self._file(user_id))

    async def _load(self, user_id: UserId) -> Dict[str, Any]:
        return await asyncio.to_thread(self._load_sync, user_id)

    async def _save(self, user_id: UserId, data: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._save_sync, user_id, data)

    async def get_state(self, user_id: UserId) -> Optional[str]:
        return (await self._load(user_id)).get("state")

    async def set_state(self, user_id: UserId, state: str) -> None:
        async with self._lock(user_id):
            data = await self._load(user_id)
            data["state"] = state
            await self._save(user_id, data)

    async def clear_state(self, user_id: UserId) -> None:
        async with self._lock(user_id):
            data = await self._load(user_id)
            if data.pop("state", None) is not None:
                await self._save(user_id, data)

    async def get_session_data(self, user_id: UserId) -> Dict[str, Any]:
        session = (await self._load(user_id)).get("session")
        return session if isinstance(session, dict) else {}

    async def set_session_data(self, user_id: UserId, data: Dict[str, Any]) -> None:
        async with self._lock(user_id):
            stored = await self._load(user_id)
            session = stored.get("session") if isinstance(stored.get("session"), dict) else {}
            session.update(data)
            stored["session"] = session
            await self._save(user_id, stored)

    async def clear_session_data(self, user_id: UserId) -> None:
        async with self._lock(user_id):
            data = await self._load(user_id)
            if data.pop("session", None) is not None:
                await self._save(user_id, data)


class RedisStorage:
    """Redis-хеш на пользователя: {prefix}{user_id} с полями state и session (JSON).

    url — строка подключения (redis://host:6379/0). client — готовый redis.asyncio.Redis
    (или совместимый объект с hget/hset/hdel и transaction); если передан, url не нужен.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        client: Optional[Any] = None,
        prefix: str = "tg_fsm:",
        log: Optional[Any] = None,
    ) -> None:
        if client is None and not url:
            raise ValueError("RedisStorage: нужен url или client")
        if client is None:
            client = Redis.from_url(
                url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=3,
                socket_connect_timeout=3,
            )
        self._redis = client
        self._prefix = prefix
        self._log = log if log is not None else logger

    def _key(self, user_id: UserId) -> str:
        return f"{self._prefix}{user_id}"

    @staticmethod
    def _text(value: Any) -> Optional[str]:
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else str(value)

    async def get_state(self, user_id: UserId) -> Optional[str]:
        return self._text(await self._redis.hget(self._key(user_id), "state"))

    async def set_state(self, user_id: UserId, state: str) -> None:
        await self._redis.hset(self._key(user_id), "state", state)

    async def clear_state(self, user_id: UserId) -> None:
        await self._redis.hdel(self._key(user_id), "state")

    def _parse_session(self, key: str, value: Any) -> Dict[str, Any]:
        raw = self._text(value)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            self._log.warning("RedisStorage: битая сессия {}: {}", key, e)
            return {}
        return data if isinstance(data, dict) else {}

    async def get_session_data(self, user_id: UserId) -> Dict[str, Any]:
        key = self._key(user_id)
        return self._parse_session(key, await self._redis.hget(key, "session"))

    async def set_session_data(self, user_id: UserId, data: Dict[str, Any]) -> None:
        """Мерж под WATCH: если сессию поменяли между чтением и записью, redis-py повторит попытку."""
        key = self._key(user_id)

        async def merge(pipe: Any) -> None:
            session = self._parse_session(key, await pipe.hget(key, "session"))
            session.update(data)
            pipe.multi()
            pipe.hset(key, "session", json.dumps(session, ensure_ascii=False))

        await self._redis.transaction(merge, key)

    async def clear_session_data(self, user_id: UserId) -> None:
        await self._redis.hdel(self._key(user_id), "session")

    async def close(self) -> None:
        closer = getattr(self._redis, "aclose", None) or getattr(self._redis, "close", None)
        if callable(closer):
            result = closer()
            if asyncio.iscoroutine(result):
                await result
