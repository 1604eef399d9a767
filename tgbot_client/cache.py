"""Кеш метаданных хендлеров. Нужен только для скорости: без кеша поведение то же.

Интерфейс синхронный (get/set/has + TTL): резолвер зовёт его из синхронного кода маршрутизации.
"""

import hashlib
import os
import pickle
import time
from typing import Any, Dict, Optional, Protocol, Tuple


class MetadataCache(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None: ...

    def has(self, key: str) -> bool: ...


class MemoryCache:
    """Словарь в памяти процесса. ttl=None — без срока."""

    def __init__(self) -> None:
        self._data: Dict[str, Tuple[Any, Optional[float]]] = {}

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._data.get(key)
        if entry is None:
            return default
        value, expires_at = entry
        if expires_at is not None and expires_at <= time.time():
            self._data.pop(key, None)
            return default
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        self._data[key] = (value, time.time() + ttl if ttl else None)

    def has(self, key: str) -> bool:
        _missing = object()
        return self.get(key, _missing) is not _missing

    def clear(self) -> None:
        self._data.clear()


class FileCache:
    """Кеш в каталоге: одна запись — один pickle-файл (значение + время истечения). Переживает перезапуск."""

    def __init__(self, path: str) -> None:
        self._path = path
        os.makedirs(path, exist_ok=True)

    def _file(self, key: str) -> str:
        name = hashlib.md5(key.encode("utf-8")).hexdigest()
        return os.path.join(self._path, f"{name}.cache")

    def _read(self, key: str) -> Optional[Tuple[Any, Optional[float]]]:
        path = self._file(key)
        try:
            with open(path, "rb") as fh:
                value, expires_at = pickle.load(fh)
        except FileNotFoundError:
            return None
        except (pickle.UnpicklingError, EOFError, ValueError):
            # битый файл считается промахом
            os.remove(path)
            return None
        if expires_at is not None and expires_at <= time.time():
            os.remove(path)
            return None
        return value, expires_at

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._read(key)
        return default if entry is None else entry[0]

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        expires_at = time.time() + ttl if ttl else None
        tmp = self._file(key) + ".tmp"
        with open(tmp, "wb") as fh:
            pickle.dump((value, expires_at), fh)
        os.replace(tmp, self._file(key))

    def has(self, key: str) -> bool:
        return self._read(key) is not None

    def clear(self) -> None:
        for name in os.listdir(self._path):
            if name.endswith(".cache"):
                os.remove(os.path.join(self._path, name))
