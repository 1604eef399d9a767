"""Подбор аргументов хендлера по его параметрам.

Порядок для каждого параметра (первое совпадение):
    1. имя есть в именованных аргументах маршрута ({user_id} из шаблона, next у middleware);
    2. тип — Bot, UpdateContext, FSMContext, Chat, User или Message: берётся у текущего Bot;
    3. тип — не встроенный класс, и он есть в контейнере (duck typing: has/get);
    4. следующий позиционный аргумент (%s, %n, группы регулярки);
    5. значение по умолчанию;
    6. None, если тип допускает None (или аннотации нет);
    7. иначе ResolutionError.

Разбор сигнатуры кешируется по ключу хендлера: словарь на процесс + внешний MetadataCache, если задан.
"""

import functools
import hashlib
import inspect
import pickle
import typing
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from .cache import MetadataCache
from .context import UpdateContext
from .exceptions import ContextLookupError, ResolutionError
from .fsm import FSMContext
from .types import Chat, Message, User

if TYPE_CHECKING:
    from .bot import Bot

CACHE_TTL = 86400
CACHE_PREFIX = "tg_refl_"

_BUILTIN_TYPES = (int, float, str, bool, bytes, list, dict, tuple, set, frozenset)
_MISSING = object()


@dataclass(frozen=True)
class ParamSpec:
    """Описание одного параметра хендлера."""

    name: str
    type: Optional[type] = None
    type_name: Optional[str] = None
    is_builtin: bool = False
    allows_null: bool = True
    has_default: bool = False
    default: Any = None
    keyword_only: bool = False


class Handler:
    """Хендлер + ключ кеша + (необязательно) готовый список ParamSpec.

    Если params переданы явно, сигнатура не разбирается вовсе. key=None (builtin, лямбда без
    позиций в коде) — общий кеш не используется.
    """

    __slots__ = ("func", "key", "params", "local_meta")

    def __init__(
        self,
        func: Callable[..., Any],
        params: Optional[Sequence[ParamSpec]] = None,
        key: Optional[str] = None,
    ) -> None:
        if not callable(func):
            raise TypeError(f"handler must be callable, got {type(func).__name__}")
        self.func = func
        self.key: Optional[str] = key or handler_key(func)
        self.params: Optional[Tuple[ParamSpec, ...]] = tuple(params) if params is not None else None
        # разбор сигнатуры для хендлера без ключа: живёт только в этом объекте
        self.local_meta: Optional[List[ParamSpec]] = None

    @classmethod
    def wrap(cls, func: Any) -> "Handler":
        return func if isinstance(func, cls) else cls(func)

    @property
    def name(self) -> str:
        return handler_name(self.func)

    def __repr__(self) -> str:
        return f"Handler({self.name})"


def _owner(func: Any) -> type:
    # у classmethod __self__ уже класс
    owner = func.__self__
    return owner if inspect.isclass(owner) else type(owner)


def handler_name(func: Any) -> str:
    if inspect.ismethod(func):
        return f"{_owner(func).__qualname__}.{func.__name__}"
    if isinstance(func, functools.partial):
        return f"partial({handler_name(func.func)})"
    return getattr(func, "__qualname__", None) or type(func).__qualname__


def _lambda_column(code: Any) -> Optional[int]:
    """Правая колонка тела лямбды: отличает две лямбды на одной строке. До Python 3.11 позиций нет."""
    positions = getattr(code, "co_positions", None)
    if positions is None:
        return None
    columns = [col for line, _, col, _ in positions() if col is not None and line == code.co_firstlineno]
    return max(columns) if columns else None


def handler_key(func: Any) -> Optional[str]:
    """Стабильный ключ кеша метаданных или None, если у хендлера нет устойчивой идентичности.

    Метод (и classmethod) — класс + имя; функция — файл + строка + qualname, у лямбды ещё и колонка;
    partial — ключ исходной функции + привязанные аргументы; объект с __call__ — его класс.
    С None резолвер разбирает сигнатуру сам и не делит результат с другими хендлерами.
    """
    if inspect.ismethod(func):
        owner = _owner(func)
        return f"{CACHE_PREFIX}{owner.__module__}.{owner.__qualname__}::{func.__name__}"
    if isinstance(func, functools.partial):
        inner = handler_key(func.func)
        if inner is None:
            return None
        bound = ",".join(sorted(func.keywords))
        defaults = ",".join(f"{k}={func.keywords[k]!r}" for k in sorted(func.keywords))
        digest = hashlib.sha1(defaults.encode("utf-8")).hexdigest()[:12]
        return f"{inner}|partial:{len(func.args)}:{bound}:{digest}"
    if inspect.isclass(func):
        return f"{CACHE_PREFIX}{func.__module__}.{func.__qualname__}::__init__"
    code = getattr(func, "__code__", None)
    if code is not None:
        key = f"{CACHE_PREFIX}{code.co_filename}:{code.co_firstlineno}:{func.__qualname__}"
        if func.__name__ == "<lambda>":
            column = _lambda_column(code)
            if column is None:
                return None
            key = f"{key}:{column}"
        return key
    call = getattr(type(func), "__call__", None)
    if inspect.isfunction(call):
        owner = type(func)
        return f"{CACHE_PREFIX}{owner.__module__}.{owner.__qualname__}::__call__"
    # builtin и прочие объекты без своего кода
    return None


def _unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """Optional[X] -> (X, True). Прочие Union -> (None, допускает ли None)."""
    if typing.get_origin(annotation) is typing.Union:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        nullable = len(args) != len(typing.get_args(annotation))
        if len(args) == 1:
            return args[0], nullable
        return None, nullable
    return annotation, annotation is None or annotation is type(None)


def _type_name(annotation: Any) -> Optional[str]:
    if annotation is inspect.Parameter.empty:
        return None
    if isinstance(annotation, str):
        return annotation
    return getattr(annotation, "__qualname__", None) or repr(annotation)


def introspect(func: Callable[..., Any]) -> List[ParamSpec]:
    """Разбирает сигнатуру в список ParamSpec. *args и **kwargs пропускаются."""
    target = func
    while isinstance(target, functools.partial):
        target = target.func
    if inspect.isclass(target):
        target = target.__init__
    elif not (inspect.isfunction(target) or inspect.ismethod(target)):
        target = getattr(target, "__call__", target)
    try:
        hints = typing.get_type_hints(target)
    except (NameError, TypeError):
        hints = {}
    specs: List[ParamSpec] = []
    for param in inspect.signature(func).parameters.values():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(param.name, param.annotation)
        has_default = param.default is not inspect.Parameter.empty
        if annotation is inspect.Parameter.empty:
            resolved, allows_null = None, True
        else:
            resolved, allows_null = _unwrap_optional(annotation)
        declared = resolved if isinstance(resolved, type) else None
        specs.append(ParamSpec(
            name=param.name,
            type=declared,
            type_name=_type_name(resolved if resolved is not None else annotation),
            is_builtin=declared is not None and declared in _BUILTIN_TYPES,
            allows_null=allows_null,
            has_default=has_default,
            default=param.default if has_default else None,
            keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
        ))
    return specs


class DependencyResolver:
    """Один на роутер. Контейнер и кеш можно подменить в любой момент."""

    def __init__(
        self,
        container: Optional[Any] = None,
        cache: Optional[MetadataCache] = None,
        *,
        log: Optional[Any] = None,
    ) -> None:
        self._container = container
        self._cache = cache
        self._runtime: Dict[str, List[ParamSpec]] = {}
        self._log = log if log is not None else logger

    def set_container(self, container: Any) -> None:
        self._container = container

    def set_cache(self, cache: MetadataCache) -> None:
        self._cache = cache

    def _introspect(self, func: Callable[..., Any]) -> List[ParamSpec]:
        return introspect(func)

    def metadata(self, handler: Handler) -> List[ParamSpec]:
        if handler.params is not None:
            return list(handler.params)
        key = handler.key
        if key is None:
            if handler.local_meta is None:
                handler.local_meta = self._introspect(handler.func)
            return handler.local_meta
        cached = self._runtime.get(key)
        if cached is not None:
            return cached
        if self._cache is not None and self._cache.has(key):
            meta = self._cache.get(key)
            self._runtime[key] = meta
            return meta
        meta = self._introspect(handler.func)
        self._runtime[key] = meta
        if self._cache is not None:
            try:
                self._cache.set(key, meta, CACHE_TTL)
            except (pickle.PicklingError, TypeError, AttributeError) as e:
                # дефолт или тип не сериализуются, живём на runtime-кеше
                self._log.warning("metadata cache: {} не сохранён: {}", handler.name, e)
        return meta

    def _system_value(self, declared: type, bot: "Bot") -> Any:
        if issubclass(declared, UpdateContext):
            return bot.context
        if issubclass(declared, FSMContext):
            return FSMContext(bot)
        if issubclass(declared, Chat):
            return bot.get_chat()
        if issubclass(declared, User):
            return bot.get_user()
        if issubclass(declared, Message):
            return bot.get_message()
        if isinstance(bot, declared):
            return bot
        return _MISSING

    def _container_value(self, declared: type) -> Any:
        container = self._container
        if container is None:
            return _MISSING
        try:
            if container.has(declared):
                return container.get(declared)
        except Exception as e:
            # ошибка контейнера значит «не нашли», идём дальше по порядку
            self._log.debug("container: {} недоступен: {}", declared, e)
        return _MISSING

    def resolve(
        self,
        handler: Any,
        bot: "Bot",
        args: Optional[Dict[str, Any]] = None,
        positional: Optional[Sequence[Any]] = None,
    ) -> List[Any]:
        """Значения для параметров хендлера в порядке объявления."""
        handler = Handler.wrap(handler)
        args = args or {}
        remaining = list(positional or [])
        values: List[Any] = []
        for spec in self.metadata(handler):
            if spec.name in args:
                values.append(args[spec.name])
                continue
            declared = spec.type
            if declared is not None:
                try:
                    value = self._system_value(declared, bot)
                except (ContextLookupError, TypeError):
                    value = _MISSING
                if value is not _MISSING:
                    values.append(value)
                    continue
                if not spec.is_builtin:
                    value = self._container_value(declared)
                    if value is not _MISSING:
                        values.append(value)
                        continue
            if remaining:
                values.append(remaining.pop(0))
                continue
            if spec.has_default:
                values.append(spec.default)
                continue
            if spec.allows_null:
                values.append(None)
                continue
            raise ResolutionError(spec.name, spec.type_name, handler.name)
        return values

    async def invoke(
        self,
        handler: Any,
        bot: "Bot",
        args: Optional[Dict[str, Any]] = None,
        positional: Optional[Sequence[Any]] = None,
    ) -> Any:
        """resolve + вызов. Корутины дожидается, обычные функции вызывает как есть."""
        handler = Handler.wrap(handler)
        values = self.resolve(handler, bot, args, positional)
        call_args: List[Any] = []
        call_kwargs: Dict[str, Any] = {}
        for spec, value in zip(self.metadata(handler), values):
            if spec.keyword_only:
                call_kwargs[spec.name] = value
            else:
                call_args.append(value)
        result = handler.func(*call_args, **call_kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result
