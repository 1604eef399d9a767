"""
Общие фикстуры тестов.

- api: подмена ApiClient, записывает вызовы call_api
- make_update_*: сырые update в формате Bot API
- make_bot: Bot над подменным api
"""

from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from tgbot_client import Bot, UpdateContext

USER_ID = 111
CHAT_ID = 222


def message_update(
    text: Optional[str] = None,
    *,
    update_id: int = 1,
    user_id: int = USER_ID,
    chat_id: int = CHAT_ID,
    message_id: int = 10,
    **fields: Any,
) -> Dict[str, Any]:
    message: Dict[str, Any] = {
        "message_id": message_id,
        "date": 1700000000,
        "chat": {"id": chat_id, "type": "private"},
        "from": {"id": user_id, "is_bot": False, "first_name": "Иван", "last_name": "Петров"},
    }
    if text is not None:
        message["text"] = text
        if text.startswith("/"):
            message["entities"] = [{"type": "bot_command", "offset": 0, "length": len(text.split()[0])}]
    message.update(fields)
    return {"update_id": update_id, "message": message}


def callback_update(
    data: str,
    *,
    update_id: int = 2,
    user_id: int = USER_ID,
    chat_id: int = CHAT_ID,
    message_id: int = 20,
) -> Dict[str, Any]:
    return {
        "update_id": update_id,
        "callback_query": {
            "id": "cbq-1",
            "from": {"id": user_id, "is_bot": False, "first_name": "Иван"},
            "data": data,
            "message": {
                "message_id": message_id,
                "chat": {"id": chat_id, "type": "private"},
                "text": "кнопки",
            },
        },
    }


def inline_update(query: str, *, update_id: int = 3, user_id: int = USER_ID) -> Dict[str, Any]:
    return {
        "update_id": update_id,
        "inline_query": {
            "id": "iq-1",
            "from": {"id": user_id, "is_bot": False, "first_name": "Иван"},
            "query": query,
            "offset": "",
        },
    }


@pytest.fixture
def api() -> MagicMock:
    """Подмена ApiClient: call_api — AsyncMock, ответ как у успешного вызова."""
    mock = MagicMock()
    mock.call_api = AsyncMock(return_value={"ok": True, "result": {"message_id": 99}})
    mock.download_file = AsyncMock(side_effect=lambda remote, path: path)
    mock.close = AsyncMock()
    mock.file_url = "https://api.telegram.org/file/botTOKEN/"
    return mock


@pytest.fixture
def make_bot(api: MagicMock):
    def factory(update: Dict[str, Any], **kwargs: Any) -> Bot:
        return Bot(api, UpdateContext.from_update(update), **kwargs)

    return factory


def api_calls(api: MagicMock, method: Optional[str] = None):
    """Список (method, params) вызовов call_api, по желанию только одного метода."""
    calls = [(c.args[0], c.args[1] if len(c.args) > 1 else {}) for c in api.call_api.call_args_list]
    if method is None:
        return calls
    return [params for name, params in calls if name == method]
