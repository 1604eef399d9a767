"""
Тесты ApiClient.

Покрывают:
- успешный ответ и ошибки Bot API (ok=false, не JSON)
- сериализацию полей формы и загрузку LocalFile
- скачивание файла
"""

import pytest
from aioresponses import aioresponses

from tgbot_client import ApiClient, LocalFile, TelegramApiError
from tgbot_client.api import _form_value

TOKEN = "123:ABC"
API = f"https://api.telegram.org/bot{TOKEN}/"
FILES = f"https://api.telegram.org/file/bot{TOKEN}/"


class TestApiClient:
    def test_urls(self) -> None:
        api = ApiClient(TOKEN, base_url="http://localhost:8081/")
        assert api.api_url == f"http://localhost:8081/bot{TOKEN}/"
        assert api.file_url == f"http://localhost:8081/file/bot{TOKEN}/"

    @pytest.mark.parametrize(
        "kwargs",
        [{"token": ""}, {"token": TOKEN, "timeout": 0}, {"token": TOKEN, "connect_timeout": -1}],
    )
    def test_invalid_config(self, kwargs) -> None:
        with pytest.raises(ValueError):
            ApiClient(**kwargs)

    def test_form_values(self) -> None:
        assert _form_value(True) == "true"
        assert _form_value(False) == "false"
        assert _form_value(42) == "42"
        assert _form_value({"inline_keyboard": [[{"text": "Да"}]]}) == '{"inline_keyboard": [[{"text": "Да"}]]}'

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        with aioresponses() as m:
            m.post(API + "sendMessage", payload={"ok": True, "result": {"message_id": 5}})
            async with ApiClient(TOKEN) as api:
                response = await api.call_api("sendMessage", {"chat_id": 1, "text": "hi", "reply_markup": None})

        assert response == {"ok": True, "result": {"message_id": 5}}

    @pytest.mark.asyncio
    async def test_api_error(self) -> None:
        with aioresponses() as m:
            m.post(
                API + "sendMessage",
                status=400,
                payload={"ok": False, "error_code": 400, "description": "Bad Request: chat not found"},
            )
            async with ApiClient(TOKEN) as api:
                with pytest.raises(TelegramApiError) as exc:
                    await api.call_api("sendMessage", {"chat_id": 1, "text": "hi"})

        assert exc.value.error_code == 400
        assert exc.value.description == "Bad Request: chat not found"
        assert exc.value.method == "sendMessage"
        assert exc.value.parameters == {"chat_id": 1, "text": "hi"}

    @pytest.mark.asyncio
    async def test_ok_false_with_200(self) -> None:
        with aioresponses() as m:
            m.post(API + "getMe", payload={"ok": False, "description": "Unauthorized", "error_code": 401})
            async with ApiClient(TOKEN) as api:
                with pytest.raises(TelegramApiError) as exc:
                    await api.call_api("getMe")

        assert exc.value.error_code == 401

    @pytest.mark.asyncio
    async def test_not_json(self) -> None:
        with aioresponses() as m:
            m.post(API + "getMe", status=502, body="Bad Gateway")
            async with ApiClient(TOKEN) as api:
                with pytest.raises(TelegramApiError) as exc:
                    await api.call_api("getMe")

        assert exc.value.error_code == 502
        assert exc.value.description == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_upload_local_file(self, tmp_path) -> None:
        photo = tmp_path / "cat.jpg"
        photo.write_bytes(b"\xff\xd8\xff")
        with aioresponses() as m:
            m.post(API + "sendPhoto", payload={"ok": True, "result": {"message_id": 6}})
            async with ApiClient(TOKEN) as api:
                response = await api.call_api("sendPhoto", {"chat_id": 1, "photo": LocalFile(str(photo))})

        assert response["result"]["message_id"] == 6
        assert LocalFile(str(photo)).name == "cat.jpg"

    @pytest.mark.asyncio
    async def test_download_file(self, tmp_path) -> None:
        target = tmp_path / "doc.pdf"
        with aioresponses() as m:
            m.get(FILES + "documents/file_1.pdf", body=b"%PDF-1.4")
            async with ApiClient(TOKEN) as api:
                path = await api.download_file("documents/file_1.pdf", str(target))

        assert path == str(target)
        assert target.read_bytes() == b"%PDF-1.4"

    @pytest.mark.asyncio
    async def test_download_failure(self, tmp_path) -> None:
        with aioresponses() as m:
            m.get(FILES + "missing.pdf", status=404)
            async with ApiClient(TOKEN) as api:
                with pytest.raises(TelegramApiError):
                    await api.download_file("missing.pdf", str(tmp_path / "x"))
