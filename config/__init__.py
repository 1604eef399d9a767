"""
Конфигурация бота: переменные окружения из .env.

Использование:
    from config import BOT_TOKEN, ADMIN_IDS
"""

import os

from dotenv import load_dotenv

load_dotenv()

BOT_TOKEN = os.getenv("BOT_TOKEN")
BOT_API_URL = os.getenv("BOT_API_URL", "https://api.telegram.org")
POLL_TIMEOUT = int(os.getenv("POLL_TIMEOUT", "20"))
STORAGE_PATH = os.getenv("STORAGE_PATH", "storage/sessions")
# пусто: FileStorage по STORAGE_PATH
REDIS_URL = os.getenv("REDIS_URL") or None
ADMIN_IDS = [int(x) for x in os.getenv("ADMIN_IDS", "").replace(" ", "").split(",") if x]
