"""Перечисления: режимы парсинга, действия в чате, dice, типы обновлений, пагинация, опросы и inline-результаты."""

from enum import Enum, IntEnum


class ParseMode(str, Enum):
    """Режим разметки текста. NONE — без разметки."""

    NONE = ""
    HTML = "HTML"
    MARKDOWN = "Markdown"
    MARKDOWN_V2 = "MarkdownV2"


class ChatAction(str, Enum):
    """Статус «бот печатает / загружает ...» для sendChatAction."""

    TYPING = "typing"
    UPLOAD_PHOTO = "upload_photo"
    UPLOAD_VIDEO = "upload_video"
    RECORD_VIDEO = "record_video"
    RECORD_VOICE = "record_voice"
    UPLOAD_VOICE = "upload_voice"
    UPLOAD_DOCUMENT = "upload_document"
    CHOOSE_STICKER = "choose_sticker"
    FIND_LOCATION = "find_location"
    RECORD_VIDEO_NOTE = "record_video_note"
    UPLOAD_VIDEO_NOTE = "upload_video_note"


class MessageDice(str, Enum):
    """Анимированные эмодзи для sendDice."""

    DICE = "🎲"
    DARTS = "🎯"
    BASKETBALL = "🏀"
    FOOTBALL = "⚽"
    BOWLING = "🎳"
    CASINO = "🎰"


class UpdateType(str, Enum):
    """Ключи верхнего уровня в update."""

    MESSAGE = "message"
    EDITED_MESSAGE = "edited_message"
    CHANNEL_POST = "channel_post"
    EDITED_CHANNEL_POST = "edited_channel_post"
    INLINE_QUERY = "inline_query"
    CHOSEN_INLINE_RESULT = "chosen_inline_result"
    CALLBACK_QUERY = "callback_query"
    SHIPPING_QUERY = "shipping_query"
    PRE_CHECKOUT_QUERY = "pre_checkout_query"
    POLL = "poll"
    POLL_ANSWER = "poll_answer"
    MY_CHAT_MEMBER = "my_chat_member"
    CHAT_MEMBER = "chat_member"
    CHAT_JOIN_REQUEST = "chat_join_request"


class MessageAction(IntEnum):
    """Что делать с декларативным ответом маршрута: отправить или отредактировать."""

    SEND = 0
    EDIT_TEXT = 1
    EDIT_CAPTION = 2
    EDIT_MEDIA = 3


class PaginationMode(IntEnum):
    """ARROWS — стрелки < >, NUMBERS — окно с номерами страниц."""

    ARROWS = 0
    NUMBERS = 1


class PaginationLayout(IntEnum):
    """Раскладка навигации.

    ROW — все кнопки в одной строке.
    SPLIT — «назад/вперёд» отдельной строкой, «в начало/в конец» — следующей.
    SMART — одна строка, только если кнопок ровно две, иначе как SPLIT.
    """

    ROW = 0
    SPLIT = 1
    SMART = 2


class PaginationNumberStyle(IntEnum):
    """CLASSIC — 1, 2, 3. EMOJI — 1️⃣, 2️⃣, 3️⃣ (каждая цифра отдельным глифом)."""

    CLASSIC = 0
    EMOJI = 1


class PollType(str, Enum):
    """REGULAR — обычный опрос, QUIZ — викторина с одним правильным ответом."""

    REGULAR = "regular"
    QUIZ = "quiz"


class InlineType(str, Enum):
    """Тип результата inline-запроса (InlineQueryResult*)."""

    ARTICLE = "article"
    LOCATION = "location"
    VENUE = "venue"
    PHOTO = "photo"
    GIF = "gif"
    MPEG4_GIF = "mpeg4_gif"
    VIDEO = "video"
    AUDIO = "audio"
    VOICE = "voice"
    DOCUMENT = "document"
