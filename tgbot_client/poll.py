"""Опросы и викторины через sendPoll.

    await bot.poll(PollType.QUIZ).question("2 + 2 = ?").add_answers("3", "4").correct_answer(1).send()
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from .enums import ParseMode, PollType
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .bot import Bot

MIN_OPEN_PERIOD = 5
MAX_OPEN_PERIOD = 600


class Poll:
    """Fluent-сборка опроса. Поля викторины (правильный ответ, пояснение) в обычный опрос не попадают."""

    def __init__(self, bot: "Bot", poll_type: PollType = PollType.REGULAR) -> None:
        self._bot = bot
        self._type = PollType(poll_type)
        self._question = ""
        self._answers: List[str] = []
        self._correct: Optional[int] = None
        self._explanation: Optional[str] = None
        self._explanation_parse_mode: Optional[ParseMode] = None
        self._anonymous: Optional[bool] = None
        self._multiple: Optional[bool] = None
        self._open_period: Optional[int] = None
        self._closed: Optional[bool] = None
        self._params: Dict[str, Any] = {}

    def question(self, text: str) -> "Poll":
        self._question = text
        return self

    def add_answers(self, *answers: str) -> "Poll":
        self._answers.extend(answers)
        return self

    def correct_answer(self, index: int) -> "Poll":
        """Индекс правильного варианта с нуля. Только для викторины."""
        self._correct = index
        return self

    def explanation(self, text: str) -> "Poll":
        self._explanation = text
        return self

    def explanation_parse_mode(self, mode: ParseMode) -> "Poll":
        self._explanation_parse_mode = ParseMode(mode)
        return self

    def is_anonymous(self, anonymous: bool = True) -> "Poll":
        self._anonymous = anonymous
        return self

    def multiple_answers(self, allow: bool = True) -> "Poll":
        self._multiple = allow
        return self

    def open_period(self, seconds: int) -> "Poll":
        """Сколько секунд опрос открыт. Вне 5..600 — берётся максимум."""
        if not MIN_OPEN_PERIOD <= seconds <= MAX_OPEN_PERIOD:
            seconds = MAX_OPEN_PERIOD
        self._open_period = seconds
        return self

    def close(self, closed: bool = True) -> "Poll":
        self._closed = closed
        return self

    def params(self, params: Dict[str, Any]) -> "Poll":
        self._params.update(params)
        return self

    def build(self, chat_id: Optional[Union[int, str]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "chat_id": chat_id if chat_id is not None else self._bot.context.chat_id,
            "question": self._question,
            "options": [{"text": answer} for answer in self._answers],
            "type": self._type.value,
        }
        if self._anonymous is not None:
            payload["is_anonymous"] = self._anonymous
        if self._open_period is not None:
            payload["open_period"] = self._open_period
        if self._closed is not None:
            payload["is_closed"] = self._closed
        if self._type is PollType.QUIZ:
            payload.update(self._quiz_params())
        elif self._multiple is not None:
            payload["allows_multiple_answers"] = self._multiple
        payload.update(self._params)
        return payload

    def _quiz_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self._correct is not None:
            if self._answers and not 0 <= self._correct < len(self._answers):
                raise ConfigurationError(
                    f"correct_answer({self._correct}): вариантов всего {len(self._answers)}"
                )
            params["correct_option_id"] = self._correct
        if self._explanation:
            params["explanation"] = self._explanation
            mode = self._explanation_parse_mode or self._bot.parse_mode
            if mode:
                params["explanation_parse_mode"] = mode.value
        return params

    async def send(self, chat_id: Optional[Union[int, str]] = None) -> Dict[str, Any]:
        """sendPoll в chat_id, по умолчанию — в текущий чат."""
        return await self._bot.call_api("sendPoll", self.build(chat_id))
