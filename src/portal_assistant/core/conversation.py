"""Bounded in-memory conversation history."""

from collections.abc import Sequence

from langchain_core.chat_history import BaseChatMessageHistory
from langchain_core.messages import BaseMessage

from .models import ChatTurn, message_to_turn, turn_to_message

DEFAULT_MAX_TURNS = 6  # three user/assistant exchanges


class ConversationState(BaseChatMessageHistory):
    """Sliding window over the most recent turns of one chat.

    Holds at most ``max_turns`` messages.  Every mutation evicts from the
    front until the window is back within bound, so the retained turns
    are always the newest ones in their original order.
    """

    def __init__(self, max_turns: int = DEFAULT_MAX_TURNS) -> None:
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.max_turns = max_turns
        self._messages: list[BaseMessage] = []

    @property
    def messages(self) -> list[BaseMessage]:  # type: ignore[override]
        return list(self._messages)

    def add_messages(self, messages: Sequence[BaseMessage]) -> None:
        self._messages.extend(messages)
        overflow = len(self._messages) - self.max_turns
        if overflow > 0:
            del self._messages[:overflow]

    def append(self, turn: ChatTurn) -> None:
        self.add_message(turn_to_message(turn))

    def clear(self) -> None:
        self._messages = []

    def snapshot(self) -> list[ChatTurn]:
        """Return the retained turns, oldest first."""
        return [message_to_turn(m) for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)
