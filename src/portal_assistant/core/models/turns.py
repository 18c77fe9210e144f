"""Chat turns and their LangChain message equivalents."""

from typing import Literal

from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
)
from pydantic import BaseModel, ConfigDict, Field

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_SYSTEM = "system"

TurnRole = Literal["user", "assistant", "system"]


class ChatTurn(BaseModel):
    """One message in a conversation, tagged by speaker role."""

    model_config = ConfigDict(frozen=True)

    role: TurnRole = Field(description="Message sender role")
    content: str = Field(description="Message content")


def turn_to_message(turn: ChatTurn) -> BaseMessage:
    if turn.role == ROLE_USER:
        return HumanMessage(content=turn.content)
    if turn.role == ROLE_ASSISTANT:
        return AIMessage(content=turn.content)
    return SystemMessage(content=turn.content)


def message_to_turn(message: BaseMessage) -> ChatTurn:
    """Map a LangChain message onto the wire roles of the completion API.

    Anything that is neither human nor AI is treated as a system turn.
    """
    if isinstance(message, HumanMessage):
        role = ROLE_USER
    elif isinstance(message, AIMessage):
        role = ROLE_ASSISTANT
    else:
        role = ROLE_SYSTEM
    return ChatTurn(role=role, content=str(message.content))
