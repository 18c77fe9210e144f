"""Pydantic models for the chat API."""

from pydantic import BaseModel, Field

from portal_assistant.core.context import ContextSnapshot, SnapshotStatus
from portal_assistant.core.models import ChatTurn, Role

# Upper bound accepted by the API; the configured
# ``chat.max_message_length`` is enforced by the route.
CHAT_MESSAGE_MAX_LENGTH = 8192
MAX_TOKENS_LIMIT = 4096


class OpenSessionRequest(BaseModel):
    """Open a chat for a portal user."""

    subject_id: str = Field(min_length=1, description="Student or teacher user id")
    role: Role | None = Field(
        default=None,
        description="Role override; looked up from the user profile when omitted",
    )


class ContextInfo(BaseModel):
    """How much of the subject's records made it into the chat context."""

    role: Role
    status: SnapshotStatus = Field(description="complete | partial | failed")
    errors: list[str] = Field(
        default_factory=list, description="One entry per failed store query"
    )
    assignment_count: int
    submission_count: int

    @classmethod
    def from_snapshot(cls, snapshot: ContextSnapshot) -> "ContextInfo":
        return cls(
            role=snapshot.role,
            status=snapshot.status,
            errors=list(snapshot.errors),
            assignment_count=len(snapshot.assignments),
            submission_count=len(snapshot.submissions),
        )


class SessionResponse(BaseModel):
    session_id: str = Field(description="Chat session id (chat_xxx)")
    context: ContextInfo


class SendMessageRequest(BaseModel):
    message: str = Field(
        min_length=1,
        max_length=CHAT_MESSAGE_MAX_LENGTH,
        description="User message",
    )
    max_tokens: int | None = Field(
        default=None,
        ge=1,
        le=MAX_TOKENS_LIMIT,
        description="Response token cap; the configured default when omitted",
    )


class SendMessageResponse(BaseModel):
    reply: str = Field(description="Assistant reply")
    history: list[ChatTurn] = Field(description="Retained conversation window")


class HistoryResponse(BaseModel):
    history: list[ChatTurn]


class ErrorResponse(BaseModel):
    """Body of every error response."""

    detail: str = Field(description="Technical error message")
    code: str = Field(description="Stable error code, e.g. UPSTREAM_ERROR")
    hint: str = Field(description="User-facing guidance")
