"""Chat API endpoints."""

from fastapi import APIRouter, HTTPException, Response, status

from .deps import ChatConfigDep, SessionRegistryDep
from .models import (
    ContextInfo,
    HistoryResponse,
    OpenSessionRequest,
    SendMessageRequest,
    SendMessageResponse,
    SessionResponse,
)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


@router.post(
    "/sessions",
    status_code=status.HTTP_201_CREATED,
    response_model=SessionResponse,
)
async def open_session(
    body: OpenSessionRequest,
    registry: SessionRegistryDep,
) -> SessionResponse:
    """Open a chat and load the subject's assignment context.

    A degraded context (``partial`` / ``failed``) does not fail the
    request; the client decides whether to warn the user.
    """
    session = await registry.open(body.subject_id, body.role)
    return SessionResponse(
        session_id=session.session_id,
        context=ContextInfo.from_snapshot(session.snapshot),
    )


@router.post("/sessions/{session_id}/messages", response_model=SendMessageResponse)
async def send_message(
    session_id: str,
    body: SendMessageRequest,
    registry: SessionRegistryDep,
    chat_config: ChatConfigDep,
) -> SendMessageResponse:
    """Send one message and wait for the assistant's reply."""
    if len(body.message) > chat_config.max_message_length:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Message exceeds {chat_config.max_message_length} characters.",
        )
    session = registry.get(session_id)
    reply = await session.send(body.message, body.max_tokens)
    return SendMessageResponse(reply=reply, history=session.turns())


@router.get("/sessions/{session_id}/history", response_model=HistoryResponse)
async def get_history(
    session_id: str,
    registry: SessionRegistryDep,
) -> HistoryResponse:
    return HistoryResponse(history=registry.get(session_id).turns())


@router.delete(
    "/sessions/{session_id}/history", status_code=status.HTTP_204_NO_CONTENT
)
async def clear_history(session_id: str, registry: SessionRegistryDep) -> Response:
    registry.get(session_id).clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sessions/{session_id}/context", response_model=ContextInfo)
async def refresh_context(
    session_id: str,
    registry: SessionRegistryDep,
) -> ContextInfo:
    """Re-fetch the records behind the chat."""
    snapshot = await registry.get(session_id).refresh_context()
    return ContextInfo.from_snapshot(snapshot)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(session_id: str, registry: SessionRegistryDep) -> Response:
    registry.close(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
