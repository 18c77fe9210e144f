"""Chat sessions — one per open chat window.

A ``ChatSession`` owns the conversation window and the context snapshot
of one chat and guards the completion call with an idle/busy state: a
second message sent while a reply is pending is rejected with
``BusyError`` instead of interleaving turns in the history.

``SessionRegistry`` opens, looks up and closes sessions.  Sessions live
in process memory only.
"""

import logging

from fastapi import Request
from pydantic import ValidationError

from portal_assistant.configs.system import ChatConfig
from portal_assistant.infra.id_utils import CHAT_SESSION_PREFIX, generate_id
from portal_assistant.infra.store import RecordStore

from .completion import CompletionClient
from .context import ContextFetcher, ContextSnapshot
from .conversation import ConversationState
from .errors import BusyError, SessionNotFoundError, SubjectNotFoundError
from .metrics import BUSY_REJECTIONS_TOTAL
from .models import ChatTurn, Role

logger = logging.getLogger(__name__)

STATE_IDLE = "idle"
STATE_AWAITING_RESPONSE = "awaiting_response"


class ChatSession:
    def __init__(
        self,
        session_id: str,
        snapshot: ContextSnapshot,
        fetcher: ContextFetcher,
        completion: CompletionClient,
        history: ConversationState,
    ) -> None:
        self.session_id = session_id
        self.snapshot = snapshot
        self.history = history
        self._fetcher = fetcher
        self._completion = completion
        self._state = STATE_IDLE

    @property
    def state(self) -> str:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state == STATE_AWAITING_RESPONSE

    def _reject_if_busy(self) -> None:
        if self.busy:
            BUSY_REJECTIONS_TOTAL.inc()
            raise BusyError(
                f"Session {self.session_id} is still waiting for a reply."
            )

    async def send(self, text: str, max_tokens: int | None = None) -> str:
        """Send one user message and return the assistant's reply.

        Raises:
            BusyError: a previous message of this session is still
                awaiting its reply.
        """
        self._reject_if_busy()

        self._state = STATE_AWAITING_RESPONSE
        try:
            return await self._completion.send(
                text, self.snapshot, self.history, max_tokens
            )
        finally:
            self._state = STATE_IDLE

    async def refresh_context(self) -> ContextSnapshot:
        """Re-fetch the records behind this chat."""
        self.snapshot = await self._fetcher.fetch(
            self.snapshot.subject_id, self.snapshot.role
        )
        return self.snapshot

    def clear(self) -> None:
        """Forget the conversation.

        Raises:
            BusyError: a reply is pending and would land in the emptied
                history.
        """
        self._reject_if_busy()
        self.history.clear()

    def turns(self) -> list[ChatTurn]:
        return self.history.snapshot()


class SessionRegistry:
    """Creates and tracks the open chat sessions of this process."""

    def __init__(
        self,
        store: RecordStore,
        completion: CompletionClient,
        config: ChatConfig,
    ) -> None:
        self._store = store
        self._fetcher = ContextFetcher(store)
        self._completion = completion
        self._config = config
        self._sessions: dict[str, ChatSession] = {}

    async def resolve_role(self, subject_id: str) -> Role:
        try:
            profile = await self._store.get_user_profile(subject_id)
        except ValidationError as exc:
            logger.warning("Invalid user profile for %s: %s", subject_id, exc)
            raise SubjectNotFoundError(
                f"User profile for {subject_id!r} has no valid role."
            ) from exc
        if profile is None:
            raise SubjectNotFoundError(f"No user profile for {subject_id!r}.")
        return profile.role

    async def open(self, subject_id: str, role: Role | None = None) -> ChatSession:
        """Open a chat for *subject_id*.

        The role is read from the subject's profile unless given.  The
        context snapshot is fetched once here and reused for every
        message until ``refresh_context``.
        """
        if role is None:
            role = await self.resolve_role(subject_id)

        snapshot = await self._fetcher.fetch(subject_id, role)
        session = ChatSession(
            session_id=generate_id(CHAT_SESSION_PREFIX),
            snapshot=snapshot,
            fetcher=self._fetcher,
            completion=self._completion,
            history=ConversationState(self._config.max_history_turns),
        )
        self._sessions[session.session_id] = session
        logger.info(
            "Opened %s for %s %s (context %s)",
            session.session_id,
            role,
            subject_id,
            snapshot.status,
        )
        return session

    def get(self, session_id: str) -> ChatSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(
                f"Unknown chat session {session_id!r}."
            ) from None

    def close(self, session_id: str) -> None:
        self.get(session_id)
        del self._sessions[session_id]
        logger.info("Closed %s", session_id)

    def __len__(self) -> int:
        return len(self._sessions)


def get_session_registry(request: Request) -> SessionRegistry:
    """FastAPI dependency — reads from ``app.state``."""
    return request.app.state.session_registry
