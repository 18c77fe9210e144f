"""Tests for chat sessions: busy guard, registry lookups and role resolution."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from conftest import completion_body, make_assignment

from portal_assistant.configs.system import ChatConfig
from portal_assistant.core.completion import CompletionClient
from portal_assistant.core.errors import (
    BusyError,
    SessionNotFoundError,
    SubjectNotFoundError,
    UpstreamError,
)
from portal_assistant.core.models import UserProfile
from portal_assistant.core.session import (
    STATE_AWAITING_RESPONSE,
    STATE_IDLE,
    SessionRegistry,
)
from portal_assistant.infra.store import FirestoreRecordStore, InMemoryRecordStore


def _registry(store, llm_config, http_client, **chat) -> SessionRegistry:
    return SessionRegistry(
        store, CompletionClient(llm_config, http_client), ChatConfig(**chat)
    )


class TestSessionRegistry:
    @pytest.mark.asyncio
    async def test_open_resolves_role_from_profile(
        self, record_store, llm_config, endpoint
    ):
        registry = _registry(record_store, llm_config, endpoint.client())

        session = await registry.open("t1")

        assert session.session_id.startswith("chat_")
        assert session.snapshot.role == "teacher"
        assert session.state == STATE_IDLE
        assert registry.get(session.session_id) is session
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_explicit_role_skips_profile_lookup(
        self, record_store, llm_config, endpoint
    ):
        registry = _registry(record_store, llm_config, endpoint.client())
        session = await registry.open("unknown-user", role="student")
        assert session.snapshot.role == "student"

    @pytest.mark.asyncio
    async def test_unknown_subject(self, record_store, llm_config, endpoint):
        registry = _registry(record_store, llm_config, endpoint.client())
        with pytest.raises(SubjectNotFoundError):
            await registry.open("nobody")
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self, record_store, llm_config, endpoint):
        registry = _registry(record_store, llm_config, endpoint.client())
        first = await registry.open("s1")
        second = await registry.open("s1")

        await first.send("hello")

        assert first.session_id != second.session_id
        assert len(first.turns()) == 2
        assert second.turns() == []

    @pytest.mark.asyncio
    async def test_close_and_unknown_id(self, record_store, llm_config, endpoint):
        registry = _registry(record_store, llm_config, endpoint.client())
        session = await registry.open("s1")

        registry.close(session.session_id)

        with pytest.raises(SessionNotFoundError):
            registry.get(session.session_id)
        with pytest.raises(SessionNotFoundError):
            registry.close(session.session_id)

    @pytest.mark.asyncio
    async def test_history_bound_from_config(self, record_store, llm_config, endpoint):
        registry = _registry(
            record_store, llm_config, endpoint.client(), max_history_turns=2
        )
        session = await registry.open("s1")
        await session.send("one")
        await session.send("two")
        assert [t.content for t in session.turns()] == ["two", "ok"]


class TestChatSession:
    @pytest.mark.asyncio
    async def test_second_send_while_busy_is_rejected(self, record_store, llm_config):
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow(request: httpx.Request) -> httpx.Response:
            started.set()
            await release.wait()
            return httpx.Response(200, json=completion_body("done"))

        client = httpx.AsyncClient(transport=httpx.MockTransport(slow))
        registry = _registry(record_store, llm_config, client)
        session = await registry.open("s1")

        first = asyncio.create_task(session.send("first"))
        await started.wait()
        assert session.busy
        assert session.state == STATE_AWAITING_RESPONSE

        with pytest.raises(BusyError):
            await session.send("second")

        release.set()
        assert await first == "done"
        assert session.state == STATE_IDLE
        assert [t.content for t in session.turns()] == ["first", "done"]

    @pytest.mark.asyncio
    async def test_returns_to_idle_after_error(
        self, record_store, llm_config, endpoint
    ):
        endpoint.respond = lambda _: httpx.Response(
            500, json={"error": {"message": "boom"}}
        )
        registry = _registry(record_store, llm_config, endpoint.client())
        session = await registry.open("s1")

        with pytest.raises(UpstreamError):
            await session.send("hi")

        assert session.state == STATE_IDLE
        endpoint.respond = lambda _: httpx.Response(200, json=completion_body("ok"))
        assert await session.send("again") == "ok"

    @pytest.mark.asyncio
    async def test_refresh_context_sees_new_records(
        self, record_store, llm_config, endpoint
    ):
        registry = _registry(record_store, llm_config, endpoint.client())
        session = await registry.open("s1")
        assert len(session.snapshot.assignments) == 3

        record_store.add(make_assignment("a4", "Poster", due="2025-04-01"))
        await session.send("before refresh")
        assert "Pending Assignments: 1" in endpoint.payloads[-1]["messages"][0]["content"]

        snapshot = await session.refresh_context()

        assert len(snapshot.assignments) == 4
        await session.send("after refresh")
        assert "Pending Assignments: 2" in endpoint.payloads[-1]["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_clear(self, record_store, llm_config, endpoint):
        registry = _registry(record_store, llm_config, endpoint.client())
        session = await registry.open("s1")
        await session.send("hi")
        session.clear()
        assert session.turns() == []

    @pytest.mark.asyncio
    async def test_clear_while_busy_is_rejected(self, record_store, llm_config):
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow(request: httpx.Request) -> httpx.Response:
            started.set()
            await release.wait()
            return httpx.Response(200, json=completion_body("done"))

        client = httpx.AsyncClient(transport=httpx.MockTransport(slow))
        session = await _registry(record_store, llm_config, client).open("s1")

        pending = asyncio.create_task(session.send("first"))
        await started.wait()

        with pytest.raises(BusyError):
            session.clear()

        release.set()
        await pending
        assert [(t.role, t.content) for t in session.turns()] == [
            ("user", "first"),
            ("assistant", "done"),
        ]
        session.clear()
        assert session.turns() == []


class _BrokenProfileStore(InMemoryRecordStore):
    """Returns user documents that fail validation, like a bad ``users`` entry."""

    async def get_user_profile(self, user_id):
        return UserProfile.model_validate({"id": user_id, "role": "admin"})


class TestRoleResolution:
    @pytest.mark.asyncio
    async def test_invalid_profile_is_subject_not_found(self, llm_config, endpoint):
        registry = _registry(_BrokenProfileStore(), llm_config, endpoint.client())

        with pytest.raises(SubjectNotFoundError):
            await registry.open("u1")
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_firestore_profile_without_role(self, llm_config, endpoint):
        document = MagicMock()
        snap = MagicMock(id="u1", exists=True)
        snap.to_dict.return_value = {"name": "Ada"}
        document.get = AsyncMock(return_value=snap)
        client = MagicMock()
        client.collection.return_value.document.return_value = document
        store = FirestoreRecordStore(client=client)

        registry = _registry(store, llm_config, endpoint.client())

        with pytest.raises(SubjectNotFoundError):
            await registry.open("u1")
