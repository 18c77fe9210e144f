"""Tests for the completion dispatcher and its error classification."""

import httpx
import pytest
from conftest import TEST_API_KEY, TEST_ENDPOINT, ScriptedEndpoint, completion_body

from portal_assistant.configs.system import LLMConfig, PromptConfig
from portal_assistant.core.completion import FALLBACK_REPLY, CompletionClient
from portal_assistant.core.context import ContextSnapshot
from portal_assistant.core.conversation import ConversationState
from portal_assistant.core.errors import (
    ConfigurationError,
    TransportError,
    UpstreamError,
)

PREAMBLE = "You are a test assistant."


def _snapshot() -> ContextSnapshot:
    return ContextSnapshot(subject_id="s1", role="student")


def _client(config: LLMConfig, endpoint: ScriptedEndpoint) -> CompletionClient:
    return CompletionClient(
        config, endpoint.client(), prompt=PromptConfig(system_prompt=PREAMBLE)
    )


class TestCompletionSuccess:
    @pytest.mark.asyncio
    async def test_payload_and_history(self, llm_config, endpoint):
        endpoint.respond = lambda _: httpx.Response(
            200, json=completion_body("Two assignments are due.")
        )
        history = ConversationState()

        reply = await _client(llm_config, endpoint).send(
            "What is due?", _snapshot(), history
        )

        assert reply == "Two assignments are due."
        [request] = endpoint.requests
        assert str(request.url) == TEST_ENDPOINT
        assert request.headers["Authorization"] == f"Bearer {TEST_API_KEY}"

        payload = endpoint.payloads[0]
        assert payload["model"] == llm_config.model_name
        assert payload["max_tokens"] == 200
        assert payload["temperature"] == 0.7
        assert payload["top_p"] == 0.9
        system, user = payload["messages"]
        assert system["role"] == "system"
        assert system["content"].startswith(PREAMBLE + "\n[STUDENT CONTEXT]")
        assert user == {"role": "user", "content": "What is due?"}

        assert [(t.role, t.content) for t in history.snapshot()] == [
            ("user", "What is due?"),
            ("assistant", "Two assignments are due."),
        ]

    @pytest.mark.asyncio
    async def test_max_tokens_override(self, llm_config, endpoint):
        await _client(llm_config, endpoint).send(
            "hi", _snapshot(), ConversationState(), max_tokens=50
        )
        assert endpoint.payloads[0]["max_tokens"] == 50

    @pytest.mark.asyncio
    async def test_history_window_is_sent(self, llm_config, endpoint):
        client = _client(llm_config, endpoint)
        history = ConversationState(max_turns=6)
        for i in range(4):
            await client.send(f"q{i}", _snapshot(), history)

        last = endpoint.payloads[-1]["messages"]
        # system + at most six turns, ending with the newest user message
        assert len(last) == 7
        assert last[-1] == {"role": "user", "content": "q3"}
        assert len(history) == 6
        assert history.snapshot()[0].content == "q1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [{"choices": []}, {"choices": [{"message": {"content": ""}}]}, {}],
    )
    async def test_fallback_reply(self, llm_config, endpoint, body):
        endpoint.respond = lambda _: httpx.Response(200, json=body)
        history = ConversationState()
        reply = await _client(llm_config, endpoint).send("hi", _snapshot(), history)

        assert reply == FALLBACK_REPLY
        assert history.snapshot()[-1].content == FALLBACK_REPLY


class TestCompletionErrors:
    @pytest.mark.asyncio
    async def test_missing_api_key(self, endpoint):
        history = ConversationState()
        client = _client(LLMConfig(api_key="", endpoint=TEST_ENDPOINT), endpoint)

        with pytest.raises(ConfigurationError) as exc_info:
            await client.send("hi", _snapshot(), history)

        assert exc_info.value.code == "CONFIGURATION_ERROR"
        assert endpoint.requests == []
        assert len(history) == 0

    @pytest.mark.asyncio
    async def test_upstream_message_is_verbatim(self, llm_config, endpoint):
        endpoint.respond = lambda _: httpx.Response(
            429, json={"error": {"message": "Rate limit reached for requests"}}
        )
        history = ConversationState()

        with pytest.raises(UpstreamError) as exc_info:
            await _client(llm_config, endpoint).send("hi", _snapshot(), history)

        assert str(exc_info.value) == "Rate limit reached for requests"
        assert exc_info.value.status_code == 429
        # the user turn stays, no assistant turn is added
        assert [t.role for t in history.snapshot()] == ["user"]

    @pytest.mark.asyncio
    async def test_upstream_without_message(self, llm_config, endpoint):
        endpoint.respond = lambda _: httpx.Response(500, json={"oops": True})

        with pytest.raises(UpstreamError) as exc_info:
            await _client(llm_config, endpoint).send(
                "hi", _snapshot(), ConversationState()
            )
        assert str(exc_info.value) == "Unknown error"

    @pytest.mark.asyncio
    async def test_non_json_body(self, llm_config, endpoint):
        endpoint.respond = lambda _: httpx.Response(502, text="<html>" * 100)

        with pytest.raises(TransportError) as exc_info:
            await _client(llm_config, endpoint).send(
                "hi", _snapshot(), ConversationState()
            )

        assert exc_info.value.status_code == 502
        assert len(exc_info.value.body) == 200

    @pytest.mark.asyncio
    async def test_unreachable_endpoint(self, llm_config, endpoint):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        endpoint.respond = refuse
        with pytest.raises(TransportError) as exc_info:
            await _client(llm_config, endpoint).send(
                "hi", _snapshot(), ConversationState()
            )
        assert exc_info.value.code == "TRANSPORT_ERROR"
        assert "connection refused" in str(exc_info.value)
