"""Completion dispatcher — one request/response round trip per user message.

Posts the system instruction plus the bounded conversation window to an
OpenAI-compatible ``/chat/completions`` endpoint and classifies every
failure into the assistant error taxonomy where it happens.  No retry,
no streaming.
"""

import json
import logging
from typing import Any

import httpx

from portal_assistant.configs.system import LLMConfig, PromptConfig
from portal_assistant.infra.telemetry import (
    ATTR_COMPLETION_HISTORY_LEN,
    ATTR_COMPLETION_MODEL,
    ATTR_COMPLETION_STATUS_CODE,
    SPAN_COMPLETION_REQUEST,
    tracer,
)

from .context import ContextSnapshot, build_system_prompt
from .context.summarizer import DEFAULT_MAX_CONTEXT_CHARS
from .conversation import ConversationState
from .errors import ConfigurationError, TransportError, UpstreamError
from .metrics import COMPLETION_LATENCY_SECONDS, COMPLETION_REQUESTS_TOTAL
from .models import ROLE_ASSISTANT, ROLE_SYSTEM, ROLE_USER, ChatTurn

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I could not generate a response."
ERROR_BODY_PREVIEW_CHARS = 200
UNKNOWN_UPSTREAM_ERROR = "Unknown error"


def _upstream_error_message(data: Any) -> str:
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return UNKNOWN_UPSTREAM_ERROR


def _first_choice_text(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return FALLBACK_REPLY
    return content or FALLBACK_REPLY


class CompletionClient:
    """Sends chat turns to the completion endpoint.

    The ``httpx.AsyncClient`` is owned by the caller (the application
    lifespan), so one connection pool is shared by every session.
    """

    def __init__(
        self,
        config: LLMConfig,
        http_client: httpx.AsyncClient,
        prompt: PromptConfig | None = None,
        max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
    ) -> None:
        self._config = config
        self._http = http_client
        self._preamble = (prompt or PromptConfig()).system_prompt
        self._max_context_chars = max_context_chars

    def build_payload(
        self,
        snapshot: ContextSnapshot,
        history: ConversationState,
        max_tokens: int,
    ) -> dict[str, Any]:
        system = ChatTurn(
            role=ROLE_SYSTEM,
            content=build_system_prompt(
                self._preamble, snapshot, self._max_context_chars
            ),
        )
        return {
            "model": self._config.model_name,
            "messages": [t.model_dump() for t in [system, *history.snapshot()]],
            "max_tokens": max_tokens,
            "temperature": self._config.temperature,
            "top_p": self._config.top_p,
        }

    async def send(
        self,
        user_text: str,
        snapshot: ContextSnapshot,
        history: ConversationState,
        max_tokens: int | None = None,
    ) -> str:
        """Append *user_text* to *history*, ask the model, append and return
        its reply.

        Raises:
            ConfigurationError: no API key is configured; nothing is sent
                and *history* is left untouched.
            TransportError: the endpoint was unreachable or answered with
                a body that is not JSON.
            UpstreamError: the endpoint answered with a failure status.
        """
        if not self._config.api_key:
            COMPLETION_REQUESTS_TOTAL.labels(outcome="configuration_error").inc()
            raise ConfigurationError(
                "Completion API key is not configured. "
                "Please set the PORTAL_LLM__API_KEY environment variable."
            )

        history.append(ChatTurn(role=ROLE_USER, content=user_text))
        payload = self.build_payload(
            snapshot, history, max_tokens or self._config.max_tokens
        )

        with tracer.start_as_current_span(SPAN_COMPLETION_REQUEST) as span:
            span.set_attribute(ATTR_COMPLETION_MODEL, self._config.model_name)
            span.set_attribute(ATTR_COMPLETION_HISTORY_LEN, len(history))
            try:
                with COMPLETION_LATENCY_SECONDS.time():
                    response = await self._http.post(
                        self._config.endpoint,
                        json=payload,
                        headers={"Authorization": f"Bearer {self._config.api_key}"},
                        timeout=self._config.timeout.total_seconds(),
                    )
            except httpx.HTTPError as exc:
                COMPLETION_REQUESTS_TOTAL.labels(outcome="transport_error").inc()
                logger.error("Completion request failed: %s", exc)
                raise TransportError(f"Completion API error: {exc}") from exc
            span.set_attribute(ATTR_COMPLETION_STATUS_CODE, response.status_code)

        body = response.text
        try:
            data = json.loads(body)
        except ValueError:
            COMPLETION_REQUESTS_TOTAL.labels(outcome="transport_error").inc()
            preview = body[:ERROR_BODY_PREVIEW_CHARS]
            logger.error(
                "Failed to parse completion response",
                extra={
                    "status_code": response.status_code,
                    "reason": response.reason_phrase,
                    "body_preview": preview,
                },
            )
            raise TransportError(
                "Completion API error: "
                f"{response.reason_phrase or 'Failed to parse response'}",
                status_code=response.status_code,
                body=preview,
            ) from None

        if not response.is_success:
            COMPLETION_REQUESTS_TOTAL.labels(outcome="upstream_error").inc()
            message = _upstream_error_message(data)
            logger.error(
                "Completion endpoint returned %d: %s", response.status_code, message
            )
            raise UpstreamError(message, status_code=response.status_code)

        reply = _first_choice_text(data)
        history.append(ChatTurn(role=ROLE_ASSISTANT, content=reply))
        COMPLETION_REQUESTS_TOTAL.labels(outcome="ok").inc()
        return reply
