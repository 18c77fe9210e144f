"""Assistant error taxonomy.

Each failure is classified where it happens.  ``code`` is stable and
machine-readable; ``hint`` is the sentence shown to the portal user.
The API layer maps these onto HTTP responses in
``portal_assistant.api.exceptions``.
"""

from __future__ import annotations


class AssistantError(Exception):
    """Base class for every failure surfaced by the assistant."""

    code = "ASSISTANT_ERROR"
    hint = "Please try again."


class ConfigurationError(AssistantError):
    """Raised when the completion API credential is not configured."""

    code = "CONFIGURATION_ERROR"
    hint = (
        "Please configure the completion API key "
        "(PORTAL_LLM__API_KEY environment variable)."
    )


class TransportError(AssistantError):
    """Raised when the completion endpoint cannot be reached or its
    response body is not valid JSON."""

    code = "TRANSPORT_ERROR"
    hint = "There was an issue reaching the AI service. Please try again."

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamError(AssistantError):
    """Raised when the completion endpoint reports a failure status."""

    code = "UPSTREAM_ERROR"
    hint = "There was an issue with the AI service. Please try again."

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BusyError(AssistantError):
    """Raised when a session already has a request in flight."""

    code = "BUSY"
    hint = "Please wait for the previous reply before sending another message."


class SessionNotFoundError(AssistantError):
    """Raised for an unknown or closed chat session id."""

    code = "SESSION_NOT_FOUND"
    hint = "This chat has expired. Please open a new chat."


class SubjectNotFoundError(AssistantError):
    """Raised when no user profile exists for the requested subject."""

    code = "SUBJECT_NOT_FOUND"
    hint = "No portal user matches this id."
