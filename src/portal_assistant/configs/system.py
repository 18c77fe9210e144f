from datetime import timedelta
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant for an assignment management system. "
    "Be concise, direct, and brief in your responses. \n"
    "Keep responses under 100 words unless the user specifically asks for "
    "more detail.\n"
    "Use the provided context about assignments and submissions to answer "
    "questions.\n"
    "If you don't have relevant information, politely say so.\n"
    "Focus on actionable insights and key information."
)


class LLMConfig(BaseModel):
    """Configuration for the OpenAI-compatible chat completion endpoint."""

    api_key: str = Field(
        default="",
        description="Bearer credential for the completion endpoint",
    )
    endpoint: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="Full URL of the chat completion endpoint",
    )
    model_name: str = Field(
        default="gpt-3.5-turbo", description="Model identifier sent upstream"
    )
    temperature: float = Field(
        default=0.7, description="Sampling temperature for model responses"
    )
    top_p: float = Field(
        default=0.9, description="Top-p sampling parameter for model responses"
    )
    max_tokens: int = Field(
        default=200, description="Default cap on tokens in a single response"
    )
    timeout: timedelta = Field(
        default_factory=lambda: timedelta(seconds=60),
        description="HTTP timeout for one completion request. "
        "YAML may use seconds as int, e.g. timeout: 30.",
    )


class ChatConfig(BaseModel):
    """Configuration for chat sessions."""

    max_history_turns: int = Field(
        default=6,
        ge=1,
        description="Maximum retained conversation turns (6 = 3 exchanges)",
    )
    max_context_chars: int = Field(
        default=4000,
        ge=64,
        description="Upper bound on the summarized record context in the prompt",
    )
    max_message_length: int = Field(
        default=2000, description="Maximum length of a single user message"
    )


class StoreConfig(BaseModel):
    """Configuration for the assignment/submission record store."""

    backend: Literal["firestore", "memory"] = Field(
        default="memory", description="Record store implementation"
    )
    firestore_project: str = Field(
        default="", description="GCP project hosting the Firestore database"
    )
    fixture_path: str = Field(
        default="",
        description="YAML/JSON file used to seed the in-memory store",
    )


class LoggingConfig(BaseModel):
    """Root logger configuration."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=True, description="Emit JSON lines instead of coloured text"
    )


class TracingConfig(BaseModel):
    """OpenTelemetry tracing configuration."""

    enabled: bool = Field(default=False, description="Enable OTLP span export")
    endpoint: str = Field(default="", description="OTLP HTTP traces endpoint")
    service_name: str = Field(
        default="portal-assistant", description="service.name resource attribute"
    )
    sample_rate: float = Field(
        default=1.0, ge=0.0, le=1.0, description="Root span sampling ratio"
    )
    excluded_urls: list[str] = Field(
        default_factory=lambda: ["/health", "/metrics"],
        description="Paths skipped by the FastAPI instrumentation",
    )


class PromptConfig(BaseModel):
    """System prompt configuration."""

    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="Persona preamble placed before the record context",
    )
