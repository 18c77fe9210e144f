"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from portal_assistant import __version__
from portal_assistant.api.chat import router as chat_router
from portal_assistant.api.exceptions import register_exception_handlers
from portal_assistant.configs.config import AppConfig, get_app_config
from portal_assistant.core.completion import CompletionClient
from portal_assistant.core.session import SessionRegistry
from portal_assistant.infra.logging import setup_logging
from portal_assistant.infra.store import RecordStore, build_record_store
from portal_assistant.infra.telemetry import init_telemetry

logger = logging.getLogger(__name__)


def get_app(
    config: AppConfig | None = None,
    store: RecordStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    *store* and *http_client* replace the configured record store and the
    shared HTTP client; the caller then owns their lifecycle.
    """
    if config is None:
        config = get_app_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        record_store = store if store is not None else build_record_store(config.store)
        client = http_client if http_client is not None else httpx.AsyncClient()

        completion = CompletionClient(
            config.llm,
            client,
            prompt=config.prompt,
            max_context_chars=config.chat.max_context_chars,
        )
        app.state.record_store = record_store
        app.state.session_registry = SessionRegistry(
            record_store, completion, config.chat
        )
        if not config.llm.api_key:
            logger.warning(
                "No completion API key configured; chat messages will fail "
                "until PORTAL_LLM__API_KEY is set."
            )
        logger.info("Portal assistant started (store=%s)", config.store.backend)

        yield

        if http_client is None:
            await client.aclose()
        if store is None:
            await record_store.aclose()
        logger.info("Portal assistant stopped")

    app = FastAPI(
        title="Portal Assistant",
        description="Chat assistant for the assignment portal",
        version=__version__,
        lifespan=lifespan,
    )

    register_exception_handlers(app)
    app.include_router(chat_router)
    app.mount("/metrics", make_asgi_app())

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    init_telemetry(app, config.tracing)
    return app


def create_app() -> FastAPI:
    """Uvicorn factory: ``uvicorn portal_assistant.app:create_app --factory``."""
    config = get_app_config()
    setup_logging(config.logging)
    return get_app(config)
