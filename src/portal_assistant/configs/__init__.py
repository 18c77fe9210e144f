"""Application configuration (pydantic-settings)."""

from .config import (  # noqa: F401
    AppConfig,
    get_app_config,
    get_chat_config,
)
from .system import (  # noqa: F401
    ChatConfig,
    LLMConfig,
    LoggingConfig,
    PromptConfig,
    StoreConfig,
    TracingConfig,
)
