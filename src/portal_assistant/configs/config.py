"""Configuration management using pydantic-settings.

**Not a singleton** — each call to ``get_app_config()`` re-reads config
from disk so that edits to the YAML files are picked up without a
restart.

Priority order (highest first):

1. Environment variables (``PORTAL_`` prefix, ``__`` for nesting)
2. ``.env`` dotenv file
3. Static YAML (``configs/config.yaml``)
4. Prompt YAML (``configs/prompt.yml``)
5. Init defaults / field defaults
6. File secrets

The completion API key is normally supplied as
``PORTAL_LLM__API_KEY``.  Its absence is not a startup error; the chat
endpoint reports a ``ConfigurationError`` when a message is sent.
"""

import logging
from pathlib import Path
from typing import Annotated, Any

import yaml
from fastapi import Depends
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .system import (
    ChatConfig,
    LLMConfig,
    LoggingConfig,
    PromptConfig,
    StoreConfig,
    TracingConfig,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

CONFIG_PY_PATH = Path(__file__).resolve()
PROJECT_ROOT = CONFIG_PY_PATH.parent.parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "configs"

STATIC_CONFIG_FILE = CONFIG_DIR / "config.yaml"
PROMPT_CONFIG_FILE = CONFIG_DIR / "prompt.yml"

DOTENV_FILE_PATH = PROJECT_ROOT / ".env"
ENV_DELIMITER = "__"
ENV_PREFIX = "PORTAL_"

DEFAULT_ENCODING = "utf-8"


# ---------------------------------------------------------------------------
# Application config (re-created on every call, not a singleton)
# ---------------------------------------------------------------------------


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        yaml_file=STATIC_CONFIG_FILE,
        yaml_file_encoding=DEFAULT_ENCODING,
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="Chat completion endpoint settings",
    )

    chat: ChatConfig = Field(
        default_factory=ChatConfig,
        description="Conversation window and context sizing",
    )

    store: StoreConfig = Field(
        default_factory=StoreConfig,
        description="Assignment/submission record store",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Root logger settings",
    )

    tracing: TracingConfig = Field(
        default_factory=TracingConfig,
        description="OpenTelemetry tracing settings",
    )

    prompt: PromptConfig = Field(
        default_factory=PromptConfig,
        description="System prompt configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            _PromptYamlSettingsSource(settings_cls),
            init_settings,
            file_secret_settings,
        )


class _PromptYamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads the prompt.yml file."""

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        if not PROMPT_CONFIG_FILE.exists():
            return {}

        try:
            with open(PROMPT_CONFIG_FILE, encoding=DEFAULT_ENCODING) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError):
            logger.warning("Could not read %s", PROMPT_CONFIG_FILE, exc_info=True)
            return {}

        if data and "system_prompt" in data:
            return {"prompt": {"system_prompt": data["system_prompt"]}}
        return {}


def get_app_config() -> AppConfig:
    """Get the application configuration.

    Re-reads ``configs/config.yaml`` and ``configs/prompt.yml`` on every
    call.
    """
    return AppConfig()


def get_chat_config(
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> ChatConfig:
    return config.chat
