"""Record context for the chat: snapshot model, fetcher and summarizer."""

from .fetcher import ContextFetcher  # noqa: F401
from .snapshot import *  # noqa: F401, F403
from .summarizer import (  # noqa: F401
    build_system_prompt,
    summarize_context,
    truncate_context,
)
