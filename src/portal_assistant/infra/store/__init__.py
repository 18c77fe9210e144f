"""Record store backends.

``build_record_store`` picks the backend named by ``store.backend``
and is called once from the application lifespan, which attaches the
store to ``app.state``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from portal_assistant.configs.config import PROJECT_ROOT
from portal_assistant.configs.system import StoreConfig

from .base import RecordStore
from .firestore import FirestoreRecordStore
from .memory import InMemoryRecordStore

logger = logging.getLogger(__name__)

__all__ = [
    "FirestoreRecordStore",
    "InMemoryRecordStore",
    "RecordStore",
    "build_record_store",
]


def build_record_store(config: StoreConfig) -> RecordStore:
    """Create the configured record store."""
    if config.backend == "firestore":
        logger.info("Using Firestore record store (project=%r)", config.firestore_project)
        return FirestoreRecordStore(project=config.firestore_project)

    if config.fixture_path:
        path = Path(config.fixture_path)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return InMemoryRecordStore.from_file(path)

    logger.warning("In-memory record store has no fixture; starting empty")
    return InMemoryRecordStore()
