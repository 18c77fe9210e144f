"""Centralized FastAPI dependency type aliases.

Import these ``*Dep`` aliases in route modules instead of writing
``Annotated[T, Depends(get_xxx)]`` everywhere.  Each alias corresponds
to a single ``get_*`` factory and can be overridden in tests via
``app.dependency_overrides[get_xxx] = ...``.
"""

from typing import Annotated

from fastapi import Depends

from portal_assistant.configs.config import get_chat_config
from portal_assistant.configs.system import ChatConfig
from portal_assistant.core.session import SessionRegistry, get_session_registry

ChatConfigDep = Annotated[ChatConfig, Depends(get_chat_config)]
SessionRegistryDep = Annotated[SessionRegistry, Depends(get_session_registry)]
