"""Domain models for the assistant.

Re-exports every public symbol so imports like
``from portal_assistant.core.models import ChatTurn`` keep working.
"""

from .records import *  # noqa: F401, F403
from .turns import *  # noqa: F401, F403
