"""Change-set decoration of the rendered view."""

from .affordance import ChangeAffordance
from .change_set import ChangeSet, DecorationCategory
from .controller import DecorationController
from .mode_guard import ModeGuard
from .scheduler import AsyncioScheduler, Scheduler
from .state import DecorationState, SessionState

__all__ = [
    "AsyncioScheduler",
    "ChangeAffordance",
    "ChangeSet",
    "DecorationCategory",
    "DecorationController",
    "DecorationState",
    "ModeGuard",
    "Scheduler",
    "SessionState",
]
