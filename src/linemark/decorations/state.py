"""Per-view decoration state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .change_set import ChangeSet


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass(slots=True)
class DecorationState:
    """Decoration bookkeeping for one rendered view.

    A session is active while ``saved_mode`` holds the mode captured when it
    began. ``generation`` only ever grows; every apply and clear bumps it so
    deferred work scheduled earlier can tell it has been superseded.
    """

    current_change_set: ChangeSet | None = None
    saved_mode: str | None = None
    generation: int = 0

    @property
    def session(self) -> SessionState:
        return SessionState.ACTIVE if self.saved_mode is not None else SessionState.IDLE

    def next_generation(self) -> int:
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def reset(self) -> None:
        """Drop the change set and saved mode; the generation keeps counting."""

        self.current_change_set = None
        self.saved_mode = None


__all__ = ["DecorationState", "SessionState"]
