"""Capture and restore the rendering mode around a decoration session."""

from __future__ import annotations

import logging

from ..ui.events import EventBus, RenderModeChanged
from ..view.nodes import RenderEngine
from .state import DecorationState, SessionState

LOGGER = logging.getLogger(__name__)


class ModeGuard:
    """Owns the :class:`DecorationState` of one view and its session mode.

    ``begin`` starts a session only when none is active, so an apply nested in
    a running session never overwrites the mode saved by the first one.
    ``end`` restores that mode and releases it.
    """

    def __init__(
        self,
        engine: RenderEngine,
        *,
        decoration_mode: str | None = "ir",
        event_bus: EventBus | None = None,
        state: DecorationState | None = None,
    ) -> None:
        self._engine = engine
        self._decoration_mode = decoration_mode
        self._bus = event_bus
        self.state = state or DecorationState()

    @property
    def session(self) -> SessionState:
        return self.state.session

    def begin(self) -> bool:
        """Start a session if idle; return ``True`` when a mode was captured."""

        if self.state.saved_mode is not None:
            return False
        current = self._engine.current_mode()
        self.state.saved_mode = current
        LOGGER.debug("Decoration session started; saved mode=%s", current)
        if self._decoration_mode and current != self._decoration_mode:
            self._switch(current, self._decoration_mode)
        return True

    def end(self) -> None:
        """Restore the saved mode (if it changed) and release it."""

        saved = self.state.saved_mode
        self.state.reset()
        if saved is None:
            return
        current = self._engine.current_mode()
        if current != saved:
            self._switch(current, saved)
        LOGGER.debug("Decoration session ended; restored mode=%s", saved)

    def _switch(self, previous: str, target: str) -> None:
        self._engine.set_mode(target)
        if self._bus is not None:
            self._bus.publish(RenderModeChanged(previous=previous, current=target))


__all__ = ["ModeGuard"]
