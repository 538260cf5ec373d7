"""Keep-all / undo-all affordance shown while changes are decorated."""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..ui.events import AffordanceVisibilityChanged, EventBus

LOGGER = logging.getLogger(__name__)

ACCEPT_COMMAND = "accept-changes"
REJECT_COMMAND = "reject-changes"


class ChangeAffordance:
    """Tracks affordance visibility and turns its actions into host messages."""

    def __init__(self, post_message: Callable[[dict[str, Any]], None], event_bus: EventBus) -> None:
        self._post = post_message
        self._bus = event_bus
        self._visible = False
        self._on_resolved: Callable[[], None] | None = None

    @property
    def visible(self) -> bool:
        return self._visible

    def set_resolved_callback(self, callback: Callable[[], None] | None) -> None:
        """Register what runs locally after either action (usually a clear)."""

        self._on_resolved = callback

    def show(self) -> None:
        self._set_visible(True)

    def hide(self) -> None:
        self._set_visible(False)

    def keep_all(self) -> None:
        self._resolve(ACCEPT_COMMAND)

    def undo_all(self) -> None:
        self._resolve(REJECT_COMMAND)

    def _resolve(self, command: str) -> None:
        if not self._visible:
            LOGGER.debug("ChangeAffordance.%s ignored: affordance hidden", command)
            return
        self._post({"command": command})
        if self._on_resolved is not None:
            self._on_resolved()

    def _set_visible(self, visible: bool) -> None:
        if visible == self._visible:
            return
        self._visible = visible
        LOGGER.debug("ChangeAffordance visible=%s", visible)
        self._bus.publish(AffordanceVisibilityChanged(visible=visible))


__all__ = ["ACCEPT_COMMAND", "REJECT_COMMAND", "ChangeAffordance"]
