"""Composition root wiring the engine pieces to one rendered view."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Mapping

from .decorations.affordance import ChangeAffordance
from .decorations.change_set import ChangeSet
from .decorations.controller import DecorationController
from .decorations.mode_guard import ModeGuard
from .decorations.scheduler import AsyncioScheduler, Scheduler
from .documents.selection_resolver import SelectionResult
from .services.bridge import MessageBridge
from .services.selection_actions import SelectionActionController, SelectionHighlighter
from .services.settings import EditorSettings, SettingsStore
from .ui.events import EventBus
from .utils.logging import configure_from_settings
from .view.node_mapper import NodeMapper
from .view.nodes import RenderEngine

LOGGER = logging.getLogger(__name__)


class EditorSurface:
    """Keeps one rendered view in sync with its source buffer and the host.

    Inbound host commands:

    * ``apply-decorations`` with ``decorations: {added, deleted, modified}``
    * ``clear-decorations``
    * ``update`` with ``content``; a changed buffer ends the decoration session
    * ``clear-selection-highlights``
    * ``get-current-content``; replies with ``current-content``
    """

    def __init__(
        self,
        engine: RenderEngine,
        post_message: Callable[[dict[str, Any]], None],
        *,
        scheduler: Scheduler,
        settings: EditorSettings | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.settings = settings or EditorSettings()
        self.engine = engine
        self.event_bus = event_bus or EventBus()
        self.bridge = MessageBridge(post_message, self.event_bus)

        mapper = NodeMapper(
            exact_prefix_chars=self.settings.exact_prefix_chars,
            positional_prefix_chars=self.settings.positional_prefix_chars,
        )
        self.affordance = ChangeAffordance(self.bridge.post, self.event_bus)
        self.guard = ModeGuard(
            engine,
            decoration_mode=self.settings.decoration_mode,
            event_bus=self.event_bus,
        )
        self.decorations = DecorationController(
            engine,
            scheduler,
            event_bus=self.event_bus,
            guard=self.guard,
            affordance=self.affordance,
            mapper=mapper,
            tag_prefix=self.settings.tag_prefix,
            retry_attempts=self.settings.retry_attempts,
            retry_interval=self.settings.retry_interval,
        )
        self.affordance.set_resolved_callback(self.decorations.clear)
        self.selection = SelectionActionController(
            engine,
            self.bridge.post,
            self.event_bus,
            highlighter=SelectionHighlighter(
                engine,
                tag=self.settings.selection_tag,
                mapper=mapper,
                event_bus=self.event_bus,
            ),
        )

        self.bridge.register("apply-decorations", self._on_apply_decorations)
        self.bridge.register("clear-decorations", self._on_clear_decorations)
        self.bridge.register("update", self._on_update)
        self.bridge.register("clear-selection-highlights", self._on_clear_selection_highlights)
        self.bridge.register("get-current-content", self._on_get_current_content)

    # ------------------------------------------------------------------
    # Host entry points
    # ------------------------------------------------------------------

    def handle_message(self, message: Mapping[str, Any]) -> bool:
        return self.bridge.dispatch(message)

    def on_pointer_release(self, selected_text: str | None) -> SelectionResult | None:
        return self.selection.on_pointer_release(selected_text)

    def invoke_selection_action(self, action: str) -> bool:
        return self.selection.invoke(action)

    def keep_all(self) -> None:
        self.affordance.keep_all()

    def undo_all(self) -> None:
        self.affordance.undo_all()

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    def _on_apply_decorations(self, message: Mapping[str, Any]) -> None:
        self.decorations.apply(ChangeSet.from_payload(message.get("decorations")))

    def _on_clear_decorations(self, _message: Mapping[str, Any]) -> None:
        self.decorations.clear()

    def _on_update(self, message: Mapping[str, Any]) -> None:
        content = message.get("content")
        if not isinstance(content, str):
            raise TypeError("update messages require string content")
        if content == self.engine.source_text():
            LOGGER.debug("update: content unchanged, skipping")
            return
        self.decorations.clear()
        self.selection.clear_highlights()
        self.engine.set_source(content)

    def _on_clear_selection_highlights(self, _message: Mapping[str, Any]) -> None:
        self.selection.clear_highlights()

    def _on_get_current_content(self, _message: Mapping[str, Any]) -> None:
        self.bridge.post({"command": "current-content", "content": self.engine.source_text()})


def bootstrap(
    engine: RenderEngine,
    post_message: Callable[[dict[str, Any]], None],
    *,
    scheduler: Scheduler | None = None,
    settings_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    configure_logging: bool = True,
) -> EditorSurface:
    """Load settings, configure logging and build an :class:`EditorSurface`."""

    settings = SettingsStore(settings_path).load(overrides=overrides)
    if configure_logging:
        log_path = configure_from_settings(settings)
        LOGGER.info("Logging to %s", log_path)
    return EditorSurface(
        engine,
        post_message,
        scheduler=scheduler or AsyncioScheduler(),
        settings=settings,
    )


__all__ = ["EditorSurface", "bootstrap"]
