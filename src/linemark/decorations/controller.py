"""Apply and clear change-set decorations on the rendered view.

Every ``apply`` maps the change set against the *current* rendered view with
a fresh :class:`NodeMapper` run. When the engine has no view yet the attempt
is retried on the scheduler a bounded number of times; each retry carries
the generation token of the apply that scheduled it and does nothing once a
later ``apply`` or ``clear`` has moved the generation on.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Mapping

from ..documents.source_document import SourceDocument
from ..ui.events import (
    DecorationRetryScheduled,
    DecorationsAbandoned,
    DecorationsApplied,
    DecorationsCleared,
    EventBus,
)
from ..view.node_mapper import NodeMapper
from ..view.nodes import RenderedView, RenderEngine, StaleNodeError, VisualNode
from .affordance import ChangeAffordance
from .change_set import ChangeSet, DecorationCategory
from .mode_guard import ModeGuard
from .scheduler import Scheduler
from .state import DecorationState, SessionState

LOGGER = logging.getLogger(__name__)

DEFAULT_RETRY_ATTEMPTS = 5
DEFAULT_RETRY_INTERVAL = 0.2
DEFAULT_TAG_PREFIX = "linemark"


class DecorationController:
    """Owns the tags placed on view nodes for the active change set."""

    def __init__(
        self,
        engine: RenderEngine,
        scheduler: Scheduler,
        *,
        event_bus: EventBus,
        guard: ModeGuard | None = None,
        affordance: ChangeAffordance | None = None,
        mapper: NodeMapper | None = None,
        tag_prefix: str = DEFAULT_TAG_PREFIX,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        retry_interval: float = DEFAULT_RETRY_INTERVAL,
    ) -> None:
        self._engine = engine
        self._scheduler = scheduler
        self._bus = event_bus
        self._guard = guard or ModeGuard(engine, event_bus=event_bus)
        self._affordance = affordance
        self._mapper = mapper or NodeMapper()
        self._tag_prefix = tag_prefix
        self._retry_attempts = max(0, int(retry_attempts))
        self._retry_interval = retry_interval
        self._category_tags = tuple(category.tag(tag_prefix) for category in DecorationCategory)
        self._tagged: dict[int, tuple[VisualNode, set[str]]] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> DecorationState:
        return self._guard.state

    @property
    def session(self) -> SessionState:
        return self._guard.session

    @property
    def category_tags(self) -> tuple[str, ...]:
        return self._category_tags

    def tagged_nodes(self) -> list[VisualNode]:
        return [node for node, _ in self._tagged.values()]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def apply(self, change_set: ChangeSet | Mapping[str, Any]) -> int | None:
        """Decorate ``change_set``; return its generation, or ``None`` if empty."""

        changes = ChangeSet.from_payload(change_set)
        if changes.is_empty:
            LOGGER.debug("DecorationController.apply: empty change set, skipping")
            return None

        self._untag_all()
        if self._affordance is not None:
            self._affordance.hide()
        self._guard.begin()
        generation = self.state.next_generation()
        self.state.current_change_set = changes
        LOGGER.debug(
            "DecorationController.apply: generation=%d, lines=%d",
            generation,
            len(changes.touched()),
        )
        self._attempt(generation, changes, 0)
        return generation

    def clear(self) -> None:
        """Remove every category tag and end the session; idempotent."""

        if self.session is SessionState.IDLE and not self._tagged and self.state.current_change_set is None:
            return
        self._untag_all()
        if self._affordance is not None:
            self._affordance.hide()
        generation = self.state.next_generation()
        self._guard.end()
        LOGGER.debug("DecorationController.clear: generation=%d", generation)
        self._bus.publish(DecorationsCleared(generation=generation))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _attempt(self, generation: int, changes: ChangeSet, attempt: int) -> None:
        if not self.state.is_current(generation):
            LOGGER.debug(
                "Dropping stale decoration attempt: generation=%d, current=%d",
                generation,
                self.state.generation,
            )
            return
        view = self._engine.rendered_view()
        if view is None:
            if attempt < self._retry_attempts:
                LOGGER.debug("Rendered view not ready; retry %d scheduled", attempt + 1)
                self._scheduler.call_later(
                    self._retry_interval,
                    partial(self._attempt, generation, changes, attempt + 1),
                )
                self._bus.publish(DecorationRetryScheduled(generation=generation, attempt=attempt + 1))
            else:
                LOGGER.debug("Rendered view never became ready; giving up on generation %d", generation)
                self._bus.publish(DecorationsAbandoned(generation=generation))
            return
        self._decorate(generation, changes, view)

    def _decorate(self, generation: int, changes: ChangeSet, view: RenderedView) -> None:
        document = SourceDocument(self._engine.source_text())
        mapping = self._mapper.map(document, view.nodes())
        tagged: list[int] = []
        skipped: list[int] = []
        for line_index in changes.touched():
            if line_index < 0 or line_index >= len(document):
                skipped.append(line_index)
                continue
            node = mapping.node_for(line_index)
            if node is None:
                skipped.append(line_index)
                continue
            tags = [category.tag(self._tag_prefix) for category in changes.categories_for(line_index)]
            if self._tag(node, tags):
                tagged.append(line_index)
            else:
                skipped.append(line_index)

        if tagged and self._affordance is not None:
            self._affordance.show()
        if skipped:
            LOGGER.debug("Skipped %d line(s) without a usable node: %s", len(skipped), skipped)
        self._bus.publish(
            DecorationsApplied(
                generation=generation,
                tagged_lines=tuple(tagged),
                skipped_lines=tuple(skipped),
            )
        )

    def _tag(self, node: VisualNode, tags: list[str]) -> bool:
        try:
            for tag in tags:
                node.add_tag(tag)
                self._track(node, tag)
        except StaleNodeError:
            LOGGER.debug("Node %r vanished before tagging; skipping", node)
            return False
        parent = node.get_parent()
        if parent is not None and parent.is_wrapper:
            try:
                for tag in tags:
                    parent.add_tag(tag)
                    self._track(parent, tag)
            except StaleNodeError:
                LOGGER.debug("Wrapper %r vanished before tagging; skipping", parent)
        return True

    def _track(self, node: VisualNode, tag: str) -> None:
        entry = self._tagged.get(id(node))
        if entry is None:
            self._tagged[id(node)] = (node, {tag})
        else:
            entry[1].add(tag)

    def _untag_all(self) -> None:
        for node, tags in self._tagged.values():
            for tag in tags:
                try:
                    node.remove_tag(tag)
                except StaleNodeError:
                    break
        self._tagged.clear()
        view = self._engine.rendered_view()
        if view is None:
            return
        for node in view.nodes():
            for tag in self._category_tags:
                if node.has_tag(tag):
                    try:
                        node.remove_tag(tag)
                    except StaleNodeError:
                        break


__all__ = [
    "DEFAULT_RETRY_ATTEMPTS",
    "DEFAULT_RETRY_INTERVAL",
    "DEFAULT_TAG_PREFIX",
    "DecorationController",
]
