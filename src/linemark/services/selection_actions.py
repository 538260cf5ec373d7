"""Selection menu flow: resolve a rendered-view selection, act on it.

Pointer release hands over the selected characters only. They are resolved
back to a source :class:`LineRange`; on a match the action menu is offered,
and invoking an action posts a ``selection-action`` message and highlights
the selected lines until the host asks for the highlights to be cleared.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..core.ranges import LineRange
from ..documents.selection_resolver import SelectionResolver, SelectionResult
from ..documents.source_document import SourceDocument
from ..ui.events import EventBus, RenderModeChanged, SelectionMenuVisibilityChanged, SelectionResolved
from ..view.node_mapper import NodeMapper
from ..view.nodes import RenderEngine, StaleNodeError, VisualNode

LOGGER = logging.getLogger(__name__)

SELECTION_ACTION_COMMAND = "selection-action"
SELECTION_ACTIONS: tuple[str, ...] = ("add-to-chat", "quick-edit")


class SelectionHighlighter:
    """Tags the nodes behind resolved line ranges with the selection tag.

    The ranges are kept so the highlight follows the view through a render
    mode switch, which replaces every node.
    """

    def __init__(
        self,
        engine: RenderEngine,
        *,
        tag: str,
        mapper: NodeMapper | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._engine = engine
        self._tag = tag
        self._mapper = mapper or NodeMapper()
        self._ranges: list[LineRange] = []
        self._highlighted: dict[int, VisualNode] = {}
        if event_bus is not None:
            event_bus.subscribe(RenderModeChanged, self._on_render_mode_changed)

    @property
    def tag(self) -> str:
        return self._tag

    @property
    def ranges(self) -> tuple[LineRange, ...]:
        return tuple(self._ranges)

    def highlighted_nodes(self) -> list[VisualNode]:
        return list(self._highlighted.values())

    def highlight(self, result: SelectionResult) -> int:
        """Highlight the lines of ``result``; return how many nodes were tagged."""

        if result.range is None:
            return 0
        if result.range not in self._ranges:
            self._ranges.append(result.range)
        return self._tag_ranges([result.range])

    def clear(self) -> None:
        for node in self._highlighted.values():
            try:
                node.remove_tag(self._tag)
            except StaleNodeError:
                continue
        self._highlighted.clear()
        self._ranges.clear()

    def _on_render_mode_changed(self, event: RenderModeChanged) -> None:
        if not self._ranges:
            return
        self._highlighted.clear()
        count = self._tag_ranges(self._ranges)
        LOGGER.debug(
            "Re-applied selection highlight to %d node(s) after %s -> %s",
            count,
            event.previous,
            event.current,
        )

    def _tag_ranges(self, ranges: list[LineRange]) -> int:
        view = self._engine.rendered_view()
        if view is None:
            return 0
        document = SourceDocument(self._engine.source_text())
        mapping = self._mapper.map(document, view.nodes())
        count = 0
        for span in ranges:
            for line_index in span.lines:
                node = mapping.node_for(line_index)
                if node is None or id(node) in self._highlighted:
                    continue
                try:
                    node.add_tag(self._tag)
                except StaleNodeError:
                    LOGGER.debug("Selection node %r vanished before highlighting", node)
                    continue
                self._highlighted[id(node)] = node
                count += 1
        return count


class SelectionActionController:
    """Turns pointer-release selections into outbound action messages."""

    def __init__(
        self,
        engine: RenderEngine,
        post_message: Callable[[dict[str, Any]], None],
        event_bus: EventBus,
        *,
        resolver: SelectionResolver | None = None,
        highlighter: SelectionHighlighter | None = None,
    ) -> None:
        self._engine = engine
        self._post = post_message
        self._bus = event_bus
        self._resolver = resolver or SelectionResolver()
        self._highlighter = highlighter
        self._current: SelectionResult | None = None
        self._menu_visible = False

    @property
    def current_selection(self) -> SelectionResult | None:
        return self._current

    @property
    def menu_visible(self) -> bool:
        return self._menu_visible

    def on_pointer_release(self, selected_text: str | None) -> SelectionResult | None:
        text = (selected_text or "").strip()
        if not text:
            self.dismiss()
            return None
        result = self._resolver.resolve(text, SourceDocument(self._engine.source_text()))
        self._bus.publish(SelectionResolved(text=text, range=result.range))
        if result.matched:
            self._current = result
            self._set_menu_visible(True)
        else:
            self._current = None
            self._set_menu_visible(False)
        return result

    def invoke(self, action: str) -> bool:
        """Send ``action`` for the current selection; ``False`` when nothing is selected."""

        if action not in SELECTION_ACTIONS:
            raise ValueError(f"Unknown selection action: {action}")
        result = self._current
        if result is None or result.range is None:
            LOGGER.debug("Selection action %s ignored: no resolved selection", action)
            return False
        self._post(
            {
                "command": SELECTION_ACTION_COMMAND,
                "action": action,
                "selectedText": result.text,
                "range": result.range.to_payload(),
            }
        )
        self._set_menu_visible(False)
        if self._highlighter is not None:
            self._highlighter.highlight(result)
        self._current = None
        return True

    def dismiss(self) -> None:
        self._set_menu_visible(False)

    def clear_highlights(self) -> None:
        if self._highlighter is not None:
            self._highlighter.clear()

    def _set_menu_visible(self, visible: bool) -> None:
        if visible == self._menu_visible:
            return
        self._menu_visible = visible
        self._bus.publish(SelectionMenuVisibilityChanged(visible=visible))


__all__ = [
    "SELECTION_ACTIONS",
    "SELECTION_ACTION_COMMAND",
    "SelectionActionController",
    "SelectionHighlighter",
]
