"""Shared test helpers and stub classes.

Import from here instead of duplicating these classes in individual test files.
"""

from __future__ import annotations

from typing import Callable

from linemark.ui.events import (
    AffordanceVisibilityChanged,
    DecorationRetryScheduled,
    DecorationsAbandoned,
    DecorationsApplied,
    DecorationsCleared,
    Event,
    EventBus,
    MessagePosted,
    RenderModeChanged,
    SelectionMenuVisibilityChanged,
    SelectionResolved,
)

_RECORDED_EVENTS = (
    AffordanceVisibilityChanged,
    DecorationRetryScheduled,
    DecorationsAbandoned,
    DecorationsApplied,
    DecorationsCleared,
    MessagePosted,
    RenderModeChanged,
    SelectionMenuVisibilityChanged,
    SelectionResolved,
)


class ManualScheduler:
    """Deterministic scheduler: callbacks only run when the test says so."""

    def __init__(self) -> None:
        self.pending: list[tuple[float, Callable[[], None]]] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self.pending.append((delay, callback))

    def run_next(self) -> None:
        _, callback = self.pending.pop(0)
        callback()

    def run_all(self) -> int:
        """Run pending callbacks, including ones they schedule; return the count."""

        count = 0
        while self.pending:
            self.run_next()
            count += 1
        return count


class RecordingBus:
    """Subscribes to every surface event and keeps them in order."""

    def __init__(self, bus: EventBus) -> None:
        self.events: list[Event] = []
        for event_type in _RECORDED_EVENTS:
            bus.subscribe(event_type, self.events.append)

    def of_type(self, event_type: type) -> list:
        return [event for event in self.events if isinstance(event, event_type)]


class StaticEngine:
    """Render engine over a hand-built view; mode changes do not re-render."""

    def __init__(self, text: str, view, *, mode: str = "ir") -> None:
        self._text = text
        self._view = view
        self._mode = mode
        self.mode_history: list[str] = [mode]

    def rendered_view(self):
        return self._view

    def source_text(self) -> str:
        return self._text

    def set_source(self, text: str) -> None:
        self._text = text

    def current_mode(self) -> str:
        return self._mode

    def set_mode(self, mode: str) -> None:
        self._mode = mode
        self.mode_history.append(mode)


def node_with_text(view, text: str):
    """Return the first node of ``view`` whose text equals ``text``."""

    for node in view.nodes():
        if node.get_text() == text:
            return node
    raise AssertionError(f"no node with text {text!r}")


def all_tags(view) -> set[str]:
    tags: set[str] = set()
    for node in view.nodes():
        tags.update(node.tags)
    return tags
