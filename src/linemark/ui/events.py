"""Event bus infrastructure for decoupled surface communication.

Components publish what happened (decorations applied, affordance shown,
selection resolved) and the host-facing layers subscribe, so the engine never
holds direct references to toolbar or menu widgets.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar
from weakref import WeakMethod

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from typing import DefaultDict

    from ..core.ranges import LineRange

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for all surface events."""

    pass


# =============================================================================
# Decoration Events
# =============================================================================


@dataclass(slots=True)
class DecorationsApplied(Event):
    """Emitted after a change set was mapped onto the rendered view.

    Attributes:
        generation: Generation token of the apply call that tagged the nodes.
        tagged_lines: Line indices whose node received at least one tag.
        skipped_lines: Line indices with no node, out of range, or stale.
    """

    generation: int
    tagged_lines: tuple[int, ...]
    skipped_lines: tuple[int, ...]


@dataclass(slots=True)
class DecorationsCleared(Event):
    """Emitted when a decoration session ends."""

    generation: int


@dataclass(slots=True)
class DecorationRetryScheduled(Event):
    """Emitted when apply is deferred because the view is not ready yet."""

    generation: int
    attempt: int


@dataclass(slots=True)
class DecorationsAbandoned(Event):
    """Emitted when the retry ceiling is reached without a rendered view."""

    generation: int


@dataclass(slots=True)
class RenderModeChanged(Event):
    """Emitted when the mode guard switches or restores the rendering mode."""

    previous: str
    current: str


@dataclass(slots=True)
class AffordanceVisibilityChanged(Event):
    """Emitted when the keep-all / undo-all affordance is shown or hidden."""

    visible: bool


# =============================================================================
# Selection Events
# =============================================================================


@dataclass(slots=True)
class SelectionResolved(Event):
    """Emitted for every non-empty pointer-release selection.

    Attributes:
        text: The trimmed selected text.
        range: The resolved source span, or ``None`` when nothing matched.
    """

    text: str
    range: LineRange | None


@dataclass(slots=True)
class SelectionMenuVisibilityChanged(Event):
    """Emitted when the selection action menu is shown or hidden."""

    visible: bool


# =============================================================================
# Host Channel Events
# =============================================================================


@dataclass(slots=True)
class MessagePosted(Event):
    """Emitted for every outbound message sent to the host."""

    message: dict[str, Any]


# High-frequency event types that should not log each publish
_QUIET_EVENT_TYPES: set[type] = {SelectionMenuVisibilityChanged}


class EventBus(Generic[E]):
    """A typed publish-subscribe event bus.

    Handlers are invoked synchronously, in registration order, on the thread
    that publishes. Bound methods are held weakly so a dropped subscriber
    never keeps its owner alive.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: DefaultDict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Register ``handler`` for events of exactly ``event_type``."""
        self._handlers[event_type].append(_HandlerRef.create(handler))
        logger.debug(
            "Subscribed handler %s to event type %s",
            _handler_name(handler),
            event_type.__name__,
        )

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Remove the first registration of ``handler``; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if handlers is None:
            return
        for i, handler_ref in enumerate(handlers):
            if handler_ref.matches(handler):
                handlers.pop(i)
                return

    def publish(self, event: E) -> None:
        """Broadcast ``event``; a failing handler is logged and skipped."""
        event_type = type(event)
        handlers = self._handlers.get(event_type)
        is_quiet = event_type in _QUIET_EVENT_TYPES

        if not handlers:
            return

        if not is_quiet:
            logger.debug("Publishing %s to %d handler(s)", event_type.__name__, len(handlers))

        dead_refs: list[_HandlerRef] = []
        for handler_ref in list(handlers):
            handler = handler_ref.resolve()
            if handler is None:
                dead_refs.append(handler_ref)
                continue
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %s raised exception for event %s",
                    _handler_name(handler),
                    event_type.__name__,
                )

        for handler_ref in dead_refs:
            for i, live_ref in enumerate(handlers):
                if live_ref is handler_ref:
                    handlers.pop(i)
                    break

    def clear(self) -> None:
        self._handlers.clear()

    def handler_count(self, event_type: type[E] | None = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())


class _HandlerRef:
    """Weak reference for bound methods, strong reference otherwise."""

    __slots__ = ("_ref", "_is_weak")

    def __init__(self, handler_ref: Any, is_weak: bool) -> None:
        self._ref = handler_ref
        self._is_weak = is_weak

    @classmethod
    def create(cls, handler: Handler) -> _HandlerRef:
        if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
            try:
                return cls(WeakMethod(handler), is_weak=True)
            except TypeError:
                pass
        return cls(handler, is_weak=False)

    def resolve(self) -> Handler | None:
        if not self._is_weak:
            return self._ref
        return self._ref()

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        if resolved is None:
            return False
        return resolved == handler


def _handler_name(handler: Handler) -> str:
    if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
        return f"{type(handler.__self__).__name__}.{handler.__func__.__name__}"
    if hasattr(handler, "__name__"):
        return handler.__name__
    return repr(handler)


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "DecorationsApplied",
    "DecorationsCleared",
    "DecorationRetryScheduled",
    "DecorationsAbandoned",
    "RenderModeChanged",
    "AffordanceVisibilityChanged",
    "SelectionResolved",
    "SelectionMenuVisibilityChanged",
    "MessagePosted",
]
