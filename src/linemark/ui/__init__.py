"""UI-facing plumbing shared by the editor surface."""

from .events import Event, EventBus

__all__ = ["Event", "EventBus"]
