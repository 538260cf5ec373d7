"""Host message channel: inbound command routing and outbound posting."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping

from ..ui.events import EventBus, MessagePosted

_LOGGER = logging.getLogger(__name__)

MessageHandler = Callable[[Mapping[str, Any]], None]


class MessageBridge:
    """Dispatches host messages by their ``command`` field.

    Messages are handled strictly in arrival order on the caller's thread.
    A malformed payload is logged and dropped so one bad message never takes
    the surface down.
    """

    def __init__(self, post: Callable[[dict[str, Any]], None], event_bus: EventBus) -> None:
        self._post = post
        self._bus = event_bus
        self._handlers: Dict[str, MessageHandler] = {}

    def register(self, command: str, handler: MessageHandler) -> None:
        if command in self._handlers:
            raise ValueError(f"Handler already registered for command {command!r}")
        self._handlers[command] = handler

    def commands(self) -> tuple[str, ...]:
        return tuple(sorted(self._handlers))

    def post(self, message: dict[str, Any]) -> None:
        _LOGGER.debug("Posting %s to host", message.get("command"))
        self._post(message)
        self._bus.publish(MessagePosted(message=message))

    def dispatch(self, message: Any) -> bool:
        """Route ``message``; return ``True`` when a handler ran successfully."""

        if not isinstance(message, Mapping):
            _LOGGER.warning("Ignoring non-mapping host message: %r", type(message).__name__)
            return False
        command = message.get("command")
        handler = self._handlers.get(command) if isinstance(command, str) else None
        if handler is None:
            _LOGGER.debug("No handler for host command %r", command)
            return False
        try:
            handler(message)
        except (TypeError, ValueError) as exc:
            _LOGGER.warning("Dropping malformed %r message: %s", command, exc)
            return False
        return True


__all__ = ["MessageBridge", "MessageHandler"]
