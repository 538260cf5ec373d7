"""Tests for the event bus."""

import gc

from linemark.ui.events import AffordanceVisibilityChanged, DecorationsCleared, EventBus


def test_publish_reaches_handlers_in_order() -> None:
    bus = EventBus()
    seen = []
    bus.subscribe(DecorationsCleared, lambda event: seen.append(("a", event.generation)))
    bus.subscribe(DecorationsCleared, lambda event: seen.append(("b", event.generation)))

    bus.publish(DecorationsCleared(generation=3))

    assert seen == [("a", 3), ("b", 3)]


def test_failing_handler_does_not_stop_others() -> None:
    bus = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(AffordanceVisibilityChanged, broken)
    bus.subscribe(AffordanceVisibilityChanged, seen.append)

    bus.publish(AffordanceVisibilityChanged(visible=True))

    assert len(seen) == 1


def test_unsubscribe_and_counts() -> None:
    bus = EventBus()
    handler = lambda event: None  # noqa: E731
    bus.subscribe(DecorationsCleared, handler)
    assert bus.handler_count(DecorationsCleared) == 1

    bus.unsubscribe(DecorationsCleared, handler)
    bus.unsubscribe(DecorationsCleared, handler)

    assert bus.handler_count() == 0


def test_bound_method_handlers_are_weak() -> None:
    bus = EventBus()

    class Listener:
        def __init__(self) -> None:
            self.calls = 0

        def on_cleared(self, event) -> None:
            self.calls += 1

    listener = Listener()
    bus.subscribe(DecorationsCleared, listener.on_cleared)
    bus.publish(DecorationsCleared(generation=1))
    assert listener.calls == 1

    del listener
    gc.collect()
    bus.publish(DecorationsCleared(generation=2))

    assert bus.handler_count(DecorationsCleared) == 0


def test_unsubscribe_during_publish_keeps_live_handlers() -> None:
    bus = EventBus()
    later: list[int] = []

    class Listener:
        def on_cleared(self, event) -> None:
            pass

    def one_shot(event) -> None:
        bus.unsubscribe(DecorationsCleared, one_shot)

    listener = Listener()
    bus.subscribe(DecorationsCleared, one_shot)
    bus.subscribe(DecorationsCleared, listener.on_cleared)
    bus.subscribe(DecorationsCleared, lambda event: later.append(event.generation))
    del listener
    gc.collect()

    bus.publish(DecorationsCleared(generation=1))
    bus.publish(DecorationsCleared(generation=2))

    assert bus.handler_count(DecorationsCleared) == 1
    assert later == [1, 2]
