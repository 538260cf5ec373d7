"""Tests for the decoration session state machine."""

from linemark.decorations.mode_guard import ModeGuard
from linemark.decorations.state import DecorationState, SessionState
from linemark.ui.events import EventBus, RenderModeChanged
from linemark.view.markdown_view import MarkdownEngine

from tests.helpers import RecordingBus


def test_begin_captures_and_switches_mode(event_bus: EventBus, recorder: RecordingBus) -> None:
    engine = MarkdownEngine("text", mode="sv")
    guard = ModeGuard(engine, decoration_mode="ir", event_bus=event_bus)

    assert guard.begin() is True

    assert guard.session is SessionState.ACTIVE
    assert guard.state.saved_mode == "sv"
    assert engine.current_mode() == "ir"
    assert recorder.of_type(RenderModeChanged)[0].current == "ir"


def test_begin_inside_session_does_not_recapture() -> None:
    engine = MarkdownEngine("text", mode="wysiwyg")
    guard = ModeGuard(engine)
    guard.begin()
    engine.set_mode("sv")

    assert guard.begin() is False
    assert guard.state.saved_mode == "wysiwyg"


def test_end_restores_and_releases() -> None:
    engine = MarkdownEngine("text", mode="wysiwyg")
    guard = ModeGuard(engine)
    guard.begin()

    guard.end()

    assert engine.current_mode() == "wysiwyg"
    assert guard.session is SessionState.IDLE
    assert guard.state.saved_mode is None


def test_end_when_idle_is_a_no_op(event_bus: EventBus, recorder: RecordingBus) -> None:
    engine = MarkdownEngine("text", mode="wysiwyg")
    guard = ModeGuard(engine, event_bus=event_bus)

    guard.end()

    assert engine.current_mode() == "wysiwyg"
    assert recorder.events == []


def test_no_switch_when_already_in_decoration_mode(event_bus: EventBus, recorder: RecordingBus) -> None:
    engine = MarkdownEngine("text", mode="ir")
    guard = ModeGuard(engine, event_bus=event_bus)

    guard.begin()
    guard.end()

    assert engine.render_count == 1
    assert recorder.of_type(RenderModeChanged) == []


def test_disabled_decoration_mode_only_records() -> None:
    engine = MarkdownEngine("text", mode="wysiwyg")
    guard = ModeGuard(engine, decoration_mode=None)

    guard.begin()

    assert engine.current_mode() == "wysiwyg"
    assert guard.state.saved_mode == "wysiwyg"


def test_state_reset_keeps_generation() -> None:
    state = DecorationState(saved_mode="ir")
    state.next_generation()
    state.next_generation()

    state.reset()

    assert state.generation == 2
    assert state.session is SessionState.IDLE
    assert state.is_current(2)
