"""Shared pytest fixtures."""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from linemark.ui.events import EventBus  # noqa: E402

from tests.helpers import ManualScheduler, RecordingBus  # noqa: E402


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(event_bus: EventBus) -> RecordingBus:
    return RecordingBus(event_bus)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def sample_markdown() -> str:
    return (
        "# Release notes\n"
        "\n"
        "The engine maps source lines onto rendered blocks.\n"
        "\n"
        "- first bullet item\n"
        "- second bullet item\n"
        "\n"
        "Closing paragraph with enough words to pass the prefix."
    )
