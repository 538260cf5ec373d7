"""Tests for settings persistence and overrides."""

import json
from pathlib import Path

import pytest

from linemark.services.settings import EditorSettings, SettingsStore

_ENV_NAMES = (
    "LINEMARK_RETRY_ATTEMPTS",
    "LINEMARK_RETRY_INTERVAL",
    "LINEMARK_DECORATION_MODE",
    "LINEMARK_TAG_PREFIX",
    "LINEMARK_DEBUG_LOGGING",
    "LINEMARK_LOG_DIR",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store(tmp_path: Path) -> SettingsStore:
    return SettingsStore(tmp_path / "settings.json")


def test_missing_file_yields_defaults(store: SettingsStore) -> None:
    settings = store.load()

    assert settings == EditorSettings()
    assert settings.selection_tag == "linemark-selection"


def test_save_and_load_round_trip(store: SettingsStore) -> None:
    store.save(EditorSettings(retry_attempts=9, decoration_mode="sv", debug_logging=True))

    payload = json.loads(store.path.read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert not store.path.with_suffix(".tmp").exists()

    loaded = store.load()
    assert loaded.retry_attempts == 9
    assert loaded.decoration_mode == "sv"
    assert loaded.debug_logging is True


def test_unknown_keys_are_ignored(store: SettingsStore) -> None:
    store.path.write_text(json.dumps({"retry_interval": 0.5, "theme": "dark"}), encoding="utf-8")

    assert store.load().retry_interval == 0.5


@pytest.mark.parametrize("body", ["{not json", "[1, 2, 3]"])
def test_unreadable_payload_falls_back(store: SettingsStore, body: str, caplog: pytest.LogCaptureFixture) -> None:
    store.path.write_text(body, encoding="utf-8")

    assert store.load() == EditorSettings()
    assert any(record.levelname == "WARNING" for record in caplog.records)


def test_runtime_overrides_skip_none(store: SettingsStore) -> None:
    settings = store.load(overrides={"tag_prefix": "review", "retry_attempts": None, "bogus": 1})

    assert settings.tag_prefix == "review"
    assert settings.retry_attempts == 5


def test_environment_wins_over_runtime(store: SettingsStore, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINEMARK_TAG_PREFIX", "env")
    monkeypatch.setenv("LINEMARK_RETRY_ATTEMPTS", "3")
    monkeypatch.setenv("LINEMARK_RETRY_INTERVAL", "0.05")
    monkeypatch.setenv("LINEMARK_DEBUG_LOGGING", "yes")

    settings = store.load(overrides={"tag_prefix": "runtime"})

    assert settings.tag_prefix == "env"
    assert settings.retry_attempts == 3
    assert settings.retry_interval == 0.05
    assert settings.debug_logging is True


def test_invalid_numeric_environment_is_ignored(store: SettingsStore, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINEMARK_RETRY_ATTEMPTS", "many")
    monkeypatch.setenv("LINEMARK_RETRY_INTERVAL", "soon")

    settings = store.load()

    assert settings.retry_attempts == 5
    assert settings.retry_interval == 0.2


@pytest.mark.parametrize("source", ["file", "runtime", "environment"])
def test_unknown_decoration_mode_falls_back(
    store: SettingsStore,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
    source: str,
) -> None:
    overrides = None
    if source == "file":
        store.path.write_text(json.dumps({"decoration_mode": "split"}), encoding="utf-8")
    elif source == "runtime":
        overrides = {"decoration_mode": "split"}
    else:
        monkeypatch.setenv("LINEMARK_DECORATION_MODE", "split")

    settings = store.load(overrides=overrides)

    assert settings.decoration_mode == "ir"
    assert any("split" in record.getMessage() for record in caplog.records)
