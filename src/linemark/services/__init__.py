"""Host-facing services: settings, message channel and selection actions."""

from .bridge import MessageBridge
from .selection_actions import SelectionActionController
from .settings import EditorSettings, SettingsStore

__all__ = ["EditorSettings", "MessageBridge", "SelectionActionController", "SettingsStore"]
