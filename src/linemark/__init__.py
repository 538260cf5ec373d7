"""Source-to-rendered-view synchronization and decoration engine."""

from .core.ranges import LineRange
from .decorations.change_set import ChangeSet, DecorationCategory
from .decorations.controller import DecorationController
from .decorations.mode_guard import ModeGuard
from .documents.selection_resolver import SelectionResolver, SelectionResult
from .documents.source_document import Line, SourceDocument
from .view.node_mapper import LineMapping, NodeMapper

__all__ = [
    "ChangeSet",
    "DecorationCategory",
    "DecorationController",
    "Line",
    "LineMapping",
    "LineRange",
    "ModeGuard",
    "NodeMapper",
    "SelectionResolver",
    "SelectionResult",
    "SourceDocument",
]

__version__ = "0.1.0"
