"""Source buffer indexing and selection resolution."""

from .selection_resolver import SelectionResolver, SelectionResult
from .source_document import Line, SourceDocument

__all__ = ["Line", "SelectionResolver", "SelectionResult", "SourceDocument"]
