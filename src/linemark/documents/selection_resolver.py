"""Recover the source span behind text selected in the rendered view.

The rendered view only hands over the selected characters, so the span is
recovered by searching the source buffer with progressively looser
strategies. Each strategy is a pure function ``(document, selected_text) ->
LineRange | None``; the first one that finds something wins.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Sequence

from ..core.ranges import LineRange
from .source_document import LINE_SEPARATOR, SourceDocument

LOGGER = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")

MatchStrategy = Callable[[SourceDocument, str], "LineRange | None"]


@dataclass(slots=True, frozen=True)
class SelectionResult:
    """Outcome of resolving a selection; ``range`` is ``None`` on no match."""

    text: str
    range: LineRange | None = None
    strategy: str | None = None

    @property
    def matched(self) -> bool:
        return self.range is not None

    @classmethod
    def no_match(cls, text: str) -> SelectionResult:
        return cls(text=text)


def collapse_whitespace(text: str) -> str:
    """Replace every whitespace run in ``text`` with a single space."""

    return _WHITESPACE_RUN.sub(" ", text)


def expand_normalized_offset(text: str, normalized_offset: int) -> int:
    """Map an offset in ``collapse_whitespace(text)`` back onto ``text``.

    Walks ``text`` one normalized step at a time: a non-whitespace character is
    one step, a whitespace run of any length is one step.
    """

    position = 0
    steps = 0
    length = len(text)
    while steps < normalized_offset and position < length:
        if text[position].isspace():
            while position < length - 1 and text[position + 1].isspace():
                position += 1
        position += 1
        steps += 1
    return position


def _range_from_offsets(document: SourceDocument, start: int, end: int) -> LineRange:
    start_line, start_char = document.offset_to_line_col(start)
    end_line, end_char = document.offset_to_line_col(end)
    return LineRange(start_line, start_char, end_line, end_char)


def exact_substring(document: SourceDocument, selected_text: str) -> LineRange | None:
    """First verbatim occurrence of the selection in the buffer."""

    index = document.text.find(selected_text)
    if index == -1:
        return None
    return _range_from_offsets(document, index, index + len(selected_text))


def whitespace_normalized(document: SourceDocument, selected_text: str) -> LineRange | None:
    """Match with whitespace runs collapsed on both sides.

    The span ends right after the last matched non-whitespace character; a
    whitespace run that follows the match is never included.
    """

    needle = collapse_whitespace(selected_text).strip()
    if not needle:
        return None
    haystack = collapse_whitespace(document.text)
    index = haystack.find(needle)
    if index == -1:
        return None
    start = expand_normalized_offset(document.text, index)
    end = expand_normalized_offset(document.text, index + len(needle))
    return _range_from_offsets(document, start, end)


def first_line_fallback(document: SourceDocument, selected_text: str) -> LineRange | None:
    """Locate the first source line containing the selection's first line."""

    selection_lines = selected_text.split(LINE_SEPARATOR)
    fragment = selection_lines[0].strip()
    if not fragment:
        return None
    for line in document:
        position = line.text.find(fragment)
        if position == -1:
            continue
        end_line = min(line.index + len(selection_lines) - 1, document.last_line_index)
        end_char = position + len(fragment)
        if end_line > line.index:
            end_char = len(selection_lines[-1])
        return LineRange(line.index, position, end_line, end_char)
    return None


DEFAULT_STRATEGIES: tuple[tuple[str, MatchStrategy], ...] = (
    ("exact", exact_substring),
    ("whitespace", whitespace_normalized),
    ("first-line", first_line_fallback),
)


class SelectionResolver:
    """Runs the matching strategies in order against a document snapshot."""

    def __init__(self, strategies: Sequence[tuple[str, MatchStrategy]] | None = None) -> None:
        self._strategies = tuple(strategies or DEFAULT_STRATEGIES)

    def resolve(self, selected_text: str, document: SourceDocument | str) -> SelectionResult:
        if isinstance(document, str):
            document = SourceDocument(document)
        if not selected_text:
            return SelectionResult.no_match(selected_text)
        for name, strategy in self._strategies:
            found = strategy(document, selected_text)
            if found is not None:
                LOGGER.debug(
                    "Selection mapped to lines %d-%d via %s strategy",
                    found.start_line + 1,
                    found.end_line + 1,
                    name,
                )
                return SelectionResult(text=selected_text, range=found, strategy=name)
        LOGGER.debug("Could not find selection in source: %r", selected_text[:50])
        return SelectionResult.no_match(selected_text)


__all__ = [
    "DEFAULT_STRATEGIES",
    "MatchStrategy",
    "SelectionResolver",
    "SelectionResult",
    "collapse_whitespace",
    "exact_substring",
    "expand_normalized_offset",
    "first_line_fallback",
    "whitespace_normalized",
]
