"""Indexed line view over an immutable markdown buffer snapshot."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Iterator, Sequence

LINE_SEPARATOR = "\n"


@dataclass(slots=True, frozen=True)
class Line:
    """One source line; ``end_offset`` excludes the trailing separator."""

    index: int
    text: str
    start_offset: int
    end_offset: int

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(slots=True, frozen=True)
class SourceDocument(Sequence[Line]):
    """Snapshot of the source buffer split strictly on ``"\\n"``.

    Trailing empty segments are kept, so ``join(split(text)) == text`` for every
    input, including one ending with a newline. Offset lookups use a prefix
    table of line start offsets and run in ``O(log n)``.
    """

    text: str
    lines: tuple[Line, ...] = field(init=False, repr=False)
    _starts: tuple[int, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        lines = self.split(self.text)
        object.__setattr__(self, "lines", lines)
        object.__setattr__(self, "_starts", tuple(line.start_offset for line in lines))

    @staticmethod
    def split(text: str) -> tuple[Line, ...]:
        """Return the indexed lines of ``text``."""

        lines: list[Line] = []
        cursor = 0
        for index, segment in enumerate(text.split(LINE_SEPARATOR)):
            end = cursor + len(segment)
            lines.append(Line(index=index, text=segment, start_offset=cursor, end_offset=end))
            cursor = end + len(LINE_SEPARATOR)
        return tuple(lines)

    @staticmethod
    def join(lines: Sequence[Line] | Sequence[str]) -> str:
        """Reassemble a buffer from lines (or raw line strings)."""

        return LINE_SEPARATOR.join(line if isinstance(line, str) else line.text for line in lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, index):  # type: ignore[override]
        return self.lines[index]

    def __iter__(self) -> Iterator[Line]:
        return iter(self.lines)

    @property
    def last_line_index(self) -> int:
        return len(self.lines) - 1

    def line_texts(self) -> list[str]:
        return [line.text for line in self.lines]

    def offset_to_line_col(self, offset: int) -> tuple[int, int]:
        """Convert an absolute offset into ``(line, column)``.

        The separator following a line belongs to that line, so the offset of a
        newline maps to ``(line, len(line))``. ``len(text)`` is a valid offset.
        """

        if offset < 0 or offset > len(self.text):
            raise ValueError(f"offset {offset} outside buffer of length {len(self.text)}")
        line_index = bisect_right(self._starts, offset) - 1
        return line_index, offset - self._starts[line_index]

    def line_col_to_offset(self, line: int, column: int) -> int:
        """Convert ``(line, column)`` back into an absolute offset."""

        if line < 0 or line >= len(self.lines):
            raise ValueError(f"line {line} outside document of {len(self.lines)} lines")
        target = self.lines[line]
        if column < 0 or column > len(target.text):
            raise ValueError(f"column {column} outside line {line} of length {len(target.text)}")
        return target.start_offset + column


__all__ = ["LINE_SEPARATOR", "Line", "SourceDocument"]
