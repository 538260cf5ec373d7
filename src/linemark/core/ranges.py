"""Structured helpers for representing source spans."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Iterator

_PAYLOAD_KEYS = ("startLine", "startChar", "endLine", "endChar")


@dataclass(slots=True, frozen=True)
class LineRange(Sequence[int]):
    """Resolved source span using 0-indexed line and character coordinates.

    ``end_char`` is exclusive: a single character on line 1 is
    ``LineRange(1, 0, 1, 1)``.
    """

    start_line: int
    start_char: int
    end_line: int
    end_char: int

    def __post_init__(self) -> None:
        for name in ("start_line", "start_char", "end_line", "end_char"):
            object.__setattr__(self, name, self._coerce_index(getattr(self, name), name))
        if (self.end_line, self.end_char) < (self.start_line, self.start_char):
            start = (self.end_line, self.end_char)
            end = (self.start_line, self.start_char)
            object.__setattr__(self, "start_line", start[0])
            object.__setattr__(self, "start_char", start[1])
            object.__setattr__(self, "end_line", end[0])
            object.__setattr__(self, "end_char", end[1])

    @staticmethod
    def _coerce_index(value: Any, label: str) -> int:
        if isinstance(value, bool):
            raise ValueError(f"LineRange {label} must be an integer")
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"LineRange {label} must be an integer") from exc
        if number < 0:
            return 0
        return number

    def __len__(self) -> int:
        return 4

    def __getitem__(self, index: int | slice) -> int | tuple[int, ...]:
        if isinstance(index, slice):
            return self.to_tuple()[index]
        try:
            return self.to_tuple()[index]
        except IndexError:
            raise IndexError("LineRange index out of range") from None

    def __iter__(self) -> Iterator[int]:
        yield from self.to_tuple()

    @property
    def line_count(self) -> int:
        """Return the number of source lines touched by the span (inclusive)."""

        return (self.end_line - self.start_line) + 1

    @property
    def lines(self) -> range:
        """Return the covered line indices."""

        return range(self.start_line, self.end_line + 1)

    def to_tuple(self) -> tuple[int, int, int, int]:
        return (self.start_line, self.start_char, self.end_line, self.end_char)

    def to_payload(self) -> dict[str, int]:
        """Return the span in the camel-cased shape used on the host channel."""

        return dict(zip(_PAYLOAD_KEYS, self.to_tuple()))


__all__ = ["LineRange"]
