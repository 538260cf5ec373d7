"""Line-indexed change sets delivered by the assistant integration."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class DecorationCategory(str, Enum):
    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"

    def tag(self, prefix: str) -> str:
        """Return the node tag for this category, e.g. ``linemark-added-line``."""

        return f"{prefix}-{self.value}-line"


def _coerce_lines(value: Any, label: str) -> frozenset[int]:
    if value is None:
        return frozenset()
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise TypeError(f"ChangeSet {label} must be a list of line indices")
    lines: set[int] = set()
    for entry in value:
        if isinstance(entry, bool):
            raise ValueError(f"ChangeSet {label} entries must be integers")
        try:
            lines.add(int(entry))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"ChangeSet {label} entries must be integers") from exc
    return frozenset(lines)


@dataclass(slots=True, frozen=True)
class ChangeSet:
    """Added, deleted and modified line indices.

    The three sets may overlap; a line listed in several categories carries
    every matching tag.
    """

    added: frozenset[int] = frozenset()
    deleted: frozenset[int] = frozenset()
    modified: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        for category in DecorationCategory:
            value = getattr(self, category.value)
            object.__setattr__(self, category.value, _coerce_lines(value, category.value))

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.deleted or self.modified)

    def lines(self, category: DecorationCategory) -> frozenset[int]:
        return getattr(self, category.value)

    def touched(self) -> list[int]:
        """Return every line index mentioned in any category, ascending."""

        return sorted(self.added | self.deleted | self.modified)

    def categories_for(self, line_index: int) -> tuple[DecorationCategory, ...]:
        return tuple(category for category in DecorationCategory if line_index in self.lines(category))

    def to_payload(self) -> dict[str, list[int]]:
        return {category.value: sorted(self.lines(category)) for category in DecorationCategory}

    @classmethod
    def from_payload(cls, payload: Any) -> ChangeSet:
        """Build a change set from ``{added, deleted, modified}``; missing keys are empty."""

        if isinstance(payload, ChangeSet):
            return payload
        if not isinstance(payload, Mapping):
            raise TypeError("ChangeSet payload must be a mapping")
        return cls(
            added=payload.get("added"),
            deleted=payload.get("deleted"),
            modified=payload.get("modified"),
        )


__all__ = ["ChangeSet", "DecorationCategory"]
