"""Best-effort mapping from source lines to rendered view nodes.

The rendered view carries no source positions, so lines are correlated with
nodes by text. Three tiers run in order; each only assigns lines that are
still unmapped, and tiers A and B reserve every node they assign so one node
backs at most one text line. Tier C then lends the nearest mapped node to
leftover lines (blank lines included).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Sequence

from ..documents.selection_resolver import collapse_whitespace
from ..documents.source_document import SourceDocument
from .nodes import VisualNode

LOGGER = logging.getLogger(__name__)

DEFAULT_EXACT_PREFIX_CHARS = 20
DEFAULT_POSITIONAL_PREFIX_CHARS = 15


def _normalize(text: str) -> str:
    return collapse_whitespace(text).strip()


@dataclass(slots=True)
class MappingWorkspace:
    """Mutable scratch state threaded through the tiers of one mapper run."""

    lines: Sequence[str]
    nodes: Sequence[VisualNode]
    node_texts: Sequence[str]
    assigned: dict[int, int] = field(default_factory=dict)
    reserved: set[int] = field(default_factory=set)

    def assign(self, line_index: int, node_index: int, *, reserve: bool = True) -> None:
        self.assigned[line_index] = node_index
        if reserve:
            self.reserved.add(node_index)


MappingTier = Callable[[MappingWorkspace], None]


@dataclass(slots=True, frozen=True)
class LineMapping:
    """Partial function from line index to node; missing lines have no node."""

    nodes: Sequence[VisualNode]
    node_indices: Mapping[int, int]
    line_count: int

    def __len__(self) -> int:
        return len(self.node_indices)

    def __contains__(self, line_index: object) -> bool:
        return line_index in self.node_indices

    def node_for(self, line_index: int) -> VisualNode | None:
        index = self.node_indices.get(line_index)
        if index is None:
            return None
        return self.nodes[index]

    def unmapped_lines(self) -> list[int]:
        return [index for index in range(self.line_count) if index not in self.node_indices]


def exact_tier(prefix_chars: int = DEFAULT_EXACT_PREFIX_CHARS) -> MappingTier:
    """Tier A: first unreserved node that equals or contains the line."""

    def run(workspace: MappingWorkspace) -> None:
        normalized_nodes = [_normalize(text) for text in workspace.node_texts]
        for line_index, line in enumerate(workspace.lines):
            if line_index in workspace.assigned or not line.strip():
                continue
            needle = _normalize(line)
            head = needle[:prefix_chars] if len(needle) > prefix_chars else None
            for node_index, node_text in enumerate(normalized_nodes):
                if node_index in workspace.reserved:
                    continue
                if node_text == needle or needle in node_text or (head is not None and head in node_text):
                    workspace.assign(line_index, node_index)
                    break

    return run


def positional_tier(prefix_chars: int = DEFAULT_POSITIONAL_PREFIX_CHARS) -> MappingTier:
    """Tier B: walk nodes with a monotonic cursor using short prefix containment."""

    def run(workspace: MappingWorkspace) -> None:
        cursor = 0
        node_count = len(workspace.nodes)
        for line_index, line in enumerate(workspace.lines):
            if cursor >= node_count:
                break
            if line_index in workspace.assigned or not line.strip():
                continue
            line_text = line.strip()
            for node_index in range(cursor, node_count):
                if node_index in workspace.reserved:
                    continue
                node_text = workspace.node_texts[node_index].strip()
                if not node_text:
                    continue
                if line_text[:prefix_chars] in node_text or node_text[:prefix_chars] in line_text:
                    workspace.assign(line_index, node_index)
                    cursor = node_index + 1
                    break

    return run


def proximity_tier() -> MappingTier:
    """Tier C: borrow the nearest mapped node, looking backward first."""

    def run(workspace: MappingWorkspace) -> None:
        line_count = len(workspace.lines)
        for line_index in range(line_count):
            if line_index in workspace.assigned:
                continue
            borrowed = None
            for neighbour in range(line_index - 1, -1, -1):
                if neighbour in workspace.assigned:
                    borrowed = workspace.assigned[neighbour]
                    break
            if borrowed is None:
                for neighbour in range(line_index + 1, line_count):
                    if neighbour in workspace.assigned:
                        borrowed = workspace.assigned[neighbour]
                        break
            if borrowed is not None:
                workspace.assign(line_index, borrowed, reserve=False)

    return run


class NodeMapper:
    """Builds a fresh :class:`LineMapping` for a (document, view) pair."""

    def __init__(
        self,
        *,
        exact_prefix_chars: int = DEFAULT_EXACT_PREFIX_CHARS,
        positional_prefix_chars: int = DEFAULT_POSITIONAL_PREFIX_CHARS,
        tiers: Sequence[MappingTier] | None = None,
    ) -> None:
        self._tiers = tuple(
            tiers
            if tiers is not None
            else (
                exact_tier(exact_prefix_chars),
                positional_tier(positional_prefix_chars),
                proximity_tier(),
            )
        )

    def map(self, document: SourceDocument | Sequence[str], nodes: Sequence[VisualNode]) -> LineMapping:
        if isinstance(document, SourceDocument):
            lines: Sequence[str] = document.line_texts()
        else:
            lines = list(document)
        nodes = tuple(nodes)
        workspace = MappingWorkspace(
            lines=lines,
            nodes=nodes,
            node_texts=[node.get_text() or "" for node in nodes],
        )
        for tier in self._tiers:
            tier(workspace)
        mapping = LineMapping(nodes=nodes, node_indices=dict(workspace.assigned), line_count=len(lines))
        LOGGER.debug(
            "Mapped %d/%d lines onto %d nodes",
            len(mapping),
            len(lines),
            len(nodes),
        )
        return mapping


__all__ = [
    "DEFAULT_EXACT_PREFIX_CHARS",
    "DEFAULT_POSITIONAL_PREFIX_CHARS",
    "LineMapping",
    "MappingTier",
    "MappingWorkspace",
    "NodeMapper",
    "exact_tier",
    "positional_tier",
    "proximity_tier",
]
