"""Capability interfaces for the externally owned rendered view.

The engine never restructures a rendered view. It reads node text, walks one
level up to a node's structural wrapper, and adds or removes category tags.
Concrete rendering bindings implement :class:`VisualNode`,
:class:`RenderedView` and :class:`RenderEngine`.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, runtime_checkable


class StaleNodeError(RuntimeError):
    """Raised when a node was detached by a re-render before it was touched."""


@runtime_checkable
class VisualNode(Protocol):
    """One rendered block-level element."""

    def get_text(self) -> str:
        ...

    def add_tag(self, tag: str) -> None:
        ...

    def remove_tag(self, tag: str) -> None:
        ...

    def get_parent(self) -> VisualNode | None:
        ...

    def has_tag(self, tag: str) -> bool:
        ...

    @property
    def is_wrapper(self) -> bool:
        """``True`` for structural containers that mirror their child's tags."""
        ...


class RenderedView(Protocol):
    """Ordered, flattened sequence of the view's block nodes."""

    def nodes(self) -> Sequence[VisualNode]:
        ...


class RenderEngine(Protocol):
    """The external markdown rendering engine as seen by the surface."""

    def rendered_view(self) -> RenderedView | None:
        """Return the live view, or ``None`` while the engine is initializing."""
        ...

    def source_text(self) -> str:
        ...

    def set_source(self, text: str) -> None:
        ...

    def current_mode(self) -> str:
        ...

    def set_mode(self, mode: str) -> None:
        ...


class BlockNode:
    """In-memory :class:`VisualNode` used by the headless bindings."""

    __slots__ = ("kind", "_fragments", "_parent", "_tags", "_attached", "_is_wrapper")

    def __init__(
        self,
        kind: str,
        text: str = "",
        *,
        parent: BlockNode | None = None,
        is_wrapper: bool = False,
    ) -> None:
        self.kind = kind
        self._fragments: list[str] = [text] if text else []
        self._parent = parent
        self._tags: set[str] = set()
        self._attached = True
        self._is_wrapper = is_wrapper

    def __repr__(self) -> str:
        return f"BlockNode({self.kind!r}, {self.get_text()[:30]!r})"

    @property
    def is_wrapper(self) -> bool:
        return self._is_wrapper

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self._tags)

    def append_text(self, fragment: str) -> None:
        if fragment:
            self._fragments.append(fragment)

    def get_text(self) -> str:
        return "\n".join(self._fragments)

    def get_parent(self) -> BlockNode | None:
        return self._parent

    def has_tag(self, tag: str) -> bool:
        return tag in self._tags

    def add_tag(self, tag: str) -> None:
        self._require_attached()
        self._tags.add(tag)

    def remove_tag(self, tag: str) -> None:
        self._require_attached()
        self._tags.discard(tag)

    def detach(self) -> None:
        self._attached = False

    def _require_attached(self) -> None:
        if not self._attached:
            raise StaleNodeError(f"{self!r} is no longer part of the rendered view")


class BlockView:
    """In-memory :class:`RenderedView` over a list of :class:`BlockNode`."""

    def __init__(self, nodes: Iterable[BlockNode] = ()) -> None:
        self._nodes: list[BlockNode] = list(nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def nodes(self) -> Sequence[BlockNode]:
        return tuple(self._nodes)

    def tagged_nodes(self, tag: str) -> list[BlockNode]:
        return [node for node in self._nodes if node.has_tag(tag)]

    def detach(self) -> None:
        """Invalidate every node, as a re-render does."""

        for node in self._nodes:
            node.detach()


__all__ = [
    "BlockNode",
    "BlockView",
    "RenderEngine",
    "RenderedView",
    "StaleNodeError",
    "VisualNode",
]
