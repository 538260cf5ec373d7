"""PySide6 binding: ``QTextDocument`` blocks exposed as visual nodes."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Sequence

from PySide6.QtCore import QTimer
from PySide6.QtGui import QColor, QTextBlockFormat, QTextCursor, QTextDocument

from .markdown_view import DEFAULT_MODE, RENDER_MODES
from .nodes import StaleNodeError

LOGGER = logging.getLogger(__name__)

DEFAULT_TAG_COLORS: Mapping[str, str] = {
    "added-line": "#2e7d3233",
    "deleted-line": "#c6282833",
    "modified-line": "#f9a82533",
    "selection": "#1565c033",
}


class QtBlockNode:
    """A single ``QTextBlock`` of a rendered ``QTextDocument``."""

    __slots__ = ("_view", "_block_number", "_text")

    def __init__(self, view: QtTextView, block_number: int, text: str) -> None:
        self._view = view
        self._block_number = block_number
        self._text = text

    def __repr__(self) -> str:
        return f"QtBlockNode({self._block_number}, {self._text[:30]!r})"

    @property
    def block_number(self) -> int:
        return self._block_number

    @property
    def is_wrapper(self) -> bool:
        return False

    def get_text(self) -> str:
        return self._text

    def get_parent(self) -> None:
        return None

    def has_tag(self, tag: str) -> bool:
        return tag in self._view.tags_for(self._block_number)

    def add_tag(self, tag: str) -> None:
        self._view.update_tags(self, add=tag)

    def remove_tag(self, tag: str) -> None:
        self._view.update_tags(self, remove=tag)


class QtTextView:
    """Rendered view over the blocks of a ``QTextDocument``.

    Tags are tracked per block number and painted as block backgrounds.
    """

    def __init__(self, document: QTextDocument, *, tag_colors: Mapping[str, str] | None = None) -> None:
        self._document = document
        self._tag_colors = dict(tag_colors or DEFAULT_TAG_COLORS)
        self._tags: dict[int, set[str]] = {}
        self._attached = True
        self._nodes = self._collect_nodes()

    def _collect_nodes(self) -> tuple[QtBlockNode, ...]:
        nodes: list[QtBlockNode] = []
        block = self._document.begin()
        while block.isValid():
            nodes.append(QtBlockNode(self, block.blockNumber(), block.text()))
            block = block.next()
        return tuple(nodes)

    def nodes(self) -> Sequence[QtBlockNode]:
        return self._nodes

    def tags_for(self, block_number: int) -> frozenset[str]:
        return frozenset(self._tags.get(block_number, ()))

    def detach(self) -> None:
        self._attached = False

    def update_tags(self, node: QtBlockNode, *, add: str | None = None, remove: str | None = None) -> None:
        block = self._document.findBlockByNumber(node.block_number)
        if not self._attached or not block.isValid() or block.text() != node.get_text():
            raise StaleNodeError(f"{node!r} is no longer part of the rendered view")
        tags = self._tags.setdefault(node.block_number, set())
        if add is not None:
            tags.add(add)
        if remove is not None:
            tags.discard(remove)
        self._paint(block, tags)

    def _paint(self, block, tags: set[str]) -> None:
        fmt = QTextBlockFormat(block.blockFormat())
        color = self._color_for(tags)
        if color is None:
            fmt.clearBackground()
        else:
            fmt.setBackground(QColor(color))
        cursor = QTextCursor(block)
        cursor.setBlockFormat(fmt)

    def _color_for(self, tags: set[str]) -> str | None:
        for suffix, color in self._tag_colors.items():
            if any(tag.endswith(suffix) for tag in tags):
                return color
        return None


class QtMarkdownEngine:
    """Render engine driving a ``QTextDocument`` with Qt's markdown reader."""

    def __init__(
        self,
        text: str = "",
        *,
        mode: str = DEFAULT_MODE,
        document: QTextDocument | None = None,
        tag_colors: Mapping[str, str] | None = None,
    ) -> None:
        if mode not in RENDER_MODES:
            raise ValueError(f"Unknown render mode: {mode}")
        self._document = document or QTextDocument()
        self._text = text
        self._mode = mode
        self._tag_colors = tag_colors
        self._view: QtTextView | None = None
        self._render()

    @property
    def document(self) -> QTextDocument:
        return self._document

    def rendered_view(self) -> QtTextView | None:
        return self._view

    def source_text(self) -> str:
        return self._text

    def set_source(self, text: str) -> None:
        self._text = text
        self._render()

    def current_mode(self) -> str:
        return self._mode

    def set_mode(self, mode: str) -> None:
        if mode not in RENDER_MODES:
            raise ValueError(f"Unknown render mode: {mode}")
        if mode != self._mode:
            self._mode = mode
            self._render()

    def _render(self) -> None:
        if self._view is not None:
            self._view.detach()
        if self._mode == "sv":
            self._document.setPlainText(self._text)
        else:
            self._document.setMarkdown(self._text)
        self._view = QtTextView(self._document, tag_colors=self._tag_colors)
        LOGGER.debug("QtMarkdownEngine rendered %d blocks in %s mode", len(self._view.nodes()), self._mode)


class QtScheduler:
    """Schedules deferred callbacks on the Qt event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        QTimer.singleShot(max(0, int(delay * 1000)), callback)


__all__ = ["DEFAULT_TAG_COLORS", "QtBlockNode", "QtMarkdownEngine", "QtScheduler", "QtTextView"]
