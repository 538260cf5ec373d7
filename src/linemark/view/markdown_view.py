"""Headless rendering binding backed by ``markdown-it-py`` block tokens."""

from __future__ import annotations

import logging

from markdown_it import MarkdownIt
from markdown_it.token import Token

from .nodes import BlockNode, BlockView

LOGGER = logging.getLogger(__name__)

RENDER_MODES: tuple[str, ...] = ("wysiwyg", "ir", "sv")
DEFAULT_MODE = "ir"

# Block elements exposed as visual nodes, keyed by their opening token type.
_CONTAINER_KINDS: dict[str, str] = {
    "paragraph_open": "p",
    "heading_open": "h",
    "list_item_open": "li",
    "blockquote_open": "blockquote",
    "th_open": "th",
    "td_open": "td",
}
_LEAF_KINDS: dict[str, str] = {
    "fence": "pre",
    "code_block": "pre",
    "html_block": "div",
}
_WRAPPER_KINDS = frozenset({"li", "blockquote"})


def _inline_text(token: Token) -> str:
    parts: list[str] = []
    for child in token.children or ():
        if child.type in ("text", "code_inline", "html_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append("\n")
    return "".join(parts)


def build_view(text: str, *, parser: MarkdownIt | None = None) -> BlockView:
    """Render ``text`` into an ordered, flattened view of block nodes."""

    md = parser or MarkdownIt("commonmark").enable("table")
    nodes: list[BlockNode] = []
    stack: list[BlockNode] = []

    def open_node(kind: str) -> BlockNode:
        parent = stack[-1] if stack else None
        node = BlockNode(kind, parent=parent, is_wrapper=kind in _WRAPPER_KINDS)
        nodes.append(node)
        return node

    def feed(fragment: str) -> None:
        for node in stack:
            node.append_text(fragment)

    for token in md.parse(text):
        if token.type in _CONTAINER_KINDS:
            kind = _CONTAINER_KINDS[token.type]
            if kind == "h":
                kind = token.tag
            stack.append(open_node(kind))
        elif token.nesting == -1 and token.type.replace("_close", "_open") in _CONTAINER_KINDS:
            if stack:
                stack.pop()
        elif token.type == "inline":
            feed(_inline_text(token))
        elif token.type in _LEAF_KINDS:
            leaf = open_node(_LEAF_KINDS[token.type])
            content = token.content.rstrip("\n")
            leaf.append_text(content)
            feed(content)
    return BlockView(nodes)


def build_source_view(text: str) -> BlockView:
    """Source mode shows the buffer verbatim: one node per line."""

    return BlockView(BlockNode("line", line) for line in text.split("\n"))


class MarkdownEngine:
    """A render engine with an initializing phase and switchable modes.

    Until :meth:`mark_ready` is called the engine reports no rendered view,
    mirroring a host engine that is still booting. Every re-render detaches
    the previous view's nodes.
    """

    def __init__(self, text: str = "", *, mode: str = DEFAULT_MODE, ready: bool = True) -> None:
        if mode not in RENDER_MODES:
            raise ValueError(f"Unknown render mode: {mode}")
        self._text = text
        self._mode = mode
        self._ready = ready
        self._parser = MarkdownIt("commonmark").enable("table")
        self._view: BlockView | None = None
        self.render_count = 0
        if ready:
            self._render()

    @property
    def ready(self) -> bool:
        return self._ready

    def mark_ready(self) -> None:
        if not self._ready:
            self._ready = True
            self._render()

    def rendered_view(self) -> BlockView | None:
        if not self._ready:
            return None
        return self._view

    def source_text(self) -> str:
        return self._text

    def set_source(self, text: str) -> None:
        self._text = text
        if self._ready:
            self._render()

    def current_mode(self) -> str:
        return self._mode

    def set_mode(self, mode: str) -> None:
        if mode not in RENDER_MODES:
            raise ValueError(f"Unknown render mode: {mode}")
        if mode == self._mode:
            return
        LOGGER.debug("MarkdownEngine switching mode %s -> %s", self._mode, mode)
        self._mode = mode
        if self._ready:
            self._render()

    def _render(self) -> None:
        if self._view is not None:
            self._view.detach()
        if self._mode == "sv":
            self._view = build_source_view(self._text)
        else:
            self._view = build_view(self._text, parser=self._parser)
        self.render_count += 1


__all__ = [
    "DEFAULT_MODE",
    "MarkdownEngine",
    "RENDER_MODES",
    "build_source_view",
    "build_view",
]
