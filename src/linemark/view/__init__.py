"""Rendered-view abstractions, bindings and the line-to-node mapper."""

from .node_mapper import LineMapping, NodeMapper
from .nodes import BlockNode, BlockView, RenderEngine, RenderedView, StaleNodeError, VisualNode

__all__ = [
    "BlockNode",
    "BlockView",
    "LineMapping",
    "NodeMapper",
    "RenderEngine",
    "RenderedView",
    "StaleNodeError",
    "VisualNode",
]
