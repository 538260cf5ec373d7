"""Tests for the markdown-it backed headless rendering binding."""

import pytest

from linemark.view.markdown_view import MarkdownEngine, build_source_view, build_view
from linemark.view.nodes import BlockNode, StaleNodeError


def test_build_view_flattens_blocks_in_document_order() -> None:
    view = build_view("# Title\n\nBody *text* here.\n\n> quoted line\n")

    kinds = [node.kind for node in view.nodes()]
    texts = [node.get_text() for node in view.nodes()]

    assert kinds == ["h1", "p", "blockquote", "p"]
    assert texts == ["Title", "Body text here.", "quoted line", "quoted line"]


def test_nested_nodes_point_at_their_wrapper() -> None:
    view = build_view("- one\n- two\n")
    li, paragraph = view.nodes()[0], view.nodes()[1]

    assert li.kind == "li" and li.is_wrapper
    assert paragraph.get_parent() is li
    assert not paragraph.is_wrapper
    assert li.get_parent() is None


def test_fenced_code_becomes_one_node() -> None:
    view = build_view("```python\nprint('hi')\nx = 1\n```\n")

    (node,) = view.nodes()
    assert node.kind == "pre"
    assert node.get_text() == "print('hi')\nx = 1"


def test_table_cells_are_nodes() -> None:
    view = build_view("| a | b |\n| --- | --- |\n| 1 | 2 |\n")

    assert [node.kind for node in view.nodes()] == ["th", "th", "td", "td"]
    assert [node.get_text() for node in view.nodes()] == ["a", "b", "1", "2"]


def test_source_view_has_one_node_per_line() -> None:
    view = build_source_view("a\n\nb")

    assert [node.get_text() for node in view.nodes()] == ["a", "", "b"]


def test_block_node_tags_and_detach() -> None:
    node = BlockNode("p", "text")
    node.add_tag("x")
    assert node.has_tag("x")
    node.remove_tag("x")
    assert not node.has_tag("x")

    node.detach()
    with pytest.raises(StaleNodeError):
        node.add_tag("x")


class TestMarkdownEngine:
    def test_not_ready_engine_has_no_view(self) -> None:
        engine = MarkdownEngine("text", ready=False)

        assert engine.rendered_view() is None
        engine.mark_ready()
        assert engine.rendered_view() is not None

    def test_rerender_detaches_previous_nodes(self) -> None:
        engine = MarkdownEngine("old")
        old_node = engine.rendered_view().nodes()[0]

        engine.set_source("new")

        assert not old_node.attached
        assert engine.rendered_view().nodes()[0].get_text() == "new"

    def test_mode_switch_rerenders(self) -> None:
        engine = MarkdownEngine("# Head", mode="wysiwyg")

        engine.set_mode("sv")

        assert engine.current_mode() == "sv"
        assert engine.rendered_view().nodes()[0].get_text() == "# Head"
        assert engine.render_count == 2

    def test_same_mode_is_a_no_op(self) -> None:
        engine = MarkdownEngine("x")
        engine.set_mode(engine.current_mode())

        assert engine.render_count == 1

    def test_rejects_unknown_mode(self) -> None:
        with pytest.raises(ValueError):
            MarkdownEngine("x", mode="preview")
