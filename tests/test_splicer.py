"""Tests for rewriting span content in place."""

from __future__ import annotations

import pytest

from extramark.docx import Document, new_document
from extramark.docx._xml import BOOKMARK_END, BOOKMARK_START, PARAGRAPH_PROPERTIES, w_element
from extramark.exceptions import SpliceError
from extramark.fragments import Fragment, extract_fragments, extract_marker, fragments_text
from extramark.markers import AnchorIdGenerator, add_marker
from extramark.spans import Span, resolve_span
from extramark.splicer import replace_span_content


def _text_fragment(doc: Document, text: str) -> Fragment:
    """A fragment holding one plain run with ``text``."""
    scratch = doc.new_block()
    scratch.append_run(text)
    return Fragment(nodes=scratch.content_nodes())


def _marker_texts(doc: Document, *names: str) -> dict[str, str]:
    return {name: fragments_text(extract_marker(doc, name)) for name in names}


class TestRoundTrip:
    """Writing back freshly extracted fragments changes nothing."""

    def test_single_block(self, sample_doc: Document) -> None:
        span = resolve_span(sample_doc, "labelA")
        before = fragments_text(extract_fragments(sample_doc, span))

        replace_span_content(sample_doc, span, extract_fragments(sample_doc, span))

        assert fragments_text(extract_fragments(sample_doc, span)) == before

    def test_multi_block(self, multi_doc: Document) -> None:
        span = resolve_span(multi_doc, "labelA")
        before = fragments_text(extract_fragments(multi_doc, span))

        replace_span_content(multi_doc, span, extract_fragments(multi_doc, span))

        assert fragments_text(extract_fragments(multi_doc, span)) == before
        assert resolve_span(multi_doc, "labelA") == span


class TestReplace:
    def test_single_block_replacement(self, sample_doc: Document) -> None:
        span = resolve_span(sample_doc, "labelA")

        replace_span_content(sample_doc, span, [_text_fragment(sample_doc, "new text")])

        block = sample_doc.blocks()[3]
        tags = [child.tag for child in block.children()]
        assert tags[0] == BOOKMARK_START
        assert tags[-1] == BOOKMARK_END
        assert block.text == "new text"

    def test_fragments_distributed_in_order(self, multi_doc: Document) -> None:
        span = resolve_span(multi_doc, "labelA")
        fragments = [_text_fragment(multi_doc, t) for t in ("a", "b", "c")]

        replace_span_content(multi_doc, span, fragments)

        assert [b.text for b in span.blocks(multi_doc)] == ["a", "b", "c"]

    def test_surplus_fragments_join_last_block(
        self, multi_doc: Document, logged_warnings: list[str]
    ) -> None:
        span = resolve_span(multi_doc, "labelA")
        fragments = [_text_fragment(multi_doc, t) for t in ("a", "b", "c", "d")]

        replace_span_content(multi_doc, span, fragments)

        assert [b.text for b in span.blocks(multi_doc)] == ["a", "b", "cd"]
        assert any("merged the rest" in m for m in logged_warnings)

    def test_missing_fragments_leave_blocks_empty(self, multi_doc: Document) -> None:
        span = resolve_span(multi_doc, "labelA")

        replace_span_content(multi_doc, span, [_text_fragment(multi_doc, "only")])

        assert [b.text for b in span.blocks(multi_doc)] == ["only", "", ""]
        assert multi_doc.blocks()[0].text == "Intro"

    def test_block_styles_untouched(self, multi_doc: Document) -> None:
        span = resolve_span(multi_doc, "labelA")
        styles = [b.style for b in span.blocks(multi_doc)]

        replace_span_content(multi_doc, span, [])

        assert [b.style for b in span.blocks(multi_doc)] == styles
        assert all(b.children()[0].tag == PARAGRAPH_PROPERTIES for b in span.blocks(multi_doc))

    def test_content_outside_anchors_is_kept(self, multi_doc: Document) -> None:
        last = multi_doc.blocks()[3]
        last.append_run(" tail")
        span = resolve_span(multi_doc, "labelA")

        replace_span_content(multi_doc, span, [_text_fragment(multi_doc, t) for t in "xyz"])

        assert last.text == "z tail"

    def test_fragments_are_cloned(self, sample_doc: Document) -> None:
        span = resolve_span(sample_doc, "labelA")
        fragment = _text_fragment(sample_doc, "shared")

        replace_span_content(sample_doc, span, [fragment])

        assert not any(node is fragment.nodes[0] for node in sample_doc.blocks()[3].children())


class TestNonInterference:
    def test_other_markers_unchanged(self, multi_doc: Document) -> None:
        before = _marker_texts(multi_doc, "other")
        span = resolve_span(multi_doc, "labelA")

        replace_span_content(multi_doc, span, [_text_fragment(multi_doc, "x")])

        assert _marker_texts(multi_doc, "other") == before
        assert resolve_span(multi_doc, "other").as_tuple() == (4, 4)

    def test_nested_marker_survives_emptying(self, multi_doc: Document) -> None:
        second = multi_doc.blocks()[2]
        add_marker(multi_doc, "inner", second, second, AnchorIdGenerator.for_document(multi_doc))
        span = resolve_span(multi_doc, "labelA")

        replace_span_content(multi_doc, span, [])

        assert resolve_span(multi_doc, "inner").as_tuple() == (2, 2)

    def test_nested_marker_anchors_stay(self, multi_doc: Document) -> None:
        second = multi_doc.blocks()[2]
        add_marker(multi_doc, "inner", second, second, AnchorIdGenerator.for_document(multi_doc))
        span = resolve_span(multi_doc, "labelA")

        replace_span_content(multi_doc, span, extract_fragments(multi_doc, span))

        assert resolve_span(multi_doc, "inner").as_tuple() == (2, 2)
        assert _marker_texts(multi_doc, "inner", "labelA") == {
            "inner": "Second step",
            "labelA": "1. First step\nSecond step\nThird step",
        }

    def test_nested_marker_inside_one_block(self) -> None:
        doc = new_document()
        block = doc.append_block()
        block.append_run("one ")
        two = block.append_run("two").element
        block.append_run(" three")
        add_marker(doc, "outer", block, block, AnchorIdGenerator(1))
        block.insert_node(block.index_of(two), w_element("bookmarkStart", id="2", name="inner"))
        block.insert_node(block.index_of(two) + 1, w_element("bookmarkEnd", id="2"))
        span = resolve_span(doc, "outer")

        replace_span_content(doc, span, extract_fragments(doc, span))

        assert _marker_texts(doc, "outer", "inner") == {"outer": "one two three", "inner": "two"}
        assert block.text == "one two three"


class TestFailures:
    def test_missing_anchor(self, multi_doc: Document) -> None:
        span = resolve_span(multi_doc, "labelA")
        last = multi_doc.blocks()[3]
        last.remove_node(next(c for c in last.children() if c.tag == BOOKMARK_END))

        with pytest.raises(SpliceError, match="not found"):
            replace_span_content(multi_doc, span, [])

    def test_stale_span(self, multi_doc: Document) -> None:
        span = resolve_span(multi_doc, "labelA")
        multi_doc.insert_blocks_before(multi_doc.blocks()[0], [multi_doc.new_block()])

        with pytest.raises(SpliceError, match="stale"):
            replace_span_content(multi_doc, span, [])
        assert fragments_text(extract_marker(multi_doc, "labelA")).startswith("1. First step")

    def test_unknown_identifier(self, multi_doc: Document) -> None:
        span = Span(name="labelA", anchor_id="999", start=1, end=3)

        with pytest.raises(SpliceError):
            replace_span_content(multi_doc, span, [])
