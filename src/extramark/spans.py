"""Span resolution: from a marker name to the block range it covers.

The close anchor of a bookmark is not guaranteed to live in the same block
as its open anchor, so resolution searches the whole document:

1. the open anchor's later siblings in its own block,
2. every later block, in document order,
3. every earlier block (and the open block's earlier siblings), for
   malformed documents,
4. close anchors placed directly in the body, outside any block.

The first match wins. Spans are recomputed on every query because edits
shift block indices.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass

from loguru import logger

from extramark.docx import Block, Document
from extramark.docx._xml import BOOKMARK_END, PARAGRAPH, w_attr
from extramark.exceptions import MarkerNotFoundError, SpanUnresolvedError
from extramark.markers import find_open_anchor


@dataclass(frozen=True)
class Span:
    """Inclusive block range ``[start, end]`` covered by a marker.

    Attributes:
        name: Marker name.
        anchor_id: Identifier shared by the open and close anchors.
        start: Index of the first block.
        end: Index of the last block.
        suspect: True when the anchors were found out of order and the
            range was recovered by swapping them.
    """

    name: str
    anchor_id: str
    start: int
    end: int
    suspect: bool = False

    @property
    def block_count(self) -> int:
        return self.end - self.start + 1

    @property
    def is_single_block(self) -> bool:
        return self.start == self.end

    def as_tuple(self) -> tuple[int, int]:
        return self.start, self.end

    def blocks(self, doc: Document) -> list[Block]:
        return doc.blocks()[self.start : self.end + 1]


@dataclass(frozen=True)
class AnchorLocation:
    """Where an anchor node sits.

    ``block_index`` is the containing block, or for an anchor placed
    directly in the body, the last block before it (clamped to 0).
    ``order`` sorts locations in document order.
    """

    element: ET.Element
    block_index: int
    in_block: bool
    order: tuple[int, int]


def _is_close(node: ET.Element, anchor_id: str) -> bool:
    return node.tag == BOOKMARK_END and w_attr(node, "id") == anchor_id


def _body_layout(doc: Document) -> tuple[list[ET.Element], dict[int, int]]:
    """Body children plus a map of block element id -> body position."""
    nodes = doc.body_nodes()
    positions = {id(node): pos for pos, node in enumerate(nodes) if node.tag == PARAGRAPH}
    return nodes, positions


def _in_block(
    doc_blocks: list[Block],
    positions: dict[int, int],
    block_index: int,
    element: ET.Element,
) -> AnchorLocation:
    block = doc_blocks[block_index]
    return AnchorLocation(
        element=element,
        block_index=block_index,
        in_block=True,
        order=(positions[id(block.element)], block.index_of(element)),
    )


def find_close_anchor(
    doc: Document,
    anchor_id: str,
    open_block: int,
    open_element: ET.Element,
) -> AnchorLocation | None:
    """Locate the close anchor for ``anchor_id`` in resolution order."""
    blocks = doc.blocks()
    nodes, positions = _body_layout(doc)
    start_block = blocks[open_block]
    children = start_block.children()
    open_pos = start_block.index_of(open_element)

    for node in children[open_pos + 1 :]:
        if _is_close(node, anchor_id):
            return _in_block(blocks, positions, open_block, node)

    for index in range(open_block + 1, len(blocks)):
        for node in blocks[index].element:
            if _is_close(node, anchor_id):
                return _in_block(blocks, positions, index, node)

    for index in range(open_block):
        for node in blocks[index].element:
            if _is_close(node, anchor_id):
                return _in_block(blocks, positions, index, node)
    for node in children[:open_pos]:
        if _is_close(node, anchor_id):
            return _in_block(blocks, positions, open_block, node)

    preceding_blocks = 0
    for pos, node in enumerate(nodes):
        if node.tag == PARAGRAPH:
            preceding_blocks += 1
        elif _is_close(node, anchor_id):
            return AnchorLocation(
                element=node,
                block_index=max(preceding_blocks - 1, 0),
                in_block=False,
                order=(pos, 0),
            )
    return None


def open_anchor_location(doc: Document, name: str) -> AnchorLocation | None:
    found = find_open_anchor(doc, name)
    if found is None:
        return None
    blocks = doc.blocks()
    _, positions = _body_layout(doc)
    return _in_block(blocks, positions, found[0], found[1])


def resolve_span(doc: Document, name: str) -> Span:
    """Resolve the block range of marker ``name``.

    Raises:
        MarkerNotFoundError: No open anchor carries ``name``.
        SpanUnresolvedError: The open anchor exists but no close anchor with
            its identifier exists anywhere in the document.
    """
    opened = open_anchor_location(doc, name)
    if opened is None:
        raise MarkerNotFoundError(name)
    anchor_id = w_attr(opened.element, "id") or ""

    closed = find_close_anchor(doc, anchor_id, opened.block_index, opened.element)
    if closed is None:
        raise SpanUnresolvedError(name, anchor_id)

    start, end = opened.block_index, closed.block_index
    suspect = False
    if start > end or (start == end and closed.order < opened.order):
        logger.warning(
            "Marker {!r} (id {}): close anchor precedes open anchor "
            "(blocks {} and {}); using the swapped range",
            name,
            anchor_id,
            opened.block_index,
            closed.block_index,
        )
        start, end = min(start, end), max(start, end)
        suspect = True

    return Span(name=name, anchor_id=anchor_id, start=start, end=end, suspect=suspect)


def span_boundaries(doc: Document, span: Span) -> tuple[AnchorLocation, AnchorLocation] | None:
    """The span's two anchors in document order, or None if either is gone.

    The first element is the left boundary (content starts after it), the
    second the right boundary (content ends before it). For well-formed
    markers these are the open and close anchors respectively.
    """
    opened = open_anchor_location(doc, span.name)
    if opened is None or (w_attr(opened.element, "id") or "") != span.anchor_id:
        return None
    closed = find_close_anchor(doc, span.anchor_id, opened.block_index, opened.element)
    if closed is None:
        return None
    if closed.order < opened.order:
        return closed, opened
    return opened, closed


def block_slice(block: Block, left: AnchorLocation, right: AnchorLocation) -> tuple[int, int]:
    """Child index range ``[lo, hi)`` of ``block`` that lies inside the span."""
    children = block.children()
    lo, hi = block.first_content_position(), len(children)
    for pos, child in enumerate(children):
        if left.in_block and child is left.element:
            lo = pos + 1
        elif right.in_block and child is right.element:
            hi = pos
    return lo, max(lo, hi)
