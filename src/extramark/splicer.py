"""Content splicing: rewrite what sits between a marker's two anchors."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Sequence

from loguru import logger

from extramark.docx import Block, Document
from extramark.docx._xml import is_content
from extramark.exceptions import SpliceError
from extramark.fragments import Fragment
from extramark.spans import AnchorLocation, Span, block_slice, span_boundaries


def _distribute(fragments: Sequence[Fragment], count: int, name: str) -> list[list[ET.Element]]:
    """Assign fragment i to block i; surplus fragments join the last block."""
    slots: list[list[ET.Element]] = [[] for _ in range(count)]
    for index, fragment in enumerate(fragments):
        slots[min(index, count - 1)].extend(fragment.nodes)
    if len(fragments) > count:
        logger.warning(
            "Marker {!r} spans {} blocks but got {} fragments; merged the rest into the last block",
            name,
            count,
            len(fragments),
        )
    return slots


def _splice_block(
    block: Block, nodes: list[ET.Element], left: AnchorLocation, right: AnchorLocation
) -> int:
    """Swap the content nodes inside the span for ``nodes``.

    Old and new nodes are paired in order and each new node takes its
    partner's place, so range markup between them keeps its position.
    Unpaired old nodes are dropped; unpaired new nodes go at the end of the
    span's part of the block. Returns the number of nodes removed.
    """
    lo, hi = block_slice(block, left, right)
    old = [node for node in block.children()[lo:hi] if is_content(node)]
    for old_node, new_node in zip(old, nodes):
        block.replace_node(old_node, new_node)
    for old_node in old[len(nodes):]:
        block.remove_node(old_node)
    _, end = block_slice(block, left, right)
    for offset, node in enumerate(nodes[len(old):]):
        block.insert_node(end + offset, node)
    return len(old)


def replace_span_content(doc: Document, span: Span, fragments: Sequence[Fragment]) -> None:
    """Replace the content of ``span`` with ``fragments``.

    Fragment i goes into block i of the span. Inside a block the new nodes
    take the places of the old content nodes in order, so the anchors of
    other markers keep bracketing the same positions; writing back content
    extracted from the same span leaves every marker as it was. Paragraph
    properties are never touched. Fragments are cloned first.

    Raises:
        SpliceError: The anchors are gone or no longer cover ``span``'s
            blocks, or the tree could not be updated. The document is left
            as it was.
    """
    bounds = span_boundaries(doc, span)
    if bounds is None:
        raise SpliceError(span.name, f"anchors with id {span.anchor_id} not found")
    left, right = bounds
    covered = (
        min(left.block_index, right.block_index),
        max(left.block_index, right.block_index),
    )
    if covered != span.as_tuple():
        raise SpliceError(
            span.name,
            f"span {span.as_tuple()} is stale, anchors now cover blocks {covered}",
        )

    blocks = span.blocks(doc)
    slots = _distribute([fragment.clone() for fragment in fragments], len(blocks), span.name)
    snapshot = [(block, block.children()) for block in blocks]

    try:
        removed = sum(
            _splice_block(block, nodes, left, right) for block, nodes in zip(blocks, slots)
        )
    except (ValueError, TypeError) as e:
        for block, children in snapshot:
            block.element[:] = children
        raise SpliceError(span.name, str(e)) from e

    logger.debug(
        "Spliced marker {!r}: removed {} nodes, inserted {} fragments",
        span.name,
        removed,
        len(fragments),
    )
