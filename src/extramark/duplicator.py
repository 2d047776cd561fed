"""Marker duplication: a new marker shaped like an existing one."""

from __future__ import annotations

from loguru import logger

from extramark.config import get_settings
from extramark.docx import Block, Document
from extramark.exceptions import DuplicationError, MarkerExistsError
from extramark.markers import AnchorIdGenerator, attach_anchors, find_open_anchor
from extramark.spans import Span, resolve_span


def _build_blocks(doc: Document, reference: list[Block], placeholder: str) -> list[Block]:
    """Detached blocks styled position-for-position after ``reference``."""
    blocks: list[Block] = []
    for ref in reference:
        block = doc.new_block()
        block.clone_style_from(ref)
        if placeholder:
            block.append_run(placeholder)
        blocks.append(block)
    return blocks


def insert_marker_before(
    doc: Document,
    reference_name: str,
    new_name: str,
    id_gen: AnchorIdGenerator,
    *,
    placeholder_text: str | None = None,
) -> Span:
    """Create marker ``new_name`` right before marker ``reference_name``.

    The new marker spans as many blocks as the reference, each new block
    carrying a copy of the matching reference block's paragraph properties
    and a placeholder run. The reference span keeps its content and length;
    its start index moves down by the number of inserted blocks.

    Returns:
        The span of the new marker.

    Raises:
        MarkerNotFoundError: ``reference_name`` does not exist.
        SpanUnresolvedError: ``reference_name`` has no close anchor.
        MarkerExistsError: ``new_name`` is already used.
        DuplicationError: The new blocks could not be inserted. Nothing is
            left behind in the document.
    """
    if find_open_anchor(doc, new_name) is not None:
        raise MarkerExistsError(new_name)

    reference = resolve_span(doc, reference_name)
    reference_blocks = reference.blocks(doc)
    if not reference_blocks:
        raise DuplicationError(new_name, f"marker {reference_name!r} covers no blocks")

    if placeholder_text is None:
        placeholder_text = get_settings().placeholder_text
    new_blocks = _build_blocks(doc, reference_blocks, placeholder_text)

    anchor_id = id_gen.next_id()
    attach_anchors(new_blocks[0], new_blocks[-1], new_name, anchor_id)

    try:
        doc.insert_blocks_before(reference_blocks[0], new_blocks)
    except ValueError as e:
        body = doc.body
        for block in new_blocks:
            if any(child is block.element for child in body):
                doc.remove_block(block)
        raise DuplicationError(new_name, str(e)) from e

    start = reference.start
    logger.debug(
        "Inserted {} block(s) for {!r} (id {}) before {!r}",
        len(new_blocks),
        new_name,
        anchor_id,
        reference_name,
    )
    return Span(
        name=new_name,
        anchor_id=anchor_id,
        start=start,
        end=start + len(new_blocks) - 1,
    )
