"""Marker index: which blocks hold which bookmark anchors.

A marker is a ``w:bookmarkStart`` (the open anchor, carrying the name and
identifier) paired with a ``w:bookmarkEnd`` (the close anchor, carrying only
the identifier). Lookups here never raise for unknown names; callers decide
whether absence is an error.

Only anchors that are direct children of a body-level paragraph, or of the
body itself, are indexed. Anchors inside table cells or nested in
``w:hyperlink`` / ``w:ins`` wrappers are not seen, so such markers are
reported as absent.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from extramark.config import get_settings
from extramark.docx import Block, Document
from extramark.docx._xml import BOOKMARK_END, BOOKMARK_START, w_attr, w_element
from extramark.exceptions import MarkerExistsError


class AnchorKind(str, Enum):
    OPEN = "open"
    CLOSE = "close"


@dataclass(frozen=True)
class Anchor:
    """One bookmark anchor node."""

    kind: AnchorKind
    anchor_id: str
    name: str | None
    element: ET.Element

    @classmethod
    def from_element(cls, element: ET.Element) -> Anchor | None:
        if element.tag == BOOKMARK_START:
            return cls(
                AnchorKind.OPEN,
                w_attr(element, "id") or "",
                w_attr(element, "name") or "",
                element,
            )
        if element.tag == BOOKMARK_END:
            return cls(AnchorKind.CLOSE, w_attr(element, "id") or "", None, element)
        return None


@dataclass(frozen=True)
class MarkerInfo:
    """A named marker as listed by ``list_markers``."""

    name: str
    anchor_id: str
    block_index: int


def block_anchors(block: Block) -> list[Anchor]:
    """Anchors that are direct children of ``block``, in order."""
    anchors: list[Anchor] = []
    for child in block.element:
        anchor = Anchor.from_element(child)
        if anchor is not None:
            anchors.append(anchor)
    return anchors


def find_open_anchor(doc: Document, name: str) -> tuple[int, ET.Element] | None:
    """Return (block index, element) of the first open anchor named ``name``."""
    for index, block in doc.iter_blocks():
        for child in block.element:
            if child.tag == BOOKMARK_START and w_attr(child, "name") == name:
                return index, child
    return None


def locate(doc: Document, name: str, *, text_fallback: bool = False) -> int | None:
    """Index of the first block containing the open anchor named ``name``.

    Args:
        doc: Document to search.
        name: Marker name.
        text_fallback: When no anchor exists, fall back to the first block
            whose text contains ``name``. Last-resort recovery for documents
            whose bookmarks were lost; logged whenever it fires.

    Returns:
        Block index, or None when the marker is unknown.
    """
    found = find_open_anchor(doc, name)
    if found is not None:
        return found[0]
    if text_fallback:
        for index, block in doc.iter_blocks():
            if name in block.text:
                logger.warning(
                    "Marker {!r} has no anchor; matched block {} by text instead", name, index
                )
                return index
    return None


def identifier_of(doc: Document, name: str) -> str | None:
    """Identifier of the open anchor named ``name``, or None."""
    found = find_open_anchor(doc, name)
    if found is None:
        return None
    return w_attr(found[1], "id")


def list_markers(doc: Document) -> list[MarkerInfo]:
    """Every named open anchor in block order."""
    markers: list[MarkerInfo] = []
    for index, block in doc.iter_blocks():
        for anchor in block_anchors(block):
            if anchor.kind is AnchorKind.OPEN:
                markers.append(MarkerInfo(anchor.name or "", anchor.anchor_id, index))
    return markers


class AnchorIdGenerator:
    """Monotonic identifier source scoped to one editing session.

    Seed it from the document being edited so new identifiers never collide
    with existing ones; two sessions never share a generator.
    """

    def __init__(self, start: int = 0) -> None:
        self._next = start

    @classmethod
    def for_document(cls, doc: Document, start: int | None = None) -> AnchorIdGenerator:
        floor = get_settings().anchor_id_start if start is None else start
        highest = floor - 1
        for elem in doc.body.iter():
            if elem.tag in (BOOKMARK_START, BOOKMARK_END):
                try:
                    highest = max(highest, int(w_attr(elem, "id") or ""))
                except ValueError:
                    continue
        return cls(highest + 1)

    def peek(self) -> int:
        return self._next

    def next_id(self) -> str:
        value = self._next
        self._next += 1
        return str(value)


def attach_anchors(first: Block, last: Block, name: str, anchor_id: str) -> tuple[ET.Element, ET.Element]:
    """Bracket the content from ``first`` to ``last`` with a new anchor pair.

    The open anchor goes in front of every node of ``first`` except its
    paragraph properties; the close anchor goes after the content of
    ``last``. ``first`` and ``last`` may be the same block.
    """
    open_anchor = w_element("bookmarkStart", id=anchor_id, name=name)
    close_anchor = w_element("bookmarkEnd", id=anchor_id)
    first.insert_node(first.first_content_position(), open_anchor)
    last.append_node(close_anchor)
    logger.debug("Attached anchors for {!r} (id {})", name, anchor_id)
    return open_anchor, close_anchor


def add_marker(
    doc: Document,
    name: str,
    first: Block,
    last: Block | None,
    id_gen: AnchorIdGenerator,
) -> str:
    """Wrap existing blocks ``first``..``last`` in a new marker.

    Returns:
        The new marker's identifier.

    Raises:
        MarkerExistsError: If ``name`` is already used.
    """
    if find_open_anchor(doc, name) is not None:
        raise MarkerExistsError(name)
    anchor_id = id_gen.next_id()
    attach_anchors(first, last if last is not None else first, name, anchor_id)
    return anchor_id
