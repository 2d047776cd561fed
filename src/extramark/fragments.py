"""Content extraction: a span's content as per-block fragments."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from extramark.docx import Document, Run, clone_node
from extramark.docx._xml import RUN, TEXT, XML_NS, is_content, node_text
from extramark.exceptions import SpanUnresolvedError
from extramark.spans import Span, block_slice, open_anchor_location, resolve_span, span_boundaries

# "2. Foo" -> numeral "2. ". Only the first block of a span is considered.
LEADING_NUMERAL_RE = re.compile(r"^\s*\d+\.\s*")


def starts_with_numeral(text: str) -> bool:
    """True when ``text`` opens with a plain-text list numeral like ``3.``."""
    return LEADING_NUMERAL_RE.match(text) is not None


class FragmentPosition(str, Enum):
    """Where a fragment's source block sits inside its span."""

    ONLY = "only"
    FIRST = "first"
    MIDDLE = "middle"
    LAST = "last"

    @classmethod
    def for_offset(cls, offset: int, count: int) -> FragmentPosition:
        if count == 1:
            return cls.ONLY
        if offset == 0:
            return cls.FIRST
        if offset == count - 1:
            return cls.LAST
        return cls.MIDDLE


@dataclass
class Fragment:
    """The content of one span block.

    ``nodes`` are live references into the source tree straight after
    extraction. Call ``clone`` before handing them to another tree.
    """

    nodes: list[ET.Element] = field(default_factory=list)
    position: FragmentPosition = FragmentPosition.ONLY
    offset: int = 0

    @property
    def text(self) -> str:
        return "".join(node_text(node) for node in self.nodes)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def runs(self) -> list[Run]:
        result: list[Run] = []
        for node in self.nodes:
            if node.tag == RUN:
                result.append(Run(node))
            else:
                result.extend(Run(r) for r in node.iter(RUN))
        return result

    def clone(self) -> Fragment:
        """Deep copy the nodes into a detached subtree owned by the copy."""
        return Fragment(
            nodes=[clone_node(node) for node in self.nodes],
            position=self.position,
            offset=self.offset,
        )

    def strip_leading_numeral(self) -> Fragment:
        """Return a clone without a leading ``N.`` numeral.

        The numeral may be split over several runs (``"2"`` + ``". "``);
        characters are removed from the text elements in order until the
        whole numeral token is gone.
        """
        copy = self.clone()
        texts = [elem for node in copy.nodes for elem in node.iter(TEXT)]
        match = LEADING_NUMERAL_RE.match("".join(elem.text or "" for elem in texts))
        if match is None:
            return copy

        remaining = match.end()
        for elem in texts:
            if remaining == 0:
                break
            value = elem.text or ""
            cut = min(remaining, len(value))
            elem.text = value[cut:]
            remaining -= cut
            if elem.text != elem.text.strip():
                elem.set(f"{{{XML_NS}}}space", "preserve")
        logger.debug("Stripped numeral {!r}", match.group(0))
        return copy


def extract_fragments(doc: Document, span: Span) -> list[Fragment]:
    """Collect the content of ``span`` block by block.

    Single-block spans yield the nodes strictly between the two anchors.
    Multi-block spans yield the tail of the first block, every middle block
    whole, and the head of the last block. Bookmark, comment and permission
    range markers are skipped; the document is not modified.

    Raises:
        SpanUnresolvedError: One of the span's anchors is no longer present.
    """
    bounds = span_boundaries(doc, span)
    if bounds is None:
        raise SpanUnresolvedError(span.name, span.anchor_id)
    left, right = bounds

    blocks = span.blocks(doc)
    fragments: list[Fragment] = []
    for offset, block in enumerate(blocks):
        lo, hi = block_slice(block, left, right)
        nodes = [node for node in block.children()[lo:hi] if is_content(node)]
        fragments.append(
            Fragment(
                nodes=nodes,
                position=FragmentPosition.for_offset(offset, len(blocks)),
                offset=offset,
            )
        )
    return fragments


def extract_marker(doc: Document, name: str) -> list[Fragment]:
    """Resolve ``name`` and extract its fragments.

    A marker whose close anchor is missing but whose open block holds no
    content is "present but empty" and yields ``[]``. Otherwise a missing
    close anchor is an error, as is an unknown name.
    """
    try:
        span = resolve_span(doc, name)
    except SpanUnresolvedError:
        opened = open_anchor_location(doc, name)
        if opened is not None and not doc.blocks()[opened.block_index].content_nodes():
            logger.debug("Marker {!r} has no close anchor and no content", name)
            return []
        raise
    return extract_fragments(doc, span)


def fragments_text(fragments: Iterable[Fragment]) -> str:
    """Plain text of the fragments, one line per block."""
    return "\n".join(fragment.text for fragment in fragments)


def strip_leading_numeral(fragments: list[Fragment]) -> list[Fragment]:
    """Clone ``fragments``, removing a leading numeral from the first one."""
    return [
        fragment.strip_leading_numeral() if index == 0 else fragment.clone()
        for index, fragment in enumerate(fragments)
    ]
