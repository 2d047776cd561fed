"""Human-readable dump of a document's blocks and markers."""

from __future__ import annotations

from extramark.docx import Document
from extramark.docx._xml import BOOKMARK_END, PARAGRAPH, w_attr
from extramark.markers import AnchorKind, block_anchors

_MAX_TEXT = 60


def _preview(text: str) -> str:
    if len(text) > _MAX_TEXT:
        return text[: _MAX_TEXT - 3] + "..."
    return text


def describe_document(doc: Document) -> str:
    """One line per block, followed by the anchors it opens and closes.

    Close anchors sitting directly in the body (outside any block) are
    listed on their own line so broken documents are easy to spot.
    """
    lines: list[str] = []
    blocks = doc.blocks()
    index = 0
    for node in doc.body_nodes():
        if node.tag == BOOKMARK_END:
            lines.append(f"     (body) close id={w_attr(node, 'id')}")
            continue
        if node.tag != PARAGRAPH:
            continue
        block = blocks[index]
        style = block.style
        flags = []
        if style.has_numbering:
            flags.append(f"num={style.numbering_id}/{style.numbering_level or 0}")
        if style.alignment:
            flags.append(style.alignment)
        suffix = f"  [{', '.join(flags)}]" if flags else ""
        lines.append(f"[{index:3d}] {_preview(block.text)!r}{suffix}")
        for anchor in block_anchors(block):
            if anchor.kind is AnchorKind.OPEN:
                lines.append(f"      open  {anchor.name} id={anchor.anchor_id}")
            else:
                lines.append(f"      close id={anchor.anchor_id}")
        index += 1
    return "\n".join(lines)
