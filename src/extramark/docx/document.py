"""In-memory document tree: blocks (paragraphs), runs and their styles.

The tree is the parsed main document part. ``Document``, ``Block`` and
``Run`` are thin views over ElementTree nodes; they hold no state of their
own, so block indices are always recomputed from the live tree.
"""

from __future__ import annotations

import copy
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from extramark.docx._xml import (
    BODY,
    PARAGRAPH,
    PARAGRAPH_PROPERTIES,
    RUN,
    RUN_PROPERTIES,
    SECTION_PROPERTIES,
    TEXT,
    W_NS,
    XML_NS,
    is_content,
    node_text,
    qn,
    w_attr,
)
from extramark.docx.styles import (
    BlockStyle,
    new_paragraph_properties,
    read_block_style,
    write_block_style,
)


def clone_node(node: ET.Element) -> ET.Element:
    """Deep copy a subtree. The copy is detached and shares nothing with the source."""
    return copy.deepcopy(node)


class Run:
    """A ``w:r`` element: one stretch of uniformly formatted text."""

    def __init__(self, element: ET.Element) -> None:
        self.element = element

    @property
    def text(self) -> str:
        return node_text(self.element)

    def set_text(self, text: str) -> None:
        """Replace the run's text with a single ``w:t``."""
        for child in list(self.element):
            if child.tag != RUN_PROPERTIES:
                self.element.remove(child)
        t = ET.SubElement(self.element, TEXT)
        t.text = text
        if text != text.strip():
            t.set(f"{{{XML_NS}}}space", "preserve")

    def _flag(self, name: str) -> bool:
        rpr = self.element.find(RUN_PROPERTIES)
        if rpr is None:
            return False
        flag = rpr.find(f"{{{W_NS}}}{name}")
        if flag is None:
            return False
        return w_attr(flag, "val") not in ("0", "false", "none")

    @property
    def bold(self) -> bool:
        return self._flag("b")

    @property
    def italic(self) -> bool:
        return self._flag("i")

    @property
    def underline(self) -> bool:
        return self._flag("u")

    def __repr__(self) -> str:
        return f"Run({self.text!r})"


class Block:
    """A body-level paragraph (``w:p``)."""

    def __init__(self, element: ET.Element) -> None:
        self.element = element

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Block) and other.element is self.element

    def __hash__(self) -> int:
        return id(self.element)

    def __repr__(self) -> str:
        return f"Block({self.text!r})"

    # -- navigation -------------------------------------------------------

    def children(self) -> list[ET.Element]:
        return list(self.element)

    def index_of(self, node: ET.Element) -> int:
        for pos, child in enumerate(self.element):
            if child is node:
                return pos
        raise ValueError("node is not a child of this block")

    def contains(self, node: ET.Element) -> bool:
        return any(child is node for child in self.element)

    def content_nodes(self) -> list[ET.Element]:
        """Children that carry content (no pPr, no zero-width markup)."""
        return [child for child in self.element if is_content(child)]

    def runs(self) -> list[Run]:
        """Runs in document order, including runs nested in hyperlinks etc."""
        result: list[Run] = []
        for child in self.content_nodes():
            if child.tag == RUN:
                result.append(Run(child))
            else:
                result.extend(Run(r) for r in child.iter(RUN))
        return result

    @property
    def text(self) -> str:
        return "".join(node_text(child) for child in self.content_nodes())

    # -- style --------------------------------------------------------------

    @property
    def properties(self) -> ET.Element | None:
        return self.element.find(PARAGRAPH_PROPERTIES)

    @property
    def style(self) -> BlockStyle:
        return read_block_style(self.properties)

    def apply_style(self, style: BlockStyle) -> None:
        write_block_style(self._ensure_properties(), style)

    def clone_style_from(self, other: Block) -> None:
        """Replace this block's ``w:pPr`` with a copy of ``other``'s.

        Section properties are not copied: a ``w:sectPr`` inside ``w:pPr``
        ends a section, and a clone must not start a new one.
        """
        current = self.properties
        if current is not None:
            self.element.remove(current)
        source = other.properties
        if source is None:
            return
        ppr = clone_node(source)
        for sect in ppr.findall(SECTION_PROPERTIES):
            ppr.remove(sect)
        self.element.insert(0, ppr)

    def _ensure_properties(self) -> ET.Element:
        ppr = self.properties
        if ppr is None:
            ppr = new_paragraph_properties()
            self.element.insert(0, ppr)
        return ppr

    # -- mutation -----------------------------------------------------------

    def first_content_position(self) -> int:
        """Child index right after ``w:pPr`` (0 when there is none)."""
        return 1 if self.properties is not None else 0

    def insert_node(self, index: int, node: ET.Element) -> None:
        self.element.insert(index, node)

    def append_node(self, node: ET.Element) -> None:
        self.element.append(node)

    def remove_node(self, node: ET.Element) -> None:
        self.element.remove(node)

    def replace_node(self, old: ET.Element, new: ET.Element) -> None:
        """Put ``new`` at ``old``'s position and detach ``old``."""
        position = self.index_of(old)
        self.element.remove(old)
        self.element.insert(position, new)

    def append_run(
        self,
        text: str,
        *,
        bold: bool = False,
        italic: bool = False,
        underline: bool = False,
    ) -> Run:
        r = ET.SubElement(self.element, RUN)
        if bold or italic or underline:
            rpr = ET.SubElement(r, RUN_PROPERTIES)
            if bold:
                ET.SubElement(rpr, qn("w:b"))
            if italic:
                ET.SubElement(rpr, qn("w:i"))
            if underline:
                u = ET.SubElement(rpr, qn("w:u"))
                u.set(qn("w:val"), "single")
        run = Run(r)
        run.set_text(text)
        return run


@dataclass
class Document:
    """The main document part of a package plus the parts around it.

    Attributes:
        root: ``w:document`` element.
        namespaces: prefix -> URI declarations of the source part.
        parts: every package part as raw bytes, in archive order.
        main_part: archive name of the main document part.
        styles: parsed ``styles.xml`` root, if the package has one.
    """

    root: ET.Element
    namespaces: dict[str, str] = field(default_factory=dict)
    parts: dict[str, bytes] = field(default_factory=dict)
    main_part: str = "word/document.xml"
    styles: ET.Element | None = None

    @property
    def body(self) -> ET.Element:
        body = self.root.find(BODY)
        if body is None:
            body = ET.SubElement(self.root, BODY)
        return body

    def body_nodes(self) -> list[ET.Element]:
        return list(self.body)

    def blocks(self) -> list[Block]:
        """Body-level paragraphs. Paragraphs inside tables are not blocks."""
        return [Block(child) for child in self.body if child.tag == PARAGRAPH]

    def iter_blocks(self) -> Iterator[tuple[int, Block]]:
        return enumerate(self.blocks())

    def block_index(self, block: Block) -> int:
        for pos, candidate in enumerate(self.blocks()):
            if candidate.element is block.element:
                return pos
        raise ValueError("block is not part of this document")

    def text(self) -> str:
        return "\n".join(block.text for block in self.blocks())

    # -- creation -------------------------------------------------------------

    def new_block(self) -> Block:
        """Create a detached, empty paragraph."""
        return Block(ET.Element(PARAGRAPH))

    def append_block(self, style: BlockStyle | None = None) -> Block:
        """Append a paragraph at the end of the body (before the final sectPr)."""
        block = self.new_block()
        if style is not None:
            block.apply_style(style)
        body = self.body
        children = list(body)
        if children and children[-1].tag == SECTION_PROPERTIES:
            body.insert(len(children) - 1, block.element)
        else:
            body.append(block.element)
        return block

    def insert_blocks_before(self, target: Block, blocks: Iterable[Block]) -> list[Block]:
        """Insert ``blocks`` as a contiguous run right before ``target``.

        Returns the blocks actually inserted, in order.
        """
        body = self.body
        position = self._body_position(target.element)
        inserted: list[Block] = []
        for offset, block in enumerate(blocks):
            body.insert(position + offset, block.element)
            inserted.append(block)
        return inserted

    def remove_block(self, block: Block) -> None:
        self.body.remove(block.element)

    def _body_position(self, node: ET.Element) -> int:
        for pos, child in enumerate(self.body):
            if child is node:
                return pos
        raise ValueError("node is not a direct child of the body")

    # -- styles part --------------------------------------------------------

    def paragraph_style_numbering(self, style_id: str | None) -> bool:
        """True when the named paragraph style (or one it is based on) is numbered."""
        if self.styles is None or style_id is None:
            return False
        by_id: dict[str, ET.Element] = {}
        for style in self.styles.findall(qn("w:style")):
            sid = w_attr(style, "styleId")
            if sid is not None:
                by_id[sid] = style
        seen: set[str] = set()
        current: str | None = style_id
        while current is not None and current not in seen:
            seen.add(current)
            style = by_id.get(current)
            if style is None:
                return False
            if read_block_style(style.find(PARAGRAPH_PROPERTIES)).has_numbering:
                return True
            based_on = style.find(qn("w:basedOn"))
            current = w_attr(based_on, "val") if based_on is not None else None
        return False
