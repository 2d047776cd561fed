"""Paragraph-level style properties read from ``w:pPr``."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from pydantic import BaseModel, ConfigDict, Field

from extramark.docx._xml import PARAGRAPH_PROPERTIES, W_NS, qn, set_w_attr, w_attr


class BlockStyle(BaseModel):
    """The block-level formatting of one paragraph.

    Lengths are in twentieths of a point (twips) as stored in the package.
    Unset fields mean "inherited" and compare equal only to other unset
    fields.
    """

    model_config = ConfigDict(frozen=True)

    alignment: str | None = Field(None)
    spacing_before: int | None = Field(None)
    spacing_after: int | None = Field(None)
    line_spacing: int | None = Field(None)
    indent_left: int | None = Field(None)
    indent_right: int | None = Field(None)
    indent_first_line: int | None = Field(None)
    indent_hanging: int | None = Field(None)
    numbering_id: int | None = Field(None)
    numbering_level: int | None = Field(None)
    style_id: str | None = Field(None)

    @property
    def has_numbering(self) -> bool:
        """numId 0 explicitly switches numbering off."""
        return self.numbering_id is not None and self.numbering_id != 0


# Style fields compared by the style comparator, in report order.
STYLE_FIELDS: tuple[str, ...] = tuple(BlockStyle.model_fields)


def _int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _child(parent: ET.Element | None, name: str) -> ET.Element | None:
    if parent is None:
        return None
    return parent.find(f"{{{W_NS}}}{name}")


def read_block_style(ppr: ET.Element | None) -> BlockStyle:
    """Build a BlockStyle from a ``w:pPr`` element (or its absence)."""
    if ppr is None:
        return BlockStyle()

    jc = _child(ppr, "jc")
    spacing = _child(ppr, "spacing")
    ind = _child(ppr, "ind")
    num_pr = _child(ppr, "numPr")
    p_style = _child(ppr, "pStyle")

    indent_left = indent_right = None
    if ind is not None:
        indent_left = _int(w_attr(ind, "left") or w_attr(ind, "start"))
        indent_right = _int(w_attr(ind, "right") or w_attr(ind, "end"))

    num_id = _child(num_pr, "numId")
    ilvl = _child(num_pr, "ilvl")

    return BlockStyle(
        alignment=w_attr(jc, "val") if jc is not None else None,
        spacing_before=_int(w_attr(spacing, "before")) if spacing is not None else None,
        spacing_after=_int(w_attr(spacing, "after")) if spacing is not None else None,
        line_spacing=_int(w_attr(spacing, "line")) if spacing is not None else None,
        indent_left=indent_left,
        indent_right=indent_right,
        indent_first_line=_int(w_attr(ind, "firstLine")) if ind is not None else None,
        indent_hanging=_int(w_attr(ind, "hanging")) if ind is not None else None,
        numbering_id=_int(w_attr(num_id, "val")) if num_id is not None else None,
        numbering_level=_int(w_attr(ilvl, "val")) if ilvl is not None else None,
        style_id=w_attr(p_style, "val") if p_style is not None else None,
    )


# Schema order of the pPr children we write (CT_PPrBase sequence).
_PPR_ORDER = ("pStyle", "numPr", "spacing", "ind", "jc")


def _ensure_child(ppr: ET.Element, name: str) -> ET.Element:
    existing = _child(ppr, name)
    if existing is not None:
        return existing
    elem = ET.Element(f"{{{W_NS}}}{name}")
    rank = _PPR_ORDER.index(name)
    for pos, child in enumerate(list(ppr)):
        child_name = child.tag.rsplit("}", 1)[-1]
        if child_name in _PPR_ORDER and _PPR_ORDER.index(child_name) > rank:
            ppr.insert(pos, elem)
            return elem
        if child_name in ("rPr", "sectPr", "pPrChange"):
            ppr.insert(pos, elem)
            return elem
    ppr.append(elem)
    return elem


def write_block_style(ppr: ET.Element, style: BlockStyle) -> None:
    """Write every set field of ``style`` into ``ppr``; unset fields are left alone."""
    if style.style_id is not None:
        set_w_attr(_ensure_child(ppr, "pStyle"), "val", style.style_id)
    if style.numbering_id is not None or style.numbering_level is not None:
        num_pr = _ensure_child(ppr, "numPr")
        if style.numbering_level is not None:
            ilvl = num_pr.find(qn("w:ilvl"))
            if ilvl is None:
                ilvl = ET.Element(qn("w:ilvl"))
                num_pr.insert(0, ilvl)
            set_w_attr(ilvl, "val", str(style.numbering_level))
        if style.numbering_id is not None:
            num_id = num_pr.find(qn("w:numId"))
            if num_id is None:
                num_id = ET.SubElement(num_pr, qn("w:numId"))
            set_w_attr(num_id, "val", str(style.numbering_id))
    spacing_values = {
        "before": style.spacing_before,
        "after": style.spacing_after,
        "line": style.line_spacing,
    }
    if any(v is not None for v in spacing_values.values()):
        spacing = _ensure_child(ppr, "spacing")
        for key, value in spacing_values.items():
            if value is not None:
                set_w_attr(spacing, key, str(value))
    ind_values = {
        "left": style.indent_left,
        "right": style.indent_right,
        "firstLine": style.indent_first_line,
        "hanging": style.indent_hanging,
    }
    if any(v is not None for v in ind_values.values()):
        ind = _ensure_child(ppr, "ind")
        for key, value in ind_values.items():
            if value is not None:
                set_w_attr(ind, key, str(value))
    if style.alignment is not None:
        set_w_attr(_ensure_child(ppr, "jc"), "val", style.alignment)


def new_paragraph_properties() -> ET.Element:
    return ET.Element(PARAGRAPH_PROPERTIES)
