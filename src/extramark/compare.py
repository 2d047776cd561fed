"""Block style comparison between two markers."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from extramark.docx import STYLE_FIELDS, Document
from extramark.exceptions import SpanMismatchError
from extramark.spans import resolve_span


class StyleDifference(BaseModel):
    """One style field that differs between aligned blocks of two spans."""

    offset: int = Field(..., description="Block offset inside both spans (-1 for a length mismatch)")
    field: str
    first: Any = None
    second: Any = None

    def __str__(self) -> str:
        if self.offset < 0:
            return f"{self.field}: {self.first} != {self.second}"
        return f"block {self.offset}: {self.field}: {self.first!r} != {self.second!r}"


def styles_equal(doc: Document, name_a: str, name_b: str) -> bool:
    """True when aligned blocks of both spans have identical styles.

    Raises:
        MarkerNotFoundError: Either marker is absent or unresolvable.
        SpanMismatchError: The spans cover different numbers of blocks.
    """
    span_a = resolve_span(doc, name_a)
    span_b = resolve_span(doc, name_b)
    if span_a.block_count != span_b.block_count:
        raise SpanMismatchError(name_a, name_b, span_a.block_count, span_b.block_count)
    for block_a, block_b in zip(span_a.blocks(doc), span_b.blocks(doc)):
        if block_a.style != block_b.style:
            return False
    return True


def style_differences(doc: Document, name_a: str, name_b: str) -> list[StyleDifference]:
    """Every differing style field, block by block."""
    span_a = resolve_span(doc, name_a)
    span_b = resolve_span(doc, name_b)
    differences: list[StyleDifference] = []
    if span_a.block_count != span_b.block_count:
        differences.append(
            StyleDifference(
                offset=-1,
                field="block_count",
                first=span_a.block_count,
                second=span_b.block_count,
            )
        )
    for offset, (block_a, block_b) in enumerate(zip(span_a.blocks(doc), span_b.blocks(doc))):
        style_a, style_b = block_a.style, block_b.style
        for name in STYLE_FIELDS:
            value_a, value_b = getattr(style_a, name), getattr(style_b, name)
            if value_a != value_b:
                differences.append(
                    StyleDifference(offset=offset, field=name, first=value_a, second=value_b)
                )
    return differences
