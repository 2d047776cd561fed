"""A small demo document with one marker, ``labelA``."""

from __future__ import annotations

from pathlib import Path

from extramark.docx import BlockStyle, Document, new_document, save
from extramark.markers import AnchorIdGenerator, add_marker

SAMPLE_MARKER = "labelA"


def build_sample_document() -> Document:
    """Build the demo document.

    Blocks: a centred bold title, an empty line, a first numbered reason,
    the second reason wrapped in ``labelA`` (numeral, bold heading and body
    as separate runs), and a closing paragraph.
    """
    doc = new_document()

    title = doc.append_block(BlockStyle(alignment="center"))
    title.append_run("Reasons for pursuing a master's degree", bold=True)

    doc.append_block()

    first = doc.append_block()
    first.append_run("1. Improve the ability to solve complex problems.")

    second = doc.append_block()
    second.append_run("2. ")
    second.append_run("Stay competitive and keep up with AI:", bold=True)
    second.append_run(
        " employers favour advanced degrees, and a structured programme is the "
        "fastest way to learn the current AI stack."
    )
    add_marker(doc, SAMPLE_MARKER, second, second, AnchorIdGenerator.for_document(doc))

    closing = doc.append_block()
    closing.append_run("This is another paragraph, used to check the document structure.")
    return doc


def write_sample_document(path: str | Path) -> Path:
    return save(build_sample_document(), path)
