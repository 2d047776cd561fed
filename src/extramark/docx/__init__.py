"""Document model adapter for .docx packages.

Public API:
    load(path) -> Document: read a package into memory
    save(document, path) -> Path: write it back atomically
    new_document() -> Document: blank package
"""

from extramark.docx.document import Block, Document, Run, clone_node
from extramark.docx.package import load, new_document, save, to_bytes
from extramark.docx.styles import STYLE_FIELDS, BlockStyle

__all__ = [
    "STYLE_FIELDS",
    "Block",
    "BlockStyle",
    "Document",
    "Run",
    "clone_node",
    "load",
    "new_document",
    "save",
    "to_bytes",
]
