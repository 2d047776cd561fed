"""Reading and writing the .docx zip container."""

from __future__ import annotations

import contextlib
import os
import tempfile
import xml.etree.ElementTree as ET
import zipfile
from pathlib import Path

from loguru import logger

from extramark.docx._xml import (
    OFFICE_DOCUMENT_REL_TYPE,
    PKG_REL_NS,
    declared_namespaces,
    register_namespaces,
    serialize_part,
)
from extramark.docx.document import Document
from extramark.exceptions import InvalidPackageError

PACKAGE_RELS = "_rels/.rels"
DEFAULT_MAIN_PART = "word/document.xml"
STYLES_PART = "word/styles.xml"


def _main_part_name(parts: dict[str, bytes]) -> str:
    """Find the main document part through the package relationships."""
    rels = parts.get(PACKAGE_RELS)
    if rels is not None:
        root = ET.fromstring(rels)
        for rel in root.findall(f"{{{PKG_REL_NS}}}Relationship"):
            if rel.get("Type") == OFFICE_DOCUMENT_REL_TYPE:
                target = rel.get("Target", "").lstrip("/")
                if target:
                    return target
    return DEFAULT_MAIN_PART


def _styles_part_name(main_part: str) -> str:
    folder = main_part.rsplit("/", 1)[0] if "/" in main_part else ""
    return f"{folder}/styles.xml" if folder else "styles.xml"


def load(path: str | Path) -> Document:
    """Load a .docx package into memory.

    Raises:
        InvalidPackageError: If the file is not a zip package, has no main
            document part, or the part is not well-formed XML.
    """
    path = Path(path)
    try:
        with zipfile.ZipFile(path, "r") as zf:
            parts = {info.filename: zf.read(info) for info in zf.infolist() if not info.is_dir()}
    except zipfile.BadZipFile as e:
        raise InvalidPackageError(str(path), f"not a zip package ({e})") from e

    try:
        main_part = _main_part_name(parts)
    except ET.ParseError as e:
        raise InvalidPackageError(str(path), f"malformed {PACKAGE_RELS}: {e}") from e
    data = parts.get(main_part)
    if data is None:
        raise InvalidPackageError(str(path), f"missing main document part {main_part}")

    try:
        namespaces = declared_namespaces(data)
        register_namespaces(namespaces)
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise InvalidPackageError(str(path), f"malformed {main_part}: {e}") from e

    styles = None
    styles_data = parts.get(_styles_part_name(main_part))
    if styles_data is not None:
        try:
            styles = ET.fromstring(styles_data)
        except ET.ParseError:
            logger.warning("Ignoring malformed styles part in {}", path)

    logger.debug("Loaded {} ({} parts, main part {})", path, len(parts), main_part)
    return Document(
        root=root,
        namespaces=namespaces,
        parts=parts,
        main_part=main_part,
        styles=styles,
    )


def to_bytes(document: Document) -> dict[str, bytes]:
    """Return the package parts with the main part re-serialized."""
    parts = dict(document.parts)
    parts[document.main_part] = serialize_part(document.root, document.namespaces)
    return parts


def save(document: Document, path: str | Path) -> Path:
    """Write the document to ``path`` atomically.

    The package is written to a temporary file next to ``path`` and moved
    into place only once complete, so a failed save never leaves a partial
    output file behind.
    """
    path = Path(path)
    parts = to_bytes(document)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as fh, zipfile.ZipFile(fh, "w", zipfile.ZIP_DEFLATED) as zf:
            for name, data in parts.items():
                zf.writestr(name, data)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise

    logger.debug("Saved {} ({} parts)", path, len(parts))
    return path


# ---------------------------------------------------------------------------
# Blank package
# ---------------------------------------------------------------------------

_CONTENT_TYPES = b"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
<Default Extension="xml" ContentType="application/xml"/>
<Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
<Override PartName="/word/styles.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"/>
<Override PartName="/word/numbering.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"/>
</Types>"""

_PACKAGE_RELS = b"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="word/document.xml"/>
</Relationships>"""

_DOCUMENT_RELS = b"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles" Target="styles.xml"/>
<Relationship Id="rId2" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/numbering" Target="numbering.xml"/>
</Relationships>"""

_DOCUMENT = b"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main" xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">
<w:body><w:sectPr><w:pgSz w:w="11906" w:h="16838"/><w:pgMar w:top="1440" w:right="1440" w:bottom="1440" w:left="1440" w:header="720" w:footer="720" w:gutter="0"/></w:sectPr></w:body>
</w:document>"""

_STYLES = b"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:styles xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
<w:style w:type="paragraph" w:default="1" w:styleId="Normal"><w:name w:val="Normal"/></w:style>
<w:style w:type="paragraph" w:styleId="ListParagraph"><w:name w:val="List Paragraph"/><w:basedOn w:val="Normal"/><w:pPr><w:ind w:left="720"/></w:pPr></w:style>
<w:style w:type="paragraph" w:styleId="ListNumber"><w:name w:val="List Number"/><w:basedOn w:val="Normal"/><w:pPr><w:numPr><w:numId w:val="1"/></w:numPr></w:pPr></w:style>
</w:styles>"""

_NUMBERING = b"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:numbering xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
<w:abstractNum w:abstractNumId="0"><w:multiLevelType w:val="hybridMultilevel"/>
<w:lvl w:ilvl="0"><w:start w:val="1"/><w:numFmt w:val="decimal"/><w:lvlText w:val="%1."/><w:lvlJc w:val="left"/><w:pPr><w:ind w:left="720" w:hanging="360"/></w:pPr></w:lvl>
<w:lvl w:ilvl="1"><w:start w:val="1"/><w:numFmt w:val="lowerLetter"/><w:lvlText w:val="%2."/><w:lvlJc w:val="left"/><w:pPr><w:ind w:left="1440" w:hanging="360"/></w:pPr></w:lvl>
</w:abstractNum>
<w:num w:numId="1"><w:abstractNumId w:val="0"/></w:num>
</w:numbering>"""


def new_document() -> Document:
    """Create an empty document backed by a minimal valid package."""
    parts = {
        "[Content_Types].xml": _CONTENT_TYPES,
        PACKAGE_RELS: _PACKAGE_RELS,
        "word/_rels/document.xml.rels": _DOCUMENT_RELS,
        DEFAULT_MAIN_PART: _DOCUMENT,
        STYLES_PART: _STYLES,
        "word/numbering.xml": _NUMBERING,
    }
    namespaces = declared_namespaces(_DOCUMENT)
    register_namespaces(namespaces)
    return Document(
        root=ET.fromstring(_DOCUMENT),
        namespaces=namespaces,
        parts=parts,
        main_part=DEFAULT_MAIN_PART,
        styles=ET.fromstring(_STYLES),
    )
