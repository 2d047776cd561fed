"""WordprocessingML namespace and element helpers."""

from __future__ import annotations

import io
import re
import xml.etree.ElementTree as ET

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
MC_NS = "http://schemas.openxmlformats.org/markup-compatibility/2006"
XML_NS = "http://www.w3.org/XML/1998/namespace"
PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
OFFICE_DOCUMENT_REL_TYPE = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"
)

_PREFIXES = {
    "w": W_NS,
    "r": R_NS,
    "mc": MC_NS,
    "w14": "http://schemas.microsoft.com/office/word/2010/wordml",
    "w15": "http://schemas.microsoft.com/office/word/2012/wordml",
    "wp": "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing",
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
}

for _prefix, _uri in _PREFIXES.items():
    ET.register_namespace(_prefix, _uri)

# ElementTree refuses to register prefixes that look like its own ns0, ns1...
_RESERVED_PREFIX_RE = re.compile(r"ns\d+$")

BOOKMARK_START = f"{{{W_NS}}}bookmarkStart"
BOOKMARK_END = f"{{{W_NS}}}bookmarkEnd"
PARAGRAPH = f"{{{W_NS}}}p"
PARAGRAPH_PROPERTIES = f"{{{W_NS}}}pPr"
RUN = f"{{{W_NS}}}r"
RUN_PROPERTIES = f"{{{W_NS}}}rPr"
TEXT = f"{{{W_NS}}}t"
TAB = f"{{{W_NS}}}tab"
BODY = f"{{{W_NS}}}body"
SECTION_PROPERTIES = f"{{{W_NS}}}sectPr"

# Zero-width range markup. These nodes are never content: extraction skips
# them and splicing leaves them in place.
RANGE_MARKUP = frozenset(
    {
        BOOKMARK_START,
        BOOKMARK_END,
        f"{{{W_NS}}}commentRangeStart",
        f"{{{W_NS}}}commentRangeEnd",
        f"{{{W_NS}}}permStart",
        f"{{{W_NS}}}permEnd",
    }
)
PROOFING_MARKUP = frozenset({f"{{{W_NS}}}proofErr"})


def qn(tag: str) -> str:
    """Turn a prefixed name like ``w:p`` into Clark notation."""
    prefix, _, local = tag.partition(":")
    return f"{{{_PREFIXES[prefix]}}}{local}"


def w_attr(elem: ET.Element, name: str) -> str | None:
    """Read a ``w:``-qualified attribute."""
    return elem.get(f"{{{W_NS}}}{name}")


def set_w_attr(elem: ET.Element, name: str, value: str) -> None:
    """Set a ``w:``-qualified attribute."""
    elem.set(f"{{{W_NS}}}{name}", value)


def w_element(tag: str, /, **attrs: str) -> ET.Element:
    """Create a detached ``w:`` element with ``w:``-qualified attributes."""
    elem = ET.Element(f"{{{W_NS}}}{tag}")
    for key, value in attrs.items():
        set_w_attr(elem, key, value)
    return elem


def is_content(node: ET.Element) -> bool:
    """True for nodes that carry document content inside a paragraph."""
    return (
        node.tag != PARAGRAPH_PROPERTIES
        and node.tag not in RANGE_MARKUP
        and node.tag not in PROOFING_MARKUP
    )


def node_text(node: ET.Element) -> str:
    """Visible text of a paragraph child (run, hyperlink, insertion...)."""
    parts: list[str] = []
    for elem in node.iter():
        if elem.tag == TEXT:
            parts.append(elem.text or "")
        elif elem.tag == TAB:
            parts.append("\t")
    return "".join(parts)


def declared_namespaces(data: bytes) -> dict[str, str]:
    """Collect every prefix -> URI declaration in an XML part."""
    namespaces: dict[str, str] = {}
    for _event, (prefix, uri) in ET.iterparse(io.BytesIO(data), events=("start-ns",)):
        namespaces.setdefault(prefix, uri)
    return namespaces


def register_namespaces(namespaces: dict[str, str]) -> None:
    """Register source prefixes so serialization keeps them."""
    for prefix, uri in namespaces.items():
        if not prefix or _RESERVED_PREFIX_RE.match(prefix):
            continue
        ET.register_namespace(prefix, uri)


def serialize_part(root: ET.Element, namespaces: dict[str, str]) -> bytes:
    """Serialize an XML part, keeping declarations ElementTree would drop.

    ElementTree only emits namespace declarations for namespaces used by
    element or attribute names. Prefixes referenced solely from
    ``mc:Ignorable`` must still be declared or Word rejects the part, so
    those declarations are re-added as plain attributes for the duration of
    the write.
    """
    used: set[str] = set()
    for elem in root.iter():
        if elem.tag.startswith("{"):
            used.add(elem.tag[1:].split("}", 1)[0])
        for key in elem.keys():
            if key.startswith("{"):
                used.add(key[1:].split("}", 1)[0])

    extra_attrs: list[str] = []
    for prefix, uri in namespaces.items():
        if not prefix or uri in used or _RESERVED_PREFIX_RE.match(prefix):
            continue
        key = f"xmlns:{prefix}"
        if key not in root.attrib:
            root.set(key, uri)
            extra_attrs.append(key)

    try:
        return ET.tostring(root, encoding="UTF-8", xml_declaration=True)
    finally:
        for key in extra_attrs:
            del root.attrib[key]
