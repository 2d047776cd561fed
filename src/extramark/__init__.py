"""extramark - bookmark span editing for .docx documents.

Locates named bookmarks ("markers"), extracts the formatted content between
their anchors, rewrites it in place, and duplicates markers spanning one or
more paragraphs while keeping paragraph numbering and layout.
"""

__version__ = "0.1.0"

from extramark.compare import StyleDifference, style_differences, styles_equal
from extramark.duplicator import insert_marker_before
from extramark.exceptions import (
    DuplicationError,
    ExtraMarkError,
    InvalidPackageError,
    MarkerExistsError,
    MarkerNotFoundError,
    SpanMismatchError,
    SpanUnresolvedError,
    SpliceError,
)
from extramark.fragments import (
    Fragment,
    FragmentPosition,
    extract_fragments,
    extract_marker,
    fragments_text,
)
from extramark.markers import AnchorIdGenerator, identifier_of, list_markers, locate
from extramark.operations import (
    EditSession,
    copy_marker_content,
    copy_marker_content_n_times,
    get_marker_content,
    get_marker_position,
    get_marker_span,
    styles_equal_in_file,
    uses_numbering_style,
)
from extramark.spans import Span, resolve_span
from extramark.splicer import replace_span_content

__all__ = [
    "AnchorIdGenerator",
    "DuplicationError",
    "EditSession",
    "ExtraMarkError",
    "Fragment",
    "FragmentPosition",
    "InvalidPackageError",
    "MarkerExistsError",
    "MarkerNotFoundError",
    "Span",
    "SpanMismatchError",
    "SpanUnresolvedError",
    "SpliceError",
    "StyleDifference",
    "copy_marker_content",
    "copy_marker_content_n_times",
    "extract_fragments",
    "extract_marker",
    "fragments_text",
    "get_marker_content",
    "get_marker_position",
    "get_marker_span",
    "identifier_of",
    "insert_marker_before",
    "list_markers",
    "locate",
    "replace_span_content",
    "resolve_span",
    "style_differences",
    "styles_equal",
    "styles_equal_in_file",
    "uses_numbering_style",
]
