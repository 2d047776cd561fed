"""File-level marker operations.

Each function loads a package, runs its edit in memory and, for edits,
saves to the output path only after every step succeeded. ``EditSession``
exposes the same edits for callers that chain several of them on one
document.
"""

from __future__ import annotations

from pathlib import Path
from types import TracebackType

from loguru import logger

from extramark import compare, duplicator, markers
from extramark.config import get_settings
from extramark.docx import Document, load, save
from extramark.exceptions import MarkerNotFoundError
from extramark.fragments import (
    extract_fragments,
    extract_marker,
    fragments_text,
    starts_with_numeral,
    strip_leading_numeral,
)
from extramark.markers import AnchorIdGenerator
from extramark.spans import Span, resolve_span
from extramark.splicer import replace_span_content


class EditSession:
    """One load -> edit -> save pipeline.

    The output is written when the ``with`` block exits cleanly; if it
    raises, nothing is written. The session owns the anchor identifier
    generator, so identifiers handed out by repeated edits never collide.

    Example:
        with EditSession("in.docx", "out.docx") as session:
            session.insert_marker_before("labelA", "labelB")
            session.copy_marker_content("labelA", "labelB")
    """

    def __init__(
        self,
        input_path: str | Path,
        output_path: str | Path | None = None,
        *,
        anchor_id_start: int | None = None,
        placeholder_text: str | None = None,
    ) -> None:
        self.input_path = Path(input_path)
        self.output_path = Path(output_path) if output_path is not None else None
        self._anchor_id_start = anchor_id_start
        self._placeholder_text = placeholder_text
        self._document: Document | None = None
        self._id_gen: AnchorIdGenerator | None = None

    def __enter__(self) -> EditSession:
        self._document = load(self.input_path)
        self._id_gen = AnchorIdGenerator.for_document(self._document, self._anchor_id_start)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None and self.output_path is not None:
            self.save()
        elif exc_type is not None:
            logger.debug("Edit of {} aborted, no output written", self.input_path)

    @property
    def document(self) -> Document:
        if self._document is None:
            raise RuntimeError("EditSession must be entered before use")
        return self._document

    @property
    def id_gen(self) -> AnchorIdGenerator:
        if self._id_gen is None:
            raise RuntimeError("EditSession must be entered before use")
        return self._id_gen

    def save(self, path: str | Path | None = None) -> Path:
        target = Path(path) if path is not None else self.output_path
        if target is None:
            raise ValueError("No output path given")
        return save(self.document, target)

    # -- edits ----------------------------------------------------------------

    def insert_marker_before(self, target_name: str, new_name: str) -> Span:
        return duplicator.insert_marker_before(
            self.document,
            target_name,
            new_name,
            self.id_gen,
            placeholder_text=self._placeholder_text,
        )

    def copy_marker_content(
        self,
        source_name: str,
        dest_name: str,
        *,
        strip_numbering: bool | None = None,
    ) -> None:
        """Replace ``dest_name``'s content with ``source_name``'s.

        The destination keeps its own paragraph properties. A leading
        ``N.`` numeral in the source text is dropped unless
        ``strip_numbering`` is False.
        """
        if strip_numbering is None:
            strip_numbering = get_settings().strip_numbering
        doc = self.document
        source = resolve_span(doc, source_name)
        dest = resolve_span(doc, dest_name)
        fragments = extract_fragments(doc, source)
        if strip_numbering:
            fragments = strip_leading_numeral(fragments)
        replace_span_content(doc, dest, fragments)
        logger.info("Copied content of {!r} into {!r}", source_name, dest_name)

    def copy_marker_content_n_times(self, source_name: str, n: int) -> list[str]:
        """Insert ``n`` copies of ``source_name`` before it.

        Copies are named ``source_name + "1"`` through ``source_name + str(n)``
        and hold the source's content verbatim. Each is inserted immediately
        before the source, so they end up in creation order above it.

        Returns:
            The names of the created markers.
        """
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        doc = self.document
        source = resolve_span(doc, source_name)
        originals = [fragment.clone() for fragment in extract_fragments(doc, source)]

        created: list[str] = []
        for index in range(1, n + 1):
            name = f"{source_name}{index}"
            span = self.insert_marker_before(source_name, name)
            replace_span_content(doc, span, originals)
            created.append(name)
        logger.info("Created {} copies of {!r}", n, source_name)
        return created

    # -- queries --------------------------------------------------------------

    def content(self, name: str) -> str | None:
        try:
            fragments = extract_marker(self.document, name)
        except MarkerNotFoundError:
            return None
        return fragments_text(fragments).strip()

    def position(self, name: str) -> int | None:
        return markers.locate(self.document, name)

    def span(self, name: str) -> tuple[int, int] | None:
        try:
            return resolve_span(self.document, name).as_tuple()
        except MarkerNotFoundError:
            return None

    def uses_numbering_style(self, name: str) -> bool:
        """True if any block of the span is a list item.

        A block counts as one when it has direct numbering, inherits
        numbering from its paragraph style, or its text starts with a
        plain ``N.`` numeral.
        """
        doc = self.document
        try:
            span = resolve_span(doc, name)
        except MarkerNotFoundError:
            return False
        for block in span.blocks(doc):
            style = block.style
            if style.numbering_id is not None:
                if style.has_numbering:
                    return True
            elif doc.paragraph_style_numbering(style.style_id):
                return True
            if starts_with_numeral(block.text):
                return True
        return False

    def styles_equal(self, name_a: str, name_b: str) -> bool:
        return compare.styles_equal(self.document, name_a, name_b)


def insert_marker_before(
    input_path: str | Path,
    output_path: str | Path,
    target_name: str,
    new_name: str,
) -> None:
    """Insert marker ``new_name`` before ``target_name`` and save to ``output_path``."""
    with EditSession(input_path, output_path) as session:
        session.insert_marker_before(target_name, new_name)
    logger.info("Inserted {!r} before {!r} in {}", new_name, target_name, output_path)


def copy_marker_content(
    input_path: str | Path,
    output_path: str | Path,
    source_name: str,
    dest_name: str,
    *,
    strip_numbering: bool | None = None,
) -> None:
    with EditSession(input_path, output_path) as session:
        session.copy_marker_content(source_name, dest_name, strip_numbering=strip_numbering)


def copy_marker_content_n_times(
    source_path: str | Path,
    target_path: str | Path,
    source_name: str,
    n: int,
) -> list[str]:
    """Write ``n`` copies of ``source_name`` into ``target_path``.

    With ``n == 0`` the target is an unchanged copy of the source.
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    with EditSession(source_path, target_path) as session:
        return session.copy_marker_content_n_times(source_name, n)


def get_marker_content(path: str | Path, name: str) -> str | None:
    """Text of the marker's span, blocks joined by newlines; None if absent."""
    with EditSession(path) as session:
        return session.content(name)


def get_marker_position(path: str | Path, name: str) -> int | None:
    with EditSession(path) as session:
        return session.position(name)


def get_marker_span(path: str | Path, name: str) -> tuple[int, int] | None:
    with EditSession(path) as session:
        return session.span(name)


def uses_numbering_style(path: str | Path, name: str) -> bool:
    with EditSession(path) as session:
        return session.uses_numbering_style(name)


def styles_equal_in_file(path: str | Path, name_a: str, name_b: str) -> bool:
    """Compare the block styles of two markers in one file.

    Raises:
        MarkerNotFoundError: Either marker is missing.
    """
    with EditSession(path) as session:
        return session.styles_equal(name_a, name_b)


__all__ = [
    "EditSession",
    "copy_marker_content",
    "copy_marker_content_n_times",
    "get_marker_content",
    "get_marker_position",
    "get_marker_span",
    "insert_marker_before",
    "styles_equal_in_file",
    "uses_numbering_style",
]
