"""Tests for the file-level operations and EditSession."""

from __future__ import annotations

from pathlib import Path

import pytest

from extramark import operations
from extramark.docx import BlockStyle, load, save
from extramark.exceptions import MarkerExistsError, MarkerNotFoundError, SpanMismatchError
from extramark.markers import AnchorIdGenerator, add_marker
from extramark.operations import EditSession

LABEL_A_TEXT = (
    "2. Stay competitive and keep up with AI: employers favour advanced degrees, "
    "and a structured programme is the fastest way to learn the current AI stack."
)
MULTI_TEXT = "1. First step\nSecond step\nThird step"


class TestInsertAndCopy:
    """Insert a marker, then copy the reference content into it."""

    def test_insert_marker_before(self, sample_path: Path, tmp_path: Path) -> None:
        out = tmp_path / "temp.docx"

        operations.insert_marker_before(sample_path, out, "labelA", "labelB")

        assert operations.get_marker_position(out, "labelB") == 3
        assert operations.get_marker_position(out, "labelA") == 4
        assert operations.get_marker_span(out, "labelB") == (3, 3)
        # input untouched
        assert operations.get_marker_position(sample_path, "labelB") is None

    def test_copy_strips_numeral(self, sample_path: Path, tmp_path: Path) -> None:
        temp, result = tmp_path / "temp.docx", tmp_path / "result.docx"
        operations.insert_marker_before(sample_path, temp, "labelA", "labelB")

        operations.copy_marker_content(temp, result, "labelA", "labelB")

        assert operations.get_marker_content(result, "labelB") == LABEL_A_TEXT[3:]
        assert operations.get_marker_content(result, "labelA") == LABEL_A_TEXT
        assert operations.get_marker_content(temp, "labelA") == LABEL_A_TEXT

    def test_copy_keeps_numeral_when_asked(self, sample_path: Path, tmp_path: Path) -> None:
        temp, result = tmp_path / "temp.docx", tmp_path / "result.docx"
        operations.insert_marker_before(sample_path, temp, "labelA", "labelB")

        operations.copy_marker_content(temp, result, "labelA", "labelB", strip_numbering=False)

        assert operations.get_marker_content(result, "labelB") == LABEL_A_TEXT

    def test_copy_keeps_run_formatting(self, sample_path: Path, tmp_path: Path) -> None:
        result = tmp_path / "result.docx"
        with EditSession(sample_path, result) as session:
            session.insert_marker_before("labelA", "labelB")
            session.copy_marker_content("labelA", "labelB")

        doc = load(result)
        runs = doc.blocks()[3].runs()
        assert [r.bold for r in runs] == [False, True, False]
        assert runs[0].text == ""

    def test_copy_leaves_destination_style(self, multi_path: Path, tmp_path: Path) -> None:
        result = tmp_path / "result.docx"

        operations.copy_marker_content(multi_path, result, "labelA", "other")

        doc = load(result)
        assert doc.blocks()[4].style.numbering_id is None
        assert operations.get_marker_content(result, "other") == "First stepSecond stepThird step"


class TestCopyNTimes:
    def test_three_block_marker_twice(self, multi_path: Path, tmp_path: Path) -> None:
        out = tmp_path / "copies.docx"

        created = operations.copy_marker_content_n_times(multi_path, out, "labelA", 2)

        assert created == ["labelA1", "labelA2"]
        assert operations.get_marker_span(out, "labelA1") == (1, 3)
        assert operations.get_marker_span(out, "labelA2") == (4, 6)
        assert operations.get_marker_span(out, "labelA") == (7, 9)
        for name in ("labelA", "labelA1", "labelA2"):
            assert operations.get_marker_content(out, name) == MULTI_TEXT
        assert operations.get_marker_span(out, "other") == (10, 10)
        assert operations.styles_equal_in_file(out, "labelA", "labelA2")

    def test_zero_copies_writes_unchanged_document(
        self, sample_path: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "copies.docx"

        created = operations.copy_marker_content_n_times(sample_path, out, "labelA", 0)

        assert created == []
        assert out.exists()
        assert load(out).text() == load(sample_path).text()

    def test_negative_count(self, sample_path: Path, tmp_path: Path) -> None:
        out = tmp_path / "copies.docx"

        with pytest.raises(ValueError):
            operations.copy_marker_content_n_times(sample_path, out, "labelA", -1)
        assert not out.exists()

    def test_copy_name_collision(self, sample_path: Path, tmp_path: Path) -> None:
        temp, out = tmp_path / "temp.docx", tmp_path / "copies.docx"
        operations.insert_marker_before(sample_path, temp, "labelA", "labelA2")

        with pytest.raises(MarkerExistsError):
            operations.copy_marker_content_n_times(temp, out, "labelA", 2)
        assert not out.exists()


class TestQueries:
    def test_missing_marker(self, sample_path: Path) -> None:
        assert operations.get_marker_span(sample_path, "missingLabel") is None
        assert operations.get_marker_position(sample_path, "missingLabel") is None
        assert operations.get_marker_content(sample_path, "missingLabel") is None
        assert operations.uses_numbering_style(sample_path, "missingLabel") is False

    def test_numbering_from_text(self, sample_path: Path) -> None:
        assert operations.uses_numbering_style(sample_path, "labelA")

    def test_numbering_from_paragraph_properties(self, multi_path: Path) -> None:
        assert operations.uses_numbering_style(multi_path, "labelA")
        assert not operations.uses_numbering_style(multi_path, "other")

    def test_numbering_inherited_from_paragraph_style(self, sample_path: Path, tmp_path: Path) -> None:
        doc = load(sample_path)
        block = doc.blocks()[4]
        block.apply_style(BlockStyle(style_id="ListNumber"))
        add_marker(doc, "closing", block, block, AnchorIdGenerator.for_document(doc))
        path = save(doc, tmp_path / "styled.docx")

        assert operations.uses_numbering_style(path, "closing")

    def test_styles_equal_missing_marker(self, sample_path: Path) -> None:
        with pytest.raises(MarkerNotFoundError):
            operations.styles_equal_in_file(sample_path, "labelA", "missingLabel")

    def test_styles_equal_block_count_mismatch(self, multi_path: Path) -> None:
        with pytest.raises(SpanMismatchError):
            operations.styles_equal_in_file(multi_path, "labelA", "other")


class TestEditSession:
    def test_failed_edit_writes_nothing(self, sample_path: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.docx"

        with pytest.raises(MarkerNotFoundError), EditSession(sample_path, out) as session:
            session.insert_marker_before("labelA", "labelB")
            session.insert_marker_before("missingLabel", "labelC")

        assert not out.exists()

    def test_failed_file_operation_writes_nothing(self, sample_path: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.docx"

        with pytest.raises(MarkerNotFoundError):
            operations.insert_marker_before(sample_path, out, "missingLabel", "labelB")

        assert not out.exists()

    def test_identifiers_unique_within_session(self, sample_path: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.docx"
        with EditSession(sample_path, out, anchor_id_start=50) as session:
            first = session.insert_marker_before("labelA", "labelB")
            second = session.insert_marker_before("labelA", "labelC")

        assert (first.anchor_id, second.anchor_id) == ("1001", "1002")

    def test_anchor_id_start_override(self, sample_path: Path, tmp_path: Path) -> None:
        with EditSession(sample_path, anchor_id_start=5000) as session:
            span = session.insert_marker_before("labelA", "labelB")

        assert span.anchor_id == "5000"

    def test_placeholder_override(self, sample_path: Path) -> None:
        with EditSession(sample_path, placeholder_text="TBD") as session:
            session.insert_marker_before("labelA", "labelB")
            assert session.content("labelB") == "TBD"

    def test_read_only_session_writes_nothing(self, sample_path: Path) -> None:
        before = sample_path.read_bytes()
        with EditSession(sample_path) as session:
            session.insert_marker_before("labelA", "labelB")

        assert sample_path.read_bytes() == before

    def test_use_before_enter(self, sample_path: Path) -> None:
        with pytest.raises(RuntimeError):
            _ = EditSession(sample_path).document
