"""Tests for the extramark command line."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

from extramark.__main__ import main


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    yield
    logger.remove()
    logger.add(sys.stderr)


class TestEditCommands:
    def test_sample_then_dump(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "intro.docx"

        assert main(["sample", str(path)]) == 0
        assert path.exists()

        assert main(["dump", str(path)]) == 0
        out = capsys.readouterr().out
        assert "open  labelA id=1000" in out
        assert "close id=1000" in out

    def test_insert_and_query(
        self, sample_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        out_path = tmp_path / "out.docx"

        assert main(["insert", str(sample_path), str(out_path), "labelA", "labelB"]) == 0
        capsys.readouterr()

        assert main(["span", str(out_path), "labelA"]) == 0
        assert capsys.readouterr().out.strip() == "4 4"
        assert main(["position", str(out_path), "labelB"]) == 0
        assert capsys.readouterr().out.strip() == "3"

    def test_copy(
        self, sample_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        temp, result = tmp_path / "temp.docx", tmp_path / "result.docx"
        main(["insert", str(sample_path), str(temp), "labelA", "labelB"])

        assert main(["copy", str(temp), str(result), "labelA", "labelB"]) == 0
        capsys.readouterr()

        assert main(["content", str(result), "labelB"]) == 0
        assert capsys.readouterr().out.startswith("Stay competitive")

    def test_copy_n(
        self, multi_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        out_path = tmp_path / "copies.docx"

        assert main(["copy-n", str(multi_path), str(out_path), "labelA", "2"]) == 0
        assert "labelA1, labelA2" in capsys.readouterr().out

        assert main(["dump", "--json", str(out_path)]) == 0
        names = [m["name"] for m in json.loads(capsys.readouterr().out)]
        assert names == ["labelA1", "labelA2", "labelA", "other"]


class TestQueryCommands:
    def test_numbering(self, multi_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["numbering", str(multi_path), "labelA"]) == 0
        assert main(["numbering", str(multi_path), "other"]) == 3
        assert capsys.readouterr().out.split() == ["yes", "no"]

    def test_compare(self, multi_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["compare", str(multi_path), "labelA", "labelA"]) == 0
        assert "Styles match." in capsys.readouterr().out

        assert main(["compare", "--json", str(multi_path), "labelA", "other"]) == 3
        differences = json.loads(capsys.readouterr().out)
        assert differences[0]["field"] == "block_count"


class TestReadOnlyCommands:
    def test_dump_and_compare_leave_file_untouched(
        self, multi_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        before = multi_path.read_bytes()

        assert main(["dump", str(multi_path)]) == 0
        assert main(["compare", str(multi_path), "labelA", "labelA"]) == 0

        assert multi_path.read_bytes() == before
        assert "Styles match." in capsys.readouterr().out

    def test_compare_unknown_marker(
        self, multi_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["compare", str(multi_path), "labelA", "missingLabel"]) == 1
        assert "Marker not found: missingLabel" in capsys.readouterr().err


class TestErrors:
    def test_missing_marker_content(
        self, sample_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["content", str(sample_path), "missingLabel"]) == 1
        assert "Marker not found: missingLabel" in capsys.readouterr().err

    def test_missing_reference_marker(
        self, sample_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        out_path = tmp_path / "out.docx"

        assert main(["insert", str(sample_path), str(out_path), "missingLabel", "x"]) == 1
        assert "Error: Marker not found: missingLabel" in capsys.readouterr().err
        assert not out_path.exists()

    def test_negative_copy_count(
        self, sample_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["copy-n", str(sample_path), str(tmp_path / "o.docx"), "labelA", "-1"]) == 1
        assert "n must be >= 0" in capsys.readouterr().err

    def test_missing_input_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["dump", str(tmp_path / "nope.docx")]) == 2
        assert "Error:" in capsys.readouterr().err

    def test_not_a_docx(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "plain.docx"
        path.write_text("hello")

        assert main(["dump", str(path)]) == 1
        assert "Invalid document package" in capsys.readouterr().err
