"""Shared fixtures: small documents built in memory."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

from extramark.config import get_settings
from extramark.docx import BlockStyle, Document, new_document, save
from extramark.markers import AnchorIdGenerator, add_marker
from extramark.sample import build_sample_document

NUMBERED = BlockStyle(numbering_id=1, numbering_level=0, indent_left=720, indent_hanging=360)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "EXTRAMARK_LOG_LEVEL",
        "EXTRAMARK_LOG_JSON",
        "EXTRAMARK_PLACEHOLDER_TEXT",
        "EXTRAMARK_ANCHOR_ID_START",
        "EXTRAMARK_STRIP_NUMBERING",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def logged_warnings() -> Iterator[list[str]]:
    """Messages logged at WARNING or above while the test runs."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def sample_doc() -> Document:
    """Title, blank, "1. ...", labelA around "2. ..." (single block), closing."""
    return build_sample_document()


@pytest.fixture
def multi_doc() -> Document:
    """labelA spans three numbered blocks (1-3); ``other`` wraps block 4.

    0  Intro
    1  1. First step     labelA open
    2  Second step
    3  Third step        labelA close
    4  Outro             other
    """
    doc = new_document()
    doc.append_block().append_run("Intro")
    first = doc.append_block(NUMBERED)
    first.append_run("1. ")
    first.append_run("First step", bold=True)
    doc.append_block(NUMBERED).append_run("Second step")
    last = doc.append_block(NUMBERED)
    last.append_run("Third step", italic=True)
    outro = doc.append_block()
    outro.append_run("Outro")

    id_gen = AnchorIdGenerator.for_document(doc)
    add_marker(doc, "labelA", first, last, id_gen)
    add_marker(doc, "other", outro, outro, id_gen)
    return doc


@pytest.fixture
def sample_path(tmp_path: Path, sample_doc: Document) -> Path:
    return save(sample_doc, tmp_path / "sample.docx")


@pytest.fixture
def multi_path(tmp_path: Path, multi_doc: Document) -> Path:
    return save(multi_doc, tmp_path / "multi.docx")
