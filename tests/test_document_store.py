from __future__ import annotations

from pathlib import Path

import pytest

from htsresolver.document_store import CachedDocumentStore, FileDocumentStore, InMemoryDocumentStore
from htsresolver.errors import DocumentUnavailableError
from htsresolver.extractor import DocumentRateExtractor
from tests.helpers.pdf_factory import create_schedule_pdf

PDF_SCHEDULE = """\
6208.19.90 00 Of cotton doz. kg
Free (AU, BH, CL,
CO, D, E, IL, JO)
8.7 %
8518.30.20 00 Headphones and earphones No.
Free (A, AU, BH,
CL, CO, D, E, IL)
Free
"""


def test_reads_text_file(tmp_path: Path):
    (tmp_path / "schedule.txt").write_text("6208.19.90\n8.7 %\n", encoding="utf-8")
    store = FileDocumentStore(root=tmp_path)
    assert store.read_text("schedule.txt").splitlines() == ["6208.19.90", "8.7 %"]


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(DocumentUnavailableError) as excinfo:
        FileDocumentStore().read_text(str(tmp_path / "nope.txt"))
    assert excinfo.value.document_id.endswith("nope.txt")


def test_pdf_text_extraction(tmp_path: Path):
    pdf_path = tmp_path / "schedule.pdf"
    pdf_path.write_bytes(create_schedule_pdf(PDF_SCHEDULE))

    text = FileDocumentStore().read_text(str(pdf_path))

    assert "6208.19.90" in text
    assert "Free (AU, BH, CL," in text


def test_extractor_over_multi_page_pdf(tmp_path: Path):
    pdf_path = tmp_path / "schedule.pdf"
    pdf_path.write_bytes(create_schedule_pdf(PDF_SCHEDULE, lines_per_page=3))

    extractor = DocumentRateExtractor(FileDocumentStore(), str(pdf_path))

    assert extractor.extract("6208.19.90").general_rate == "8.7%"
    assert extractor.extract("8518.30.20").general_rate == "Free"


def test_corrupt_pdf_raises_unavailable(tmp_path: Path):
    pdf_path = tmp_path / "broken.pdf"
    pdf_path.write_bytes(b"not really a pdf")
    with pytest.raises(DocumentUnavailableError):
        FileDocumentStore().read_text(str(pdf_path))


def test_in_memory_store():
    store = InMemoryDocumentStore()
    with pytest.raises(DocumentUnavailableError):
        store.read_text("hts")
    store.put("hts", "text")
    assert store.read_text("hts") == "text"


class CountingStore:
    def __init__(self, text=None):
        self.text = text
        self.reads = 0

    def read_text(self, document_id):
        self.reads += 1
        if self.text is None:
            raise DocumentUnavailableError(document_id, "not yet available")
        return self.text


def test_cached_store_reads_once():
    inner = CountingStore("schedule")
    store = CachedDocumentStore(inner)
    assert store.read_text("hts") == "schedule"
    assert store.read_text("hts") == "schedule"
    assert inner.reads == 1
    assert store.is_cached("hts")


def test_cached_store_does_not_cache_failures():
    inner = CountingStore()
    store = CachedDocumentStore(inner)
    with pytest.raises(DocumentUnavailableError):
        store.read_text("hts")
    inner.text = "schedule"
    assert store.read_text("hts") == "schedule"
    assert inner.reads == 2


def test_schedule_pdf_is_reproducible():
    assert create_schedule_pdf(PDF_SCHEDULE) == create_schedule_pdf(PDF_SCHEDULE)
