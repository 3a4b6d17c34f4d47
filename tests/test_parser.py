import json

import fitz  # PyMuPDF
import pytest

from dascraper.extractor import Extractor
from dascraper.models import TextFragment
from dascraper.parser import PDFTextExtractor, load_fragment_pages, read_fragment_pages
from tests.conftest import SCRAPE_DATE

REGISTER_LINES = [
    "Public Register of Development Applications",
    "170/1318/14",
    "Property Address",
    "12 Smith St, Campbelltown",
    "Nature of Development",
    "Carport",
]


def _register_pdf(pages):
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page()
        for index, text in enumerate(lines):
            page.insert_text((72, 72 + 24 * index), text, fontsize=10)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def register_pdf(tmp_path):
    path = tmp_path / "register.pdf"
    path.write_bytes(_register_pdf([REGISTER_LINES, ["Monday, 7 May 2018"]]))
    return path


def test_extract_fragments_from_path(register_pdf):
    with PDFTextExtractor(register_pdf) as pdf_extractor:
        assert pdf_extractor.get_page_count() == 2
        pages = pdf_extractor.extract_fragments()

    assert len(pages) == 2
    assert [fragment.text.strip() for fragment in pages[0]] == REGISTER_LINES
    assert pages[0][1].x == pytest.approx(72, abs=0.5)
    assert pages[0][1].y == pytest.approx(96, abs=0.5)
    assert [fragment.text.strip() for fragment in pages[1]] == ["Monday, 7 May 2018"]


def test_extract_fragments_from_bytes():
    with PDFTextExtractor(_register_pdf([["only line"], []])) as pdf_extractor:
        pages = pdf_extractor.extract_fragments()

    assert [[fragment.text.strip() for fragment in page] for page in pages] == [["only line"], []]


def test_extractor_requires_open_document(register_pdf):
    pdf_extractor = PDFTextExtractor(register_pdf)

    with pytest.raises(ValueError):
        pdf_extractor.extract_fragments()


def test_extract_pdf_end_to_end(register_pdf):
    applications, summary = Extractor().extract_pdf(register_pdf, "http://example.com/register.pdf", SCRAPE_DATE)

    assert [(a.application_number, a.address, a.reason) for a in applications] == [
        ("170/1318/14", "12 Smith St, Campbelltown", "Carport"),
    ]
    assert summary.pages == 2
    assert summary.rows == 7


def test_load_fragment_pages(tmp_path):
    path = tmp_path / "fragments.json"
    path.write_text(json.dumps([
        [{"x": 1.5, "y": 2, "text": "Carport"}, {"x": 3, "y": 2, "runs": ["07/", "11/2017"]}],
        [],
    ]), encoding='utf-8')

    pages = load_fragment_pages(path)

    assert pages == [
        [TextFragment(x=1.5, y=2, text="Carport"), TextFragment(x=3, y=2, runs=["07/", "11/2017"])],
        [],
    ]
    assert pages[0][1].cells() == ["07/", "11/2017"]
    assert read_fragment_pages(path) == pages
