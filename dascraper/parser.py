"""PDF text fragment extraction using PyMuPDF."""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union
import fitz  # PyMuPDF
from pydantic import TypeAdapter

from dascraper.models import TextFragment

logger = logging.getLogger(__name__)

FragmentPages = List[List[TextFragment]]

_PAGES_ADAPTER = TypeAdapter(FragmentPages)


class PDFTextExtractor:
    """Extracts positioned text fragments from PDF files."""

    def __init__(self, source: Union[str, Path, bytes]):
        """Initialize PDF extractor.

        Args:
            source: Path to the PDF file, or the PDF content as bytes
        """
        self.source = source
        self.doc: Optional[fitz.Document] = None

    def __enter__(self):
        """Context manager entry."""
        if isinstance(self.source, bytes):
            self.doc = fitz.open(stream=self.source, filetype="pdf")
        else:
            self.doc = fitz.open(str(self.source))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        if self.doc:
            self.doc.close()
            self.doc = None

    def get_page_count(self) -> int:
        """Get total number of pages in PDF."""
        if not self.doc:
            raise ValueError("PDF document not open. Use context manager.")
        return len(self.doc)

    def extract_fragments(self) -> FragmentPages:
        """Extract text spans as fragments, one list per page.

        Each non-blank span becomes a fragment positioned at its baseline
        origin, so spans printed on the same line share a ``y`` value even
        when their fonts differ.

        Returns:
            List of pages, each a list of TextFragment in content-stream order
        """
        if not self.doc:
            raise ValueError("PDF document not open. Use context manager.")

        pages: FragmentPages = []
        for page_num in range(len(self.doc)):
            page = self.doc[page_num]
            fragments: List[TextFragment] = []

            for block in page.get_text("dict").get("blocks", []):
                # Image blocks carry no lines
                for line in block.get("lines", []):
                    for span in line.get("spans", []):
                        text = span.get("text", "")
                        if not text.strip():
                            continue
                        if "origin" in span:
                            x, y = span["origin"]
                        else:
                            x, y = span["bbox"][0], span["bbox"][3]
                        fragments.append(TextFragment(x=x, y=y, text=text))

            logger.debug("Page %d: %d fragments", page_num + 1, len(fragments))
            pages.append(fragments)

        return pages


def load_fragment_pages(path: Union[str, Path]) -> FragmentPages:
    """Load pre-parsed fragment pages from a JSON file.

    The file holds a list of pages, each a list of objects with ``x``, ``y``
    and ``text`` and/or ``runs`` keys.

    Args:
        path: Path to the JSON file

    Returns:
        Validated fragment pages
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return _PAGES_ADAPTER.validate_python(data)


def read_fragment_pages(path: Union[str, Path]) -> FragmentPages:
    """Read fragment pages from either a PDF or a pre-parsed JSON file."""
    if Path(path).suffix.lower() == ".json":
        return load_fragment_pages(path)
    with PDFTextExtractor(path) as pdf_extractor:
        return pdf_extractor.extract_fragments()
