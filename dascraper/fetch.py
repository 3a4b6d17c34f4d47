"""Discover and download register PDFs from the council web site."""

import logging
import random
from typing import List, Optional
from urllib.parse import unquote, urljoin, urlparse
import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


def fetch_listing(url: str, session: Optional[requests.Session] = None, timeout: float = 30.0) -> str:
    """Fetch the HTML of the page listing the register PDFs."""
    http = session or requests.Session()
    logger.info("Requesting page: %s", url)
    response = http.get(url, timeout=timeout)
    response.raise_for_status()
    return response.text


def discover_pdf_urls(html: str, base_url: str, selector: str = "div.uContentList a") -> List[str]:
    """Find document links on the listing page.

    Args:
        html: Listing page HTML
        base_url: URL the page was fetched from, for resolving relative links
        selector: CSS selector matching the document anchors

    Returns:
        Absolute URLs in page order, without duplicates
    """
    parsed = urlparse(base_url)
    base = f"{parsed.scheme}://{parsed.netloc}{parsed.path}"

    soup = BeautifulSoup(html, "html.parser")
    urls: List[str] = []
    for anchor in soup.select(selector):
        href = anchor.get("href")
        if not href:
            continue
        url = urljoin(base, href.strip())
        if url not in urls:
            urls.append(url)
    return urls


def select_documents(urls: List[str], limit: int = 2, rng: Optional[random.Random] = None) -> List[str]:
    """Pick the most recent document plus random older ones.

    The listing is newest first. Parsing every document in one run uses too
    much memory, so only ``limit`` documents are taken.
    """
    if not urls or limit < 1:
        return []
    rng = rng or random.Random()
    older = urls[1:]
    return [urls[0]] + rng.sample(older, min(limit - 1, len(older)))


def download_pdf(url: str, session: Optional[requests.Session] = None, timeout: float = 30.0) -> bytes:
    """Download a PDF document and return its bytes."""
    http = session or requests.Session()
    logger.info("Downloading PDF: %s", url)
    response = http.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def document_name(url: str) -> str:
    """File name of a document URL, for messages."""
    return unquote(urlparse(url).path.rsplit("/", 1)[-1])
