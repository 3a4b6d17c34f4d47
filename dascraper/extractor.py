"""Recognize development applications in reconstructed PDF rows."""

import logging
import re
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union
from pydantic import BaseModel, ConfigDict

from dascraper.config import ExtractionConfig
from dascraper.models import DevelopmentApplication, ExtractionSummary
from dascraper.parser import FragmentPages, PDFTextExtractor
from dascraper.rows import Row, reconstruct_rows

logger = logging.getLogger(__name__)

APPLICATION_NUMBER_LENGTH = len("nnn/nnnn/nn")
APPLICATION_NUMBER_RE = re.compile(r'^[0-9]{3}/[0-9]{4}/[0-9]{2}$')

# Day may omit its leading zero ("7/11/2017"); month and year may not
DAY_FIRST_DATE_RE = re.compile(r'^([0-9]{1,2})/([0-9]{2})/([0-9]{4})$')
PADDED_DATE_RE = re.compile(r'^([0-9]{2})/([0-9]{2})/([0-9]{4})$')
PADDED_DATE_LENGTH = len("DD/MM/YYYY")

_WHITESPACE_RE = re.compile(r'\s')


def normalize_row(row: Sequence[str]) -> str:
    """Join a row's cells, drop all whitespace and lower-case the result."""
    return _WHITESPACE_RE.sub('', "".join(row)).lower()


def is_page_break(row: Sequence[str], config: ExtractionConfig) -> bool:
    """Whether the row is header or footer text repeated on every page."""
    line = normalize_row(row)
    return any(line.startswith(prefix) for prefix in config.page_break_prefixes)


def parse_application_number(row: Sequence[str], join_split: bool = False) -> Optional[str]:
    """Parse an application number such as "170/1318/14" from the start of a row.

    The strict "nnn/nnnn/nn" shape keeps dates such as "31/12/2008" from
    being mistaken for application numbers.

    Args:
        row: Row cells
        join_split: Also try the joined row, for numbers split across
            cells (e.g., "170/1" + "318/14")

    Returns:
        The application number, or None
    """
    if not row:
        return None

    candidates = [row[0].strip()]
    if join_split:
        candidates.append("".join(row).strip())

    for text in candidates:
        text = text[:APPLICATION_NUMBER_LENGTH]
        if APPLICATION_NUMBER_RE.match(text):
            return text
    return None


def _to_date(match: Optional[re.Match]) -> Optional[date]:
    if not match:
        return None
    day, month, year = (int(group) for group in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


class DateStrategy:
    """Base class for lodgement date parsing strategies."""

    def parse(self, row: Sequence[str]) -> Optional[date]:
        """Return the date found in the row, or None."""
        raise NotImplementedError


class ColumnDateStrategy(DateStrategy):
    """Read a "D/MM/YYYY" date from a single cell."""

    def __init__(self, column_index: int):
        self.column_index = column_index

    def parse(self, row: Sequence[str]) -> Optional[date]:
        if len(row) < 3 or self.column_index >= len(row):
            return None
        return _to_date(DAY_FIRST_DATE_RE.match(row[self.column_index].strip()))


class JoinedTextDateStrategy(DateStrategy):
    """Read a "DD/MM/YYYY" date from the joined row text.

    Handles dates the PDF split across cells, for example
    ["170/0298/18", "07/", "11/2017", "06/04/2018", "Allot 4 D"].
    """

    def __init__(self, character_index: int):
        self.character_index = character_index

    def parse(self, row: Sequence[str]) -> Optional[date]:
        text = "".join(row)[self.character_index:self.character_index + PADDED_DATE_LENGTH]
        return _to_date(PADDED_DATE_RE.match(text))


def lodgement_date_strategies(column_index: int, character_index: int) -> List[DateStrategy]:
    """Date strategies in the order they are tried."""
    return [ColumnDateStrategy(column_index), JoinedTextDateStrategy(character_index)]


def parse_lodgement_date(row: Sequence[str], column_index: int, character_index: int) -> Optional[date]:
    """Parse a lodgement date, trying each strategy until one succeeds.

    Args:
        row: Row cells
        column_index: Cell expected to hold the whole date
        character_index: Characters of the joined row to skip before the date

    Returns:
        The lodgement date, or None if no strategy found a valid date
    """
    for strategy in lodgement_date_strategies(column_index, character_index):
        lodgement_date = strategy.parse(row)
        if lodgement_date is not None:
            return lodgement_date
    return None


class Phase(str, Enum):
    """Which field the extractor is looking for next."""
    SEEKING_NUMBER = "seeking_number"
    SEEKING_ADDRESS = "seeking_address"
    SEEKING_REASON = "seeking_reason"


class ParseState(BaseModel):
    """Extraction progress through one document's rows."""
    model_config = ConfigDict(frozen=True)

    phase: Phase = Phase.SEEKING_NUMBER
    application_number: Optional[str] = None
    address: Optional[str] = None
    lodgement_date: Optional[date] = None
    previous_row: Optional[Tuple[str, ...]] = None

    def follows_marker(self, markers: Iterable[str]) -> bool:
        """Whether the last retained row starts with any of the given markers."""
        if self.previous_row is None:
            return False
        line = normalize_row(self.previous_row)
        return any(line.startswith(marker) for marker in markers)


def advance(
    state: ParseState,
    row: Sequence[str],
    config: ExtractionConfig,
    information_url: str,
    scrape_date: date,
) -> Tuple[ParseState, Optional[DevelopmentApplication]]:
    """Feed one row to the extractor.

    Args:
        state: State after the previous row
        row: The current row
        config: Marker tables and recognition options
        information_url: Source document, copied into emitted records
        scrape_date: Date stamped on emitted records

    Returns:
        Tuple of (next state, completed application or None)
    """
    if is_page_break(row, config):
        # Keep the previous row so a marker line still reaches its value
        return state, None

    current = tuple(row)

    application_number = parse_application_number(row, config.join_split_application_numbers)
    if application_number is not None:
        # Dates follow the application number
        lodgement_date = parse_lodgement_date(row, 1, len(application_number))
        logger.debug("Application %s (lodged %s)", application_number, lodgement_date)
        return ParseState(
            phase=Phase.SEEKING_ADDRESS,
            application_number=application_number,
            lodgement_date=lodgement_date,
            previous_row=current,
        ), None

    if state.phase == Phase.SEEKING_ADDRESS:
        lodgement_date = state.lodgement_date
        if lodgement_date is None:
            lodgement_date = parse_lodgement_date(row, 0, 0)

        if state.follows_marker(config.markers_for("address")):
            address = "".join(row).strip()
            logger.debug("Application %s address: %s", state.application_number, address)
            return state.model_copy(update={
                "phase": Phase.SEEKING_REASON,
                "address": address,
                "lodgement_date": lodgement_date,
                "previous_row": current,
            }), None

        return state.model_copy(update={"lodgement_date": lodgement_date, "previous_row": current}), None

    if state.phase == Phase.SEEKING_REASON and state.follows_marker(config.markers_for("reason")):
        application = DevelopmentApplication(
            application_number=state.application_number,
            address=state.address,
            reason="".join(row).strip(),
            information_url=information_url,
            comment_url=config.comment_url,
            scrape_date=scrape_date,
            lodgement_date=state.lodgement_date,
        )
        return ParseState(previous_row=current), application

    return state.model_copy(update={"previous_row": current}), None


def extract_applications(
    rows: Iterable[Sequence[str]],
    information_url: str,
    config: Optional[ExtractionConfig] = None,
    scrape_date: Optional[date] = None,
) -> List[DevelopmentApplication]:
    """Extract the development applications found in a document's rows."""
    config = config or ExtractionConfig()
    scrape_date = scrape_date or date.today()

    applications: List[DevelopmentApplication] = []
    state = ParseState()
    for row in rows:
        state, application = advance(state, row, config, information_url, scrape_date)
        if application is not None:
            applications.append(application)
    return applications


class Extractor:
    """Runs row reconstruction and record extraction for whole documents."""

    def __init__(self, config: Optional[ExtractionConfig] = None):
        """Initialize extractor.

        Args:
            config: Extraction settings (defaults if omitted)
        """
        self.config = config or ExtractionConfig()

    def reconstruct(self, pages: FragmentPages) -> List[Row]:
        """Rebuild the document's rows from its fragment pages."""
        return reconstruct_rows(pages, self.config.row_matching)

    def extract_records(
        self,
        pages: FragmentPages,
        information_url: str,
        today: Optional[date] = None,
    ) -> Tuple[List[DevelopmentApplication], ExtractionSummary]:
        """Extract development applications from decoded pages.

        Args:
            pages: Fragments of each page, in page order
            information_url: Source document URL or identifier
            today: Scrape date to stamp on records (defaults to today)

        Returns:
            Tuple of (applications in row order, extraction summary)
        """
        rows = self.reconstruct(pages)
        applications = extract_applications(rows, information_url, self.config, today)

        summary = ExtractionSummary(
            information_url=information_url,
            pages=len(pages),
            fragments=sum(len(fragments) for fragments in pages),
            rows=len(rows),
            application_numbers=sum(
                1 for row in rows
                if not is_page_break(row, self.config)
                and parse_application_number(row, self.config.join_split_application_numbers)
            ),
            records=len(applications),
            missing_lodgement_dates=sum(1 for application in applications if application.lodgement_date is None),
        )
        logger.info(
            "Found %d development application(s) in %d row(s) of %s",
            summary.records, summary.rows, information_url,
        )
        return applications, summary

    def extract_pdf(
        self,
        source: Union[str, Path, bytes],
        information_url: str,
        today: Optional[date] = None,
    ) -> Tuple[List[DevelopmentApplication], ExtractionSummary]:
        """Decode a PDF (path or bytes) and extract its development applications."""
        with PDFTextExtractor(source) as pdf_extractor:
            pages = pdf_extractor.extract_fragments()
        return self.extract_records(pages, information_url, today)
