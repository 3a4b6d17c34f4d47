"""Data models for development application extraction."""

from datetime import date
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


APPLICATION_NUMBER_PATTERN = r'^\d{3}/\d{4}/\d{2}$'


class TextFragment(BaseModel):
    """A positioned run of decoded text on one PDF page."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    text: str = ""
    runs: List[str] = Field(default_factory=list, description="Decoded text runs, one cell each")

    def cells(self) -> List[str]:
        """Cell strings contributed by this fragment."""
        return list(self.runs) if self.runs else [self.text]


class DevelopmentApplication(BaseModel):
    """A development application extracted from a register PDF."""
    application_number: str = Field(..., pattern=APPLICATION_NUMBER_PATTERN, description="Council reference (e.g., 170/1318/14)")
    address: str
    reason: str
    information_url: str = Field(..., description="Source document the record was read from")
    comment_url: str
    scrape_date: date
    lodgement_date: Optional[date] = None

    def to_row(self) -> Tuple[str, str, str, str, str, str, Optional[str]]:
        """Values in the column order used by the record store."""
        return (
            self.application_number,
            self.address,
            self.reason,
            self.information_url,
            self.comment_url,
            self.scrape_date.isoformat(),
            self.lodgement_date.isoformat() if self.lodgement_date else None,
        )


class ExtractionSummary(BaseModel):
    """Counts gathered while extracting one document."""
    information_url: str
    pages: int = 0
    fragments: int = 0
    rows: int = 0
    application_numbers: int = Field(default=0, description="Rows recognized as application numbers")
    records: int = 0
    missing_lodgement_dates: int = 0
