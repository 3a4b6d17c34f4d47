"""Configuration for extraction and scraping runs."""

from pathlib import Path
from typing import Dict, List, Literal
from pydantic import BaseModel, Field, model_validator


# Header and footer text repeated on every page of the register. Keys are
# compared against the joined row with whitespace removed and lower-cased.
PAGE_BREAK_PREFIXES: Dict[str, str] = {
    "publicregisterofdevelopmentapplications": "title banner",
    "lodgementdatefrom": "date range",
    "lodgementdateto": "date range",
    "monday,": "print date",
    "tuesday,": "print date",
    "wednesday,": "print date",
    "thursday,": "print date",
    "friday,": "print date",
    "saturday,": "print date",
    "sunday,": "print date",
}

# Marker lines whose following row holds a field value.
FIELD_MARKERS: Dict[str, str] = {
    "propertyaddress": "address",
    "natureofdevelopment": "reason",
}

COMMENT_URL = "mailto:mail@campbelltown.sa.gov.au"
LISTING_URL = "http://www.campbelltown.sa.gov.au/page.aspx?u=1973"


class ExtractionConfig(BaseModel):
    """Settings for turning PDF fragments into development applications."""
    page_break_prefixes: Dict[str, str] = Field(default_factory=lambda: dict(PAGE_BREAK_PREFIXES))
    field_markers: Dict[str, str] = Field(default_factory=lambda: dict(FIELD_MARKERS))
    row_matching: Literal["nearest", "latest"] = Field(
        default="nearest",
        description="'nearest' picks the closest open row, 'latest' the most recently created row in range",
    )
    join_split_application_numbers: bool = Field(
        default=False,
        description="Also look for the application number across the whole joined row",
    )
    comment_url: str = COMMENT_URL

    @classmethod
    def from_file(cls, path: str) -> "ExtractionConfig":
        """Load settings from a JSON file.

        Args:
            path: Path to the JSON file

        Returns:
            Validated configuration (missing keys take their defaults)
        """
        return cls.model_validate_json(Path(path).read_text(encoding='utf-8'))

    @model_validator(mode="after")
    def check_field_markers(self):
        missing = sorted({"address", "reason"} - set(self.field_markers.values()))
        if missing:
            raise ValueError(f"field_markers has no marker for: {', '.join(missing)}")
        return self

    def markers_for(self, meaning: str) -> List[str]:
        """Normalized prefixes of the marker lines announcing a field."""
        return [prefix for prefix, field in self.field_markers.items() if field == meaning]


class ScraperConfig(ExtractionConfig):
    """Extraction settings plus where to find and store documents."""
    listing_url: str = LISTING_URL
    link_selector: str = "div.uContentList a"
    max_documents: int = Field(default=2, ge=1, description="Most recent document plus random older ones")
    timeout: float = Field(default=30.0, gt=0)
    database: str = "data.sqlite"
