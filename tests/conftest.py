from datetime import date

import pytest

from dascraper.config import ExtractionConfig
from dascraper.models import TextFragment


SCRAPE_DATE = date(2018, 6, 24)


@pytest.fixture
def config():
    return ExtractionConfig()


@pytest.fixture
def fragment():
    def make(x, y, text="", runs=None):
        return TextFragment(x=x, y=y, text=text, runs=runs or [])
    return make


@pytest.fixture
def register_rows():
    """Rows of one application as they come out of the row reconstructor."""
    return [
        ["170/1318/14", "07/11/2017", "06/04/2018", "Allot 4 D"],
        ["Property Address"],
        ["12 Smith St, Campbelltown"],
        ["Nature of Development"],
        ["Carport"],
    ]
