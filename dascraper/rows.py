"""Rebuild table rows from positioned text fragments."""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from dascraper.models import TextFragment

logger = logging.getLogger(__name__)

Row = List[str]


class _OpenRow:
    """A row still collecting cells, keyed by the y of its first fragment."""

    __slots__ = ("y", "cells")

    def __init__(self, y: float):
        self.y = y
        self.cells: List[Tuple[float, str]] = []


def row_tolerance(fragments: Sequence[TextFragment]) -> float:
    """Smallest y distance between two fragments sharing an x position.

    Fragments stacked in one column are on different lines, so the closest
    such pair bounds how far apart two fragments of the same line can be.

    Returns:
        The tolerance, or 0.0 when no two fragments share an x value
    """
    columns: Dict[float, List[float]] = {}
    for fragment in fragments:
        columns.setdefault(fragment.x, []).append(fragment.y)

    smallest: Optional[float] = None
    for ys in columns.values():
        ys = sorted(ys)
        for upper, lower in zip(ys[1:], ys):
            distance = upper - lower
            if smallest is None or distance < smallest:
                smallest = distance

    return smallest if smallest is not None else 0.0


def _find_row(rows: List[_OpenRow], y: float, tolerance: float, matching: str) -> Optional[_OpenRow]:
    # Newest rows first; with "nearest" a strictly closer older row still wins
    best: Optional[_OpenRow] = None
    best_distance = tolerance
    for row in reversed(rows):
        distance = abs(row.y - y)
        if distance >= tolerance:
            continue
        if matching == "latest":
            return row
        if best is None or distance < best_distance:
            best = row
            best_distance = distance
    return best


def reconstruct_page(fragments: Sequence[TextFragment], matching: str = "nearest") -> List[Row]:
    """Group one page's fragments into rows in reading order.

    Args:
        fragments: Fragments of a single page, in any order
        matching: "nearest" to join the closest row within tolerance,
            "latest" to join the most recently created row within tolerance

    Returns:
        Rows sorted top to bottom, cells sorted left to right
    """
    if matching not in ("nearest", "latest"):
        raise ValueError(f"Unknown row matching rule: {matching}")

    tolerance = row_tolerance(fragments)
    rows: List[_OpenRow] = []

    for fragment in fragments:
        row = _find_row(rows, fragment.y, tolerance, matching)
        if row is None:
            row = _OpenRow(fragment.y)
            rows.append(row)
        for text in fragment.cells():
            row.cells.append((fragment.x, text))

    for row in rows:
        row.cells.sort(key=lambda cell: cell[0])
    rows.sort(key=lambda row: row.y)

    logger.debug("Clustered %d fragments into %d rows (tolerance %.3f)", len(fragments), len(rows), tolerance)
    return [[text for _, text in row.cells] for row in rows]


def reconstruct_rows(pages: Iterable[Sequence[TextFragment]], matching: str = "nearest") -> List[Row]:
    """Rebuild the rows of every page and concatenate them in page order."""
    document_rows: List[Row] = []
    for fragments in pages:
        document_rows.extend(reconstruct_page(fragments, matching))
    return document_rows
