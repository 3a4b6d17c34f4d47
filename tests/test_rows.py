import random

import pytest

from dascraper.rows import reconstruct_page, reconstruct_rows, row_tolerance


def test_single_fragment_pages(fragment):
    pages = [[fragment(3.2, 9.1, "first")], [fragment(7.0, 2.5, "second")], []]

    assert reconstruct_rows(pages) == [["first"], ["second"]]


def test_empty_input():
    assert reconstruct_rows([]) == []
    assert reconstruct_page([]) == []


def test_tolerance_is_smallest_gap_within_a_column(fragment):
    fragments = [
        fragment(10, 100, "a"), fragment(10, 120, "b"), fragment(10, 150, "c"),
        fragment(200, 100.5, "d"), fragment(200, 118, "e"),
        fragment(300, 101, "f"),
    ]

    assert row_tolerance(fragments) == pytest.approx(17.5)


def test_tolerance_without_shared_columns(fragment):
    assert row_tolerance([fragment(1, 1, "a"), fragment(2, 1, "b")]) == 0.0
    assert row_tolerance([]) == 0.0


def test_zero_tolerance_keeps_fragments_apart(fragment):
    fragments = [fragment(50, 20, "b"), fragment(10, 20, "a"), fragment(30, 5, "c")]

    assert reconstruct_page(fragments) == [["c"], ["b"], ["a"]]


def test_reading_order_is_restored_from_shuffled_fragments(fragment):
    fragments = [
        fragment(10, 100, "170/1318/14"), fragment(200, 99.8, "07/11/2017"), fragment(400, 99.6, "Allot 4 D"),
        fragment(10, 120, "Property Address"),
        fragment(10, 140, "12 Smith St"), fragment(200, 140.4, "Campbelltown"),
    ]
    random.Random(7).shuffle(fragments)

    assert reconstruct_page(fragments) == [
        ["170/1318/14", "07/11/2017", "Allot 4 D"],
        ["Property Address"],
        ["12 Smith St", "Campbelltown"],
    ]


def test_runs_become_separate_cells(fragment):
    fragments = [
        fragment(10, 0, "x"), fragment(10, 10, "y"),
        fragment(50, 10.2, runs=["07/", "11/2017"]),
        fragment(5, 10.1, "170/0298/18"),
    ]

    assert reconstruct_page(fragments) == [["x"], ["170/0298/18", "y", "07/", "11/2017"]]


def test_pages_are_concatenated_in_order(fragment):
    page_one = [fragment(0, 10, "p1 bottom"), fragment(0, 0, "p1 top")]
    page_two = [fragment(0, 0, "p2 top")]

    assert reconstruct_rows([page_one, page_two]) == [["p1 top"], ["p1 bottom"], ["p2 top"]]


def _ambiguous_fragments(fragment, y):
    # Two rows ten apart in one column set the tolerance to 10
    return [fragment(0, 0, "A"), fragment(0, 10, "B"), fragment(50, y, "C")]


def test_nearest_matching_prefers_closest_row(fragment):
    fragments = _ambiguous_fragments(fragment, 3)

    assert reconstruct_page(fragments, "nearest") == [["A", "C"], ["B"]]


def test_latest_matching_prefers_newest_row(fragment):
    fragments = _ambiguous_fragments(fragment, 3)

    assert reconstruct_page(fragments, "latest") == [["A"], ["B", "C"]]


def test_equidistant_fragment_joins_newest_row(fragment):
    fragments = _ambiguous_fragments(fragment, 5)

    assert reconstruct_page(fragments, "nearest") == [["A"], ["B", "C"]]
    assert reconstruct_page(fragments, "latest") == [["A"], ["B", "C"]]


def test_unknown_matching_rule(fragment):
    with pytest.raises(ValueError):
        reconstruct_page([fragment(0, 0, "A")], "closest")
