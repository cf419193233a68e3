import pandas as pd

from core.fields import date_field, number_field, text_field
from core.sorting import Direction, SortState, build_comparator, sort_records

DATE = date_field("date")
SCORE = number_field("score")
NAME = text_field("name")


def names(records):
    return [r["name"] for r in records]


def test_toggle_same_field_flips_direction():
    state = SortState("date", Direction.DESC)
    assert state.toggle("date") == SortState("date", Direction.ASC)
    assert state.toggle("date").toggle("date") == state


def test_toggle_new_field_resets_to_descending():
    state = SortState("date", Direction.ASC)
    assert state.toggle("vote") == SortState("vote", Direction.DESC)


def test_dates_sort_chronologically_across_formats():
    records = [
        {"name": "b", "date": "15/06/2024"},
        {"name": "a", "date": "2024-01-01"},
        {"name": "c", "date": "2024-12-01T00:00:00Z"},
    ]
    assert names(sort_records(records, DATE, Direction.ASC)) == ["a", "b", "c"]
    assert names(sort_records(records, DATE, Direction.DESC)) == ["c", "b", "a"]


def test_null_and_invalid_dates_sort_lowest_in_both_directions():
    records = [
        {"name": "dated", "date": "2024-01-01"},
        {"name": "null", "date": None},
        {"name": "junk", "date": "99/99/9999"},
    ]
    assert names(sort_records(records, DATE, Direction.ASC)) == ["null", "junk", "dated"]
    assert names(sort_records(records, DATE, Direction.DESC)) == ["dated", "null", "junk"]


def test_numbers_coerce_missing_to_zero():
    records = [{"name": "none", "score": None}, {"name": "seven", "score": 7}, {"name": "neg", "score": -1}]
    assert names(sort_records(records, SCORE, Direction.ASC)) == ["neg", "none", "seven"]
    assert names(sort_records(records, SCORE, Direction.DESC)) == ["seven", "none", "neg"]


def test_text_compares_case_insensitively_with_missing_as_empty():
    records = [{"name": "bob"}, {"name": "Alice"}, {"name": None}, {"name": "carl"}]
    ordered = sort_records(records, NAME, Direction.ASC)
    assert [r["name"] for r in ordered] == [None, "Alice", "bob", "carl"]


def test_descending_mirrors_ascending_without_ties():
    records = [{"name": n} for n in ["delta", "alpha", "charlie", "bravo"]]
    asc = sort_records(records, NAME, Direction.ASC)
    desc = sort_records(records, NAME, Direction.DESC)
    assert desc == list(reversed(asc))


def test_ties_keep_input_order_in_both_directions():
    records = [
        {"name": "first", "score": 5},
        {"name": "top", "score": 9},
        {"name": "second", "score": 5},
        {"name": "third", "score": 5},
    ]
    assert names(sort_records(records, SCORE, Direction.ASC)) == ["first", "second", "third", "top"]
    assert names(sort_records(records, SCORE, Direction.DESC)) == ["top", "first", "second", "third"]


def test_comparator_directions_are_negations():
    a, b = {"score": 1}, {"score": 2}
    asc = build_comparator(SCORE, Direction.ASC)
    desc = build_comparator(SCORE, Direction.DESC)
    assert asc(a, b) == -1
    assert desc(a, b) == 1
    assert asc(a, a) == desc(a, a) == 0


def test_sort_does_not_mutate_input():
    records = [{"name": "b"}, {"name": "a"}]
    snapshot = list(records)
    sort_records(records, NAME, Direction.ASC)
    assert records == snapshot


def test_pandas_nat_sorts_with_the_nulls():
    records = [
        {"name": "b", "date": "2024-02-01"},
        {"name": "x", "date": pd.NaT},
        {"name": "a", "date": "2024-01-01"},
    ]
    assert names(sort_records(records, DATE, Direction.ASC)) == ["x", "a", "b"]
    assert names(sort_records(records, DATE, Direction.DESC)) == ["b", "a", "x"]
