from core.fields import date_field, get_value, text_field
from core.filters import (
    ALL,
    CategoryFilter,
    DateRangeFilter,
    TextFilter,
    build_predicate,
    describe_filters,
    initial_filters,
    is_filtered,
    normalize_filters,
)

NAME_EMAIL = TextFilter("q", (text_field("name"), text_field("email")), label="Search")
STATUS = CategoryFilter("status", text_field("status"), label="Status")
CREATED = DateRangeFilter("date_from", "date_to", date_field("date"), label="Created")
DEFS = (NAME_EMAIL, STATUS, CREATED)


def names(records, filters):
    pred = build_predicate(filters, DEFS)
    return [r["name"] for r in records if pred(r)]


def test_get_value_walks_nested_mappings_and_objects():
    class Obj:
        contacts = {"phone": "555"}

    assert get_value({"contacts": {"phone": "555"}}, "contacts.phone") == "555"
    assert get_value(Obj(), "contacts.phone") == "555"
    assert get_value({"contacts": None}, "contacts.phone") is None
    assert get_value({}, "missing") is None


def test_initial_state_has_every_key():
    assert initial_filters(DEFS) == {"q": "", "status": ALL, "date_from": "", "date_to": ""}


def test_empty_filters_match_everything():
    records = [{"name": "Amy"}, {"name": None}, {}]
    pred = build_predicate(initial_filters(DEFS), DEFS)
    assert all(pred(r) for r in records)
    assert not is_filtered(initial_filters(DEFS), DEFS)


def test_text_filter_is_case_insensitive_substring():
    records = [{"name": "Amy"}, {"name": "Bob"}, {"name": "Samuel"}]
    assert names(records, {"q": "am"}) == ["Amy", "Samuel"]
    assert names(records, {"q": "AM"}) == ["Amy", "Samuel"]


def test_text_filter_matches_any_designated_field():
    records = [
        {"name": "Amy", "email": "amy@x.com"},
        {"name": "Bob", "email": "bob@acme.com"},
        {"name": "Cal", "email": None},
    ]
    assert names(records, {"q": "acme"}) == ["Bob"]


def test_category_filter_exact_and_case_insensitive():
    records = [
        {"name": "a", "status": "Shortlist"},
        {"name": "b", "status": "shortlisted"},
        {"name": "c", "status": None},
    ]
    assert names(records, {"status": "shortlist"}) == ["a"]
    assert names(records, {"status": "All"}) == ["a", "b", "c"]


def test_date_range_bounds_are_inclusive_and_optional():
    records = [
        {"name": "old", "date": "2023-12-31"},
        {"name": "start", "date": "2024-01-01"},
        {"name": "mid", "date": "15/06/2024"},
        {"name": "none", "date": None},
    ]
    assert names(records, {"date_from": "2024-01-01"}) == ["start", "mid"]
    assert names(records, {"date_to": "2024-01-01"}) == ["old", "start"]
    assert names(records, {"date_from": "2024-01-01", "date_to": "2024-12-31"}) == ["start", "mid"]


def test_unparseable_bound_is_ignored():
    records = [{"name": "x", "date": "2020-01-01"}]
    assert names(records, {"date_from": "whenever"}) == ["x"]


def test_filters_compose_with_and():
    records = [
        {"name": "Amy", "status": "hot", "date": "2024-03-01"},
        {"name": "Samuel", "status": "cold", "date": "2024-03-01"},
        {"name": "Pam", "status": "hot", "date": "2022-03-01"},
    ]
    filters = {"q": "am", "status": "hot", "date_from": "2024-01-01"}
    assert names(records, filters) == ["Amy"]


def test_normalize_filters_strips_and_drops_unknown_keys():
    out = normalize_filters({"q": "  amy ", "status": "", "bogus": "x", "date_to": None}, DEFS)
    assert out == {"q": "amy", "status": ALL, "date_from": "", "date_to": ""}


def test_predicate_is_rebuilt_identically():
    records = [{"name": "Amy"}, {"name": "Bob"}]
    filters = {"q": "b"}
    assert names(records, filters) == names(records, filters) == ["Bob"]


def test_describe_filters_lists_active_ones():
    labels = describe_filters({"q": "amy", "status": ALL, "date_from": "2024-01-01", "date_to": ""}, DEFS)
    assert labels == ["Search: amy", "Created: 2024-01-01 – …"]
