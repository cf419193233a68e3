import pytest

from core.errors import UnknownViewError
from core.models import Client, CVEvaluation, to_lead, to_onboarding_item
from core.pipeline import PageState, run_pipeline
from core.sorting import Direction, SortState
from core.views import VIEWS, get_view, list_views


def test_from_row_ignores_unknown_columns():
    client = Client.from_row({"client_id": 7, "client_name": "Acme", "extra": "x"})
    assert client.client_id == 7
    assert client.status is None
    assert not hasattr(client, "extra")


def test_lead_mapping_fills_defaults():
    lead = to_lead(Client.from_row({"client_id": 3, "client_name": "Digital", "status": "pending", "created_at": None}))
    assert lead.status == "Warm"
    assert lead.email == "No email provided"
    assert lead.phone == "No phone provided"
    assert lead.source == "Unknown"
    assert lead.created_at == ""
    assert lead.contacted is False


def test_contacted_client_is_a_hot_lead(tables):
    lead = to_lead(Client.from_row(tables["clients"][0]))
    assert lead.status == "Hot"
    assert lead.contacted is True
    assert lead.phone == "(555) 123-4567"
    assert lead.source == "Website"
    assert lead.created_at == "2024-06-14"


def test_onboarding_items():
    item = to_onboarding_item(Client.from_row({"client_id": 1, "status": "contacted", "created_at": "2024-06-14"}))
    assert item.status == "In Progress"
    assert item.sent_at == "2024-06-14"


def test_onboarding_view_skips_completed_clients(tables):
    records = get_view("onboarding").build_records(tables["clients"])
    assert [r.client_name for r in records] == ["Acme Corp", "Tech Solutions LLC"]


@pytest.mark.parametrize("name", ["cv-evaluations", "CV_Evaluations", " cv_evaluations "])
def test_get_view_normalizes_names(name):
    assert get_view(name).name == "cv_evaluations"


def test_unknown_view():
    with pytest.raises(UnknownViewError) as err:
        get_view("deals")
    assert err.value.name == "deals"
    assert isinstance(err.value, KeyError)


def test_every_view_describes_itself():
    assert [v.name for v in list_views()] == list(VIEWS)
    for view in list_views():
        meta = view.describe()
        assert meta["columns"]
        assert meta["default_sort"]["field"] in {f["name"] for f in meta["sort_fields"]}


def test_unknown_sort_field_falls_back_to_text(people_view):
    field = people_view.field("email")
    assert field.kind.value == "text"


def test_cv_view_filters_on_consideration_case_insensitively(tables):
    view = get_view("cv_evaluations")
    records = view.build_records(tables["cv_evaluations"])
    result = run_pipeline(records, {"consideration": "Rejected"}, None, PageState(1, 10), view=view)
    assert [r.candidate_name for r in result.visible_records] == ["Lena Berg"]


def test_cv_view_vote_sort_puts_missing_vote_with_zero(tables):
    view = get_view("cv_evaluations")
    records = view.build_records(tables["cv_evaluations"])
    result = run_pipeline(records, {}, SortState("vote", Direction.ASC), PageState(1, 10), view=view)
    assert [r.id for r in result.visible_records] == ["cv-2", "cv-3", "cv-1"]


def test_follow_up_category_matches_booleans(tables):
    view = get_view("follow_ups")
    records = view.build_records(tables["follow_ups"])
    pending = run_pipeline(records, {"followed_up": "false"}, None, PageState(1, 10), view=view)
    done = run_pipeline(records, {"followed_up": "true"}, None, PageState(1, 10), view=view)
    assert pending.filtered_count == 1
    assert done.filtered_count == 0


def test_client_contact_filter_reaches_nested_phone(tables):
    view = get_view("clients")
    records = view.build_records(tables["clients"])
    result = run_pipeline(records, {"contact": "987-65"}, None, PageState(1, 10), view=view)
    assert [r.client_name for r in result.visible_records] == ["Tech Solutions LLC"]


def test_cv_records_are_typed(tables):
    records = get_view("cv_evaluations").build_records(tables["cv_evaluations"])
    assert all(isinstance(r, CVEvaluation) for r in records)
