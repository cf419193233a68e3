from datetime import date

import pytest

from core.formatting import (
    INVALID_DATE,
    VOTE_BADGES,
    consideration_badge,
    format_currency,
    format_date,
    format_export_date,
    format_long_date,
    format_vote,
    invoice_status_badge,
    is_overdue,
    split_skills,
    truncate_text,
    vote_badge,
)


def test_format_date_placeholders():
    assert format_date("2024-06-15") == "15/06/2024"
    assert format_date("15/06/2024") == "15/06/2024"
    assert format_date(None) == "-"
    assert format_date("") == "-"
    assert format_date("garbage") == INVALID_DATE


def test_format_date_reads_timestamps_in_utc():
    assert format_date("2024-06-15T23:30:00Z") == "15/06/2024"


def test_long_and_export_dates():
    assert format_long_date("2024-06-15T10:00:00+00:00") == "Jun 15, 2024"
    assert format_long_date(None) == "N/A"
    assert format_export_date("15/06/2024") == "2024-06-15"
    assert format_export_date("garbage") == ""


@pytest.mark.parametrize(
    "amount, expected",
    [(2500, "$2,500.00"), ("1800.5", "$1,800.50"), (-12, "-$12.00"), (None, "N/A"), ("abc", "N/A")],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_truncate_text():
    assert truncate_text("short") == "short"
    assert truncate_text("x" * 60) == "x" * 50 + "..."
    assert truncate_text(None) == "N/A"


def test_votes():
    assert vote_badge(3) == "low"
    assert vote_badge(6) == "mid"
    assert vote_badge(9) == "high"
    assert vote_badge(None) == "none"
    assert VOTE_BADGES[vote_badge(9)] == "green"
    assert VOTE_BADGES.get(vote_badge(None), "gray") == "gray"
    assert format_vote(8) == "8/10"
    assert format_vote(None) == "-"
    assert format_vote(0) == "-"
    assert format_vote(float("nan")) == "-"
    assert format_vote(7.0) == "7/10"


def test_badges():
    assert consideration_badge("Shortlist") == "green"
    assert consideration_badge("Under Review") == "yellow"
    assert consideration_badge(None) == "gray"
    assert invoice_status_badge("PAID") == "green"
    assert invoice_status_badge("unpaid") == "red"


def test_is_overdue():
    today = date(2024, 6, 22)
    assert is_overdue("2024-06-20", "unpaid", today)
    assert not is_overdue("2024-06-20", "paid", today)
    assert not is_overdue("2024-06-25", "unpaid", today)
    assert not is_overdue(None, "unpaid", today)


def test_split_skills():
    assert split_skills("Python, SQL; Docker\nGo") == ["Python", "SQL", "Docker", "Go"]
    assert split_skills(None) == []
