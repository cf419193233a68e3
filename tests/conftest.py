from __future__ import annotations

import pytest

from core.datasource import InMemoryDataSource
from core.fields import date_field, number_field, text_field
from core.filters import CategoryFilter, DateRangeFilter, TextFilter
from core.export import CsvColumn
from core.sorting import Direction, SortState
from core.views import ViewSpec

PEOPLE = ViewSpec(
    name="people",
    title="People",
    table="people",
    build_records=lambda rows: list(rows),
    filters=(
        TextFilter("q", (text_field("name"), text_field("email"))),
        CategoryFilter("status", text_field("status")),
        DateRangeFilter("date_from", "date_to", date_field("date")),
    ),
    sort_fields=(date_field("date"), number_field("score"), text_field("name")),
    default_sort=SortState("date", Direction.DESC),
    columns=(CsvColumn("Name", text_field("name")), CsvColumn("Score", number_field("score"))),
    export_prefix="people",
    page_size=5,
)


@pytest.fixture
def people_view():
    return PEOPLE


@pytest.fixture
def amy_bob():
    return [
        {"name": "Bob", "date": "15/06/2024", "score": None},
        {"name": "Amy", "date": "01/01/2024", "score": 7},
    ]


CLIENT_ROWS = [
    {
        "client_id": 1,
        "client_name": "Acme Corp",
        "email_address": "john@acme.com",
        "business": "Manufacturing",
        "status": "contacted",
        "created_at": "2024-06-14T09:00:00+00:00",
        "key_challenges": "Slow lead follow-up",
        "contacts": {"phone": "(555) 123-4567", "source": "Website"},
        "lead_handlings": {"description": "Manual spreadsheet"},
        "invoice_details": {"amount": 2500, "status": "paid"},
    },
    {
        "client_id": 2,
        "client_name": "Tech Solutions LLC",
        "email_address": "sarah@techsolutions.com",
        "business": "Software",
        "status": "pending",
        "created_at": "2024-06-13T10:00:00+00:00",
        "contacts": {"phone": "(555) 987-6543"},
        "invoice_details": {"amount": 1800, "status": "unpaid"},
    },
    {
        "client_id": 3,
        "client_name": "Digital Marketing Co",
        "email_address": None,
        "business": "Marketing",
        "status": "completed",
        "created_at": "2024-05-02T10:00:00+00:00",
        "contacts": None,
        "invoice_details": {"amount": "3200", "status": "paid"},
    },
]

INVOICE_ROWS = [
    {
        "id": "inv-1",
        "client_name": "Acme Corp",
        "email": "john@acme.com",
        "invoice_date": "2024-06-15",
        "due_date": "2024-06-20",
        "amount": 2500,
        "status": "paid",
        "invoice_number": "INV-001",
        "created_at": "2024-06-15T08:00:00+00:00",
    },
    {
        "id": "inv-2",
        "client_name": "Tech Solutions LLC",
        "email": "sarah@techsolutions.com",
        "invoice_date": "2024-06-12",
        "due_date": "2024-06-25",
        "amount": 1800,
        "status": "unpaid",
        "invoice_number": "INV-002",
        "created_at": "2024-06-12T08:00:00+00:00",
    },
]

FOLLOW_UP_ROWS = [
    {
        "id": "fu-1",
        "invoice_id": "inv-2",
        "client_name": "Tech Solutions LLC",
        "email": "sarah@techsolutions.com",
        "followed_up": False,
        "last_follow_up": None,
        "created_at": "2024-06-12T08:00:00+00:00",
    },
]

CV_ROWS = [
    {
        "id": "cv-1",
        "candidate_name": "Priya Shah",
        "email": "priya@example.com",
        "vote": 8,
        "consideration": "Shortlist",
        "evaluation_date": "2024-06-10T12:00:00+00:00",
    },
    {
        "id": "cv-2",
        "candidate_name": "marco Rossi",
        "email": "marco@example.com",
        "vote": None,
        "consideration": "Under Review",
        "evaluation_date": "2024-06-11T12:00:00+00:00",
    },
    {
        "id": "cv-3",
        "candidate_name": "Lena Berg",
        "email": "lena@example.com",
        "vote": 3,
        "consideration": "rejected",
        "evaluation_date": None,
    },
]


@pytest.fixture
def tables():
    return {
        "clients": [dict(r) for r in CLIENT_ROWS],
        "invoices": [dict(r) for r in INVOICE_ROWS],
        "follow_ups": [dict(r) for r in FOLLOW_UP_ROWS],
        "cv_evaluations": [dict(r) for r in CV_ROWS],
        "profile_criteria": [{"id": 1, "criteria": "5+ years Python"}],
    }


@pytest.fixture
def source(tables):
    return InMemoryDataSource(tables)
