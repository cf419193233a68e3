"""List views of the dashboard.

Each view says where its records come from and how they may be filtered,
sorted, paged and exported. The pipeline itself knows nothing about
individual entities.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from core.errors import UnknownViewError
from core.export import CsvColumn
from core.fields import Field, date_field, number_field, text_field
from core.filters import ALL, CategoryFilter, DateRangeFilter, FilterDef, TextFilter, initial_filters
from core.formatting import format_export_date
from core.models import Client, CVEvaluation, FollowUp, Invoice, to_lead, to_onboarding_item
from core.sorting import Direction, SortState

DEFAULT_PAGE_SIZE = 10

RecordBuilder = Callable[[List[Mapping[str, Any]]], List[Any]]


@dataclass(frozen=True)
class ViewSpec:
    name: str
    title: str
    table: str
    build_records: RecordBuilder
    filters: Tuple[FilterDef, ...] = ()
    sort_fields: Tuple[Field, ...] = ()
    default_sort: Optional[SortState] = None
    columns: Tuple[CsvColumn, ...] = ()
    export_prefix: str = "export"
    order_by: Optional[str] = "created_at"
    page_size: int = DEFAULT_PAGE_SIZE
    empty_message: str = "No records found."
    no_match_message: str = "No records match the current filters."

    def field(self, name: str) -> Field:
        """Sortable field by name; unknown names sort as plain text."""
        for f in self.sort_fields:
            if f.name == name:
                return f
        return text_field(name)

    def initial_filters(self) -> Dict[str, str]:
        return initial_filters(self.filters)

    def initial_sort(self) -> SortState:
        if self.default_sort is not None:
            return self.default_sort
        if self.sort_fields:
            return SortState(self.sort_fields[0].name, Direction.DESC)
        return SortState("id", Direction.DESC)

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "page_size": self.page_size,
            "default_sort": {"field": self.initial_sort().field, "direction": self.initial_sort().direction.value},
            "sort_fields": [{"name": f.name, "label": f.title, "kind": f.kind.value} for f in self.sort_fields],
            "filters": [_describe_filter(d) for d in self.filters],
            "columns": [c.header for c in self.columns],
        }


def _describe_filter(d: FilterDef) -> Dict[str, Any]:
    if isinstance(d, TextFilter):
        return {"type": "text", "key": d.key, "label": d.label, "placeholder": d.placeholder}
    if isinstance(d, CategoryFilter):
        return {
            "type": "category",
            "key": d.key,
            "label": d.label,
            "choices": [{"value": v, "label": label} for v, label in d.choices],
        }
    return {"type": "date_range", "from_key": d.from_key, "to_key": d.to_key, "label": d.label}


def _rows_to(cls) -> RecordBuilder:
    return lambda rows: [cls.from_row(r) for r in rows]


def _clients_to_leads(rows: List[Mapping[str, Any]]) -> List[Any]:
    return [to_lead(Client.from_row(r)) for r in rows]


def _clients_to_onboarding(rows: List[Mapping[str, Any]]) -> List[Any]:
    clients = [Client.from_row(r) for r in rows]
    return [to_onboarding_item(c) for c in clients if c.status != "completed"]


def _yes_no(value: Any) -> str:
    return "Yes" if value else "No"


CLIENT_CREATED = date_field("created_at", "Submitted")

CLIENTS = ViewSpec(
    name="clients",
    title="Client Onboarding Submissions",
    table="clients",
    build_records=_rows_to(Client),
    filters=(
        DateRangeFilter("date_from", "date_to", CLIENT_CREATED, label="Submitted"),
        TextFilter(
            "client_info",
            (text_field("client_name"), text_field("business")),
            label="Client info",
            placeholder="Name or business",
        ),
        TextFilter(
            "contact",
            (text_field("email_address"), text_field("contacts.phone")),
            label="Contact",
            placeholder="Email or phone",
        ),
    ),
    sort_fields=(
        CLIENT_CREATED,
        text_field("client_name", "Client Name"),
        text_field("business", "Business"),
        text_field("status", "Status"),
    ),
    default_sort=SortState("created_at", Direction.DESC),
    columns=(
        CsvColumn("Client ID", number_field("client_id")),
        CsvColumn("Client Name", text_field("client_name")),
        CsvColumn("Email", text_field("email_address")),
        CsvColumn("Phone", text_field("contacts.phone")),
        CsvColumn("Business", text_field("business")),
        CsvColumn("Key Challenges", text_field("key_challenges")),
        CsvColumn("Lead Handling", text_field("lead_handlings.description")),
        CsvColumn("Status", text_field("status"), default="pending"),
        CsvColumn("Submitted Date", CLIENT_CREATED, formatter=format_export_date),
    ),
    export_prefix="client-onboarding-submissions",
    empty_message="No client submissions yet.",
    no_match_message="No submissions match the current filters.",
)

LEADS = ViewSpec(
    name="leads",
    title="Leads Overview",
    table="clients",
    build_records=_clients_to_leads,
    filters=(
        CategoryFilter(
            "status",
            text_field("status"),
            choices=((ALL, "All"), ("Hot", "Hot"), ("Warm", "Warm"), ("Cold", "Cold")),
            label="Status",
        ),
        TextFilter("search", (text_field("name"), text_field("email")), label="Search", placeholder="Name or email"),
    ),
    sort_fields=(
        date_field("created_at", "Created"),
        text_field("name", "Name"),
        text_field("status", "Status"),
        text_field("source", "Source"),
    ),
    default_sort=SortState("created_at", Direction.DESC),
    columns=(
        CsvColumn("Lead ID", number_field("id")),
        CsvColumn("Name", text_field("name")),
        CsvColumn("Email", text_field("email")),
        CsvColumn("Phone", text_field("phone")),
        CsvColumn("Source", text_field("source")),
        CsvColumn("Status", text_field("status")),
        CsvColumn("Contacted", text_field("contacted"), formatter=_yes_no, default="No"),
        CsvColumn("Created Date", date_field("created_at"), formatter=format_export_date),
    ),
    export_prefix="leads",
    empty_message="No leads yet.",
    no_match_message="No leads match the selected status.",
)

ONBOARDING = ViewSpec(
    name="onboarding",
    title="Onboarding Tracker",
    table="clients",
    build_records=_clients_to_onboarding,
    filters=(
        CategoryFilter(
            "status",
            text_field("status"),
            choices=((ALL, "All"), ("Pending", "Pending"), ("In Progress", "In Progress")),
            label="Status",
        ),
    ),
    sort_fields=(
        date_field("sent_at", "Sent"),
        text_field("client_name", "Client"),
        text_field("status", "Status"),
    ),
    default_sort=SortState("sent_at", Direction.DESC),
    columns=(
        CsvColumn("Client ID", number_field("id")),
        CsvColumn("Client Name", text_field("client_name")),
        CsvColumn("Status", text_field("status")),
        CsvColumn("Sent Date", date_field("sent_at"), formatter=format_export_date),
    ),
    export_prefix="onboarding-tracker",
    empty_message="Everyone is onboarded.",
)

INVOICES = ViewSpec(
    name="invoices",
    title="Invoices",
    table="invoices",
    build_records=_rows_to(Invoice),
    filters=(
        TextFilter(
            "search",
            (text_field("client_name"), text_field("email"), text_field("invoice_number")),
            label="Search",
            placeholder="Client, email or invoice number",
        ),
        CategoryFilter(
            "status",
            text_field("status"),
            choices=((ALL, "All"), ("paid", "Paid"), ("unpaid", "Unpaid"), ("pending", "Pending")),
            label="Status",
        ),
        DateRangeFilter("date_from", "date_to", date_field("invoice_date"), label="Invoice date"),
    ),
    sort_fields=(
        date_field("invoice_date", "Invoice Date"),
        date_field("due_date", "Due Date"),
        number_field("amount", "Amount"),
        text_field("client_name", "Client"),
        text_field("status", "Status"),
    ),
    default_sort=SortState("invoice_date", Direction.DESC),
    columns=(
        CsvColumn("Invoice ID", text_field("id")),
        CsvColumn("Invoice Number", text_field("invoice_number")),
        CsvColumn("Client Name", text_field("client_name")),
        CsvColumn("Email", text_field("email")),
        CsvColumn("Invoice Date", date_field("invoice_date"), formatter=format_export_date),
        CsvColumn("Due Date", date_field("due_date"), formatter=format_export_date),
        CsvColumn("Amount", number_field("amount")),
        CsvColumn("Status", text_field("status")),
        CsvColumn("Notes", text_field("notes")),
    ),
    export_prefix="invoices",
    empty_message="No invoices yet.",
    no_match_message="No invoices match the current filters.",
)

FOLLOW_UPS = ViewSpec(
    name="follow_ups",
    title="Follow-ups",
    table="follow_ups",
    build_records=_rows_to(FollowUp),
    filters=(
        TextFilter("search", (text_field("client_name"), text_field("email")), label="Search", placeholder="Client or email"),
        CategoryFilter(
            "followed_up",
            text_field("followed_up", accessor=lambda r: bool(r.followed_up)),
            choices=((ALL, "All"), ("true", "Followed up"), ("false", "Pending")),
            label="Followed up",
        ),
    ),
    sort_fields=(
        date_field("last_follow_up", "Last Follow-up"),
        date_field("created_at", "Created"),
        text_field("client_name", "Client"),
    ),
    default_sort=SortState("created_at", Direction.DESC),
    columns=(
        CsvColumn("Follow-up ID", text_field("id")),
        CsvColumn("Invoice ID", text_field("invoice_id")),
        CsvColumn("Client Name", text_field("client_name")),
        CsvColumn("Email", text_field("email")),
        CsvColumn("Followed Up", text_field("followed_up"), formatter=_yes_no, default="No"),
        CsvColumn("Last Follow-up", date_field("last_follow_up"), formatter=format_export_date),
        CsvColumn("Notes", text_field("notes")),
    ),
    export_prefix="follow-ups",
    empty_message="No follow-ups yet.",
)

CV_EVALUATIONS = ViewSpec(
    name="cv_evaluations",
    title="Candidate Evaluation Results",
    table="cv_evaluations",
    build_records=_rows_to(CVEvaluation),
    filters=(
        TextFilter(
            "search",
            (text_field("candidate_name"), text_field("email")),
            label="Search",
            placeholder="Search by name or email...",
        ),
        CategoryFilter(
            "consideration",
            text_field("consideration"),
            choices=(
                (ALL, "All Candidates"),
                ("shortlist", "Shortlisted"),
                ("rejected", "Rejected"),
                ("under review", "Under Review"),
            ),
            label="Consideration",
        ),
    ),
    sort_fields=(
        date_field("evaluation_date", "Date"),
        text_field("candidate_name", "Name"),
        number_field("vote", "Vote"),
    ),
    default_sort=SortState("evaluation_date", Direction.DESC),
    columns=(
        CsvColumn("Date", date_field("evaluation_date"), formatter=format_export_date),
        CsvColumn("Name", text_field("candidate_name")),
        CsvColumn("Phone", text_field("phone")),
        CsvColumn("City", text_field("city")),
        CsvColumn("Email", text_field("email")),
        CsvColumn("D.O.B", date_field("date_of_birth"), formatter=format_export_date),
        CsvColumn("Education", text_field("education")),
        CsvColumn("Job History", text_field("job_history")),
        CsvColumn("Skills", text_field("skills")),
        CsvColumn("Summary", text_field("ai_summary")),
        CsvColumn("Vote", number_field("vote")),
        CsvColumn("Consideration", text_field("consideration")),
    ),
    export_prefix="cv-evaluations",
    order_by="evaluation_date",
    empty_message="No CV evaluations found. Upload a CV to get started.",
    no_match_message="No candidates match the current filters.",
)

VIEWS: Dict[str, ViewSpec] = {
    v.name: v for v in (CLIENTS, LEADS, ONBOARDING, INVOICES, FOLLOW_UPS, CV_EVALUATIONS)
}


def get_view(name: str) -> ViewSpec:
    key = (name or "").strip().lower().replace("-", "_")
    try:
        return VIEWS[key]
    except KeyError:
        raise UnknownViewError(name) from None


def list_views() -> List[ViewSpec]:
    return list(VIEWS.values())
