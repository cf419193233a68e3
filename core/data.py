from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.datasource import DataSource, table_key
from core.errors import RecordNotFoundError
from core.filters import normalize_filters
from core.models import Client, FollowUp, Invoice, ProfileCriteria
from core.pipeline import PageState, run_ordered
from core.sorting import Direction, SortState
from core.views import ViewSpec, list_views

logger = logging.getLogger(__name__)

PROFILE_CRITERIA_ID = 1


def _today() -> date:
    return date.today()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------- Loading ----------------
def load_view_records(view: ViewSpec, source: DataSource) -> List[Any]:
    rows = source.list_rows(view.table, order_by=view.order_by, descending=True)
    records = view.build_records(rows)
    logger.debug("loaded %d %s rows -> %d records", len(rows), view.table, len(records))
    return records


def load_dashboard_data(source: DataSource, views: Optional[Iterable[ViewSpec]] = None) -> Dict[str, Any]:
    """Fetch every table once and build the records of each view from it."""
    views = list(views) if views is not None else list_views()
    tables: Dict[str, List[Dict[str, Any]]] = {}
    records: Dict[str, List[Any]] = {}
    for view in views:
        cache_key = f"{view.table}:{view.order_by}"
        if cache_key not in tables:
            tables[cache_key] = source.list_rows(view.table, order_by=view.order_by, descending=True)
        records[view.name] = view.build_records(tables[cache_key])
    logger.info("dashboard data loaded: %s", {name: len(rs) for name, rs in records.items()})
    return {"records": records, "views": [v.name for v in views]}


def parse_sort(view: ViewSpec, field: Optional[str], direction: Optional[str]) -> SortState:
    initial = view.initial_sort()
    if not field:
        return initial
    try:
        d = Direction((direction or Direction.DESC.value).lower())
    except ValueError:
        d = Direction.DESC
    return SortState(field=field, direction=d)


def prepare_context(
    view: ViewSpec,
    records: List[Any],
    raw_filters: Optional[Mapping[str, Any]] = None,
    sort: Optional[SortState] = None,
    page: Optional[PageState] = None,
) -> Dict[str, Any]:
    filters = normalize_filters(raw_filters, view.filters)
    sort = sort or view.initial_sort()
    page = page or PageState(1, view.page_size)
    ordered, result = run_ordered(records, filters, sort, page, view=view)
    return {"view": view, "filters": filters, "sort": sort, "page": page, "ordered": ordered, "result": result}


# ---------------- Clients / leads / onboarding ----------------
def find_client(source: DataSource, client_id: Any) -> Optional[Client]:
    rows = source.find_rows("clients", {table_key("clients"): client_id})
    return Client.from_row(rows[0]) if rows else None


def mark_lead_contacted(source: DataSource, client_id: Any) -> Client:
    row = source.update_row("clients", client_id, {"status": "contacted"})
    logger.info("client %s marked contacted", client_id)
    return Client.from_row(row)


def resend_onboarding(source: DataSource, client_id: Any, *, now: Optional[str] = None) -> Client:
    # Sending the email itself happens outside the dashboard; we only record the resend.
    stamp = now or _now_iso()
    row = source.update_row("clients", client_id, {"onboarding_details": f"Email resent on {stamp}"})
    logger.info("onboarding email resend recorded for client %s", client_id)
    return Client.from_row(row)


def invoice_draft_from_client(client: Client, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or _today()
    return {
        "client_name": client.client_name,
        "email": client.email_address or "",
        "invoice_date": today.isoformat(),
        "status": "unpaid",
        "deal_id": client.client_id,
    }


# ---------------- Invoices ----------------
def search_invoice(source: DataSource, term: str) -> Optional[Invoice]:
    term = (term or "").strip()
    if not term:
        return None
    rows = source.find_rows("invoices", {"id": term, "invoice_number": term}, any_match=True)
    return Invoice.from_row(rows[0]) if rows else None


def create_invoice(source: DataSource, values: Mapping[str, Any]) -> Invoice:
    payload = {k: v for k, v in values.items() if k not in {"id", "created_at", "updated_at"}}
    payload["updated_at"] = _now_iso()
    row = source.insert_row("invoices", payload)
    logger.info("invoice %s created for %s", row.get("id"), row.get("client_name"))
    return Invoice.from_row(row)


def update_invoice(source: DataSource, invoice_id: Any, values: Mapping[str, Any]) -> Invoice:
    payload = {k: v for k, v in values.items() if k not in {"id", "created_at"}}
    payload["updated_at"] = _now_iso()
    return Invoice.from_row(source.update_row("invoices", invoice_id, payload))


def delete_invoice(source: DataSource, invoice_id: Any) -> None:
    source.delete_row("invoices", invoice_id)
    logger.info("invoice %s deleted", invoice_id)


# ---------------- Follow-ups ----------------
def update_follow_up(source: DataSource, follow_up_id: Any, values: Mapping[str, Any]) -> FollowUp:
    payload = {k: v for k, v in values.items() if k not in {"id", "created_at"}}
    payload["updated_at"] = _now_iso()
    return FollowUp.from_row(source.update_row("follow_ups", follow_up_id, payload))


def set_follow_up(source: DataSource, follow_up_id: Any, followed_up: bool, today: Optional[date] = None) -> FollowUp:
    last = (today or _today()).isoformat() if followed_up else None
    return update_follow_up(source, follow_up_id, {"followed_up": followed_up, "last_follow_up": last})


# ---------------- Profile criteria ----------------
def get_profile_criteria(source: DataSource) -> ProfileCriteria:
    rows = source.find_rows("profile_criteria", {"id": PROFILE_CRITERIA_ID})
    if not rows:
        return ProfileCriteria(id=PROFILE_CRITERIA_ID, criteria="")
    return ProfileCriteria.from_row(rows[0])


def update_profile_criteria(source: DataSource, criteria: str) -> ProfileCriteria:
    values = {"criteria": criteria, "updated_at": _now_iso()}
    try:
        row = source.update_row("profile_criteria", PROFILE_CRITERIA_ID, values)
    except RecordNotFoundError:
        row = source.insert_row("profile_criteria", {"id": PROFILE_CRITERIA_ID, **values})
    return ProfileCriteria.from_row(row)
