from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from core.charts import breakdown_bar, to_vega_spec
from core.dates import normalize_date
from core.fields import get_value
from core.formatting import CLIENT_STATUS_BADGES, CONSIDERATION_BADGES, is_overdue
from core.models import Client, CVEvaluation, Invoice

ONBOARDED_STATUSES = {"onboarded", "completed"}
PENDING_INVOICE_STATUSES = {"pending", "unpaid"}


def _amount(value: Any) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if pd.isna(out) else out


def _counts(values: Sequence[Optional[str]], *, column: str, missing: str) -> pd.DataFrame:
    s = pd.Series([v if v else missing for v in values], dtype="object", name=column)
    return s.value_counts().rename_axis(column).reset_index(name="count")


def compute_summary(clients: List[Client], *, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Headline cards: leads this month, onboarded clients, payments and pending invoices."""
    now = now or datetime.now(timezone.utc)
    current = normalize_date(now)

    this_month = 0
    onboarded = 0
    payments = 0.0
    pending = 0
    for c in clients:
        created = normalize_date(c.created_at)
        if created is not None and current is not None and (created.year, created.month) == (current.year, current.month):
            this_month += 1
        if c.status in ONBOARDED_STATUSES:
            onboarded += 1
        details = c.invoice_details if isinstance(c.invoice_details, dict) else None
        if details is None:
            continue
        status = get_value(details, "status")
        if status == "paid" and details.get("amount"):
            payments += _amount(details.get("amount"))
        elif status in PENDING_INVOICE_STATUSES:
            pending += 1

    charts: Dict[str, Any] = {}
    if clients:
        counts = _counts([c.status for c in clients], column="status", missing="unknown")
        charts["client_status"] = to_vega_spec(
            breakdown_bar(counts, category="status", title="Client status", colors=CLIENT_STATUS_BADGES)
        )

    return {
        "kpis": {
            "total_leads_this_month": this_month,
            "clients_onboarded": onboarded,
            "payments_received": payments,
            "invoices_pending": pending,
            "total_clients": len(clients),
        },
        "charts": charts,
    }


def compute_invoice_summary(invoices: List[Invoice], *, today=None) -> Dict[str, Any]:
    if not invoices:
        return {"kpis": {"paid_total": 0.0, "outstanding_total": 0.0, "overdue": 0, "count": 0}}
    df = pd.DataFrame(
        {
            "status": [(i.status or "").lower() for i in invoices],
            "amount": [_amount(i.amount) for i in invoices],
        }
    )
    overdue = sum(1 for i in invoices if is_overdue(i.due_date, i.status, today))
    return {
        "kpis": {
            "paid_total": float(df.loc[df["status"] == "paid", "amount"].sum()),
            "outstanding_total": float(df.loc[df["status"] != "paid", "amount"].sum()),
            "overdue": overdue,
            "count": int(len(df)),
        }
    }


def compute_cv_summary(evaluations: List[CVEvaluation]) -> Dict[str, Any]:
    if not evaluations:
        return {"kpis": {"candidates": 0, "average_vote": None, "shortlisted": 0}, "charts": {}}
    votes = pd.to_numeric(pd.Series([e.vote for e in evaluations], dtype="object"), errors="coerce")
    considerations = [(e.consideration or "").lower() or None for e in evaluations]
    counts = _counts(considerations, column="consideration", missing="not set")
    chart = breakdown_bar(counts, category="consideration", title="Consideration", colors=CONSIDERATION_BADGES)
    return {
        "kpis": {
            "candidates": len(evaluations),
            "average_vote": float(votes.mean()) if votes.notna().any() else None,
            "shortlisted": sum(1 for c in considerations if c == "shortlist"),
        },
        "charts": {"consideration": to_vega_spec(chart)},
    }
