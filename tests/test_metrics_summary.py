from datetime import date, datetime, timezone

from core.metrics_summary import compute_cv_summary, compute_invoice_summary, compute_summary
from core.views import get_view


def _records(tables, name):
    view = get_view(name)
    return view.build_records(tables[view.table])


def test_compute_summary_kpis(tables):
    clients = _records(tables, "clients")
    summary = compute_summary(clients, now=datetime(2024, 6, 20, tzinfo=timezone.utc))
    assert summary["kpis"] == {
        "total_leads_this_month": 2,
        "clients_onboarded": 1,
        "payments_received": 5700.0,
        "invoices_pending": 1,
        "total_clients": 3,
    }
    assert summary["charts"]["client_status"]["mark"]["type"] == "bar"


def test_compute_summary_without_clients():
    summary = compute_summary([])
    assert summary["kpis"]["total_clients"] == 0
    assert summary["charts"] == {}


def test_invoice_summary(tables):
    invoices = _records(tables, "invoices")
    kpis = compute_invoice_summary(invoices, today=date(2024, 6, 22))["kpis"]
    assert kpis == {"paid_total": 2500.0, "outstanding_total": 1800.0, "overdue": 0, "count": 2}
    later = compute_invoice_summary(invoices, today=date(2024, 6, 30))["kpis"]
    assert later["overdue"] == 1


def test_cv_summary(tables):
    summary = compute_cv_summary(_records(tables, "cv_evaluations"))
    assert summary["kpis"] == {"candidates": 3, "average_vote": 5.5, "shortlisted": 1}
    assert "consideration" in summary["charts"]


def test_cv_summary_empty():
    assert compute_cv_summary([])["kpis"]["average_vote"] is None
