import pandas as pd
import streamlit as st
from contextlib import contextmanager
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from core import data as dc
from core.charts import BADGE_COLORS
from core.config import configure_logging, create_data_source, get_settings
from core.export import export_csv, export_filename
from core.filters import CategoryFilter, DateRangeFilter, TextFilter, describe_filters
from core.formatting import (
    client_status_badge,
    consideration_badge,
    format_currency,
    format_date,
    format_long_date,
    VOTE_BADGES,
    format_vote,
    invoice_status_badge,
    is_overdue,
    lead_status_badge,
    onboarding_status_badge,
    split_skills,
    truncate_text,
    vote_badge,
)
from core.metrics_summary import compute_cv_summary, compute_invoice_summary, compute_summary
from core.pipeline import PageState
from core.sorting import Direction, SortState
from core.views import ViewSpec, get_view, list_views


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(labels: List[str]) -> str:
    chips = labels or ["No filters"]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, filter_summary_html: str, export_bytes: Optional[bytes] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        btn_cols = st.columns(2)
        if btn_cols[0].button("Refresh"):
            st.rerun()
        if export_bytes is not None:
            btn_cols[1].download_button("Export CSV", data=export_bytes, file_name=export_name, mime="text/csv")
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


def badge(text: str, color: str) -> str:
    hex_color = BADGE_COLORS.get(color, BADGE_COLORS["gray"])
    return f"<span style='color:{hex_color};font-weight:600'>{text}</span>"


# ---------- view state ----------
def _state_key(view: ViewSpec, name: str) -> str:
    return f"{view.name}:{name}"


def view_filters(view: ViewSpec) -> Dict[str, str]:
    key = _state_key(view, "filters")
    if key not in st.session_state:
        st.session_state[key] = view.initial_filters()
    return st.session_state[key]


def view_sort(view: ViewSpec) -> SortState:
    key = _state_key(view, "sort")
    if key not in st.session_state:
        st.session_state[key] = view.initial_sort()
    return st.session_state[key]


def view_page(view: ViewSpec) -> int:
    return int(st.session_state.get(_state_key(view, "page"), 1))


def set_page(view: ViewSpec, page: int):
    st.session_state[_state_key(view, "page")] = page


def render_filter_widgets(view: ViewSpec) -> Dict[str, str]:
    current = dict(view_filters(view))
    for d in view.filters:
        if isinstance(d, TextFilter):
            current[d.key] = st.text_input(d.label or d.key, value=current.get(d.key, ""), placeholder=d.placeholder, key=_state_key(view, d.key))
        elif isinstance(d, CategoryFilter):
            values = [v for v, _ in d.choices]
            labels = dict(d.choices)
            chosen = current.get(d.key, values[0] if values else "all")
            current[d.key] = st.selectbox(
                d.label or d.key,
                options=values,
                index=values.index(chosen) if chosen in values else 0,
                format_func=lambda v, labels=labels: labels.get(v, v),
                key=_state_key(view, d.key),
            )
        elif isinstance(d, DateRangeFilter):
            c1, c2 = st.columns(2)
            lo = c1.date_input(f"{d.label} from", value=None, key=_state_key(view, d.from_key))
            hi = c2.date_input(f"{d.label} to", value=None, key=_state_key(view, d.to_key))
            current[d.from_key] = lo.isoformat() if lo else ""
            current[d.to_key] = hi.isoformat() if hi else ""
    if st.button("Reset filters", key=_state_key(view, "reset")):
        for k in list(st.session_state.keys()):
            if k.startswith(f"{view.name}:"):
                del st.session_state[k]
        st.rerun()
    if current != view_filters(view):
        set_page(view, 1)
    st.session_state[_state_key(view, "filters")] = current
    return current


def render_sort_widgets(view: ViewSpec) -> SortState:
    sort = view_sort(view)
    names = [f.name for f in view.sort_fields]
    if not names:
        return sort
    labels = {f.name: f.title for f in view.sort_fields}
    c1, c2 = st.columns([3, 1])
    field = c1.selectbox(
        "Sort by",
        options=names,
        index=names.index(sort.field) if sort.field in names else 0,
        format_func=lambda n: labels.get(n, n),
        key=_state_key(view, "sort_field"),
    )
    if field != sort.field:
        sort = sort.toggle(field)
    if c2.button("Asc ↑" if sort.direction is Direction.ASC else "Desc ↓", key=_state_key(view, "sort_dir")):
        sort = sort.toggle(sort.field)
    st.session_state[_state_key(view, "sort")] = sort
    return sort


# ---------- row presenters ----------
def present_row(view: ViewSpec, record: Any) -> Dict[str, str]:
    r = asdict(record)
    if view.name == "clients":
        return {
            "Client": f"{r['client_name'] or 'N/A'} (#{r['client_id']})",
            "Contact": f"{r['email_address'] or 'N/A'} / {(r['contacts'] or {}).get('phone') or 'N/A'}",
            "Business": truncate_text(r["business"]),
            "Key Challenges": truncate_text(r["key_challenges"]),
            "Lead Handling": truncate_text((r["lead_handlings"] or {}).get("description")),
            "Submitted": format_long_date(r["created_at"]),
            "Status": badge(r["status"] or "pending", client_status_badge(r["status"])),
        }
    if view.name == "leads":
        return {
            "Name": r["name"] or "-",
            "Email": r["email"],
            "Phone": r["phone"],
            "Source": r["source"],
            "Status": badge(r["status"], lead_status_badge(r["status"])),
            "Contacted": "Yes" if r["contacted"] else "No",
            "Created": r["created_at"] or "-",
        }
    if view.name == "onboarding":
        return {
            "Client": r["client_name"] or "-",
            "Status": badge(r["status"], onboarding_status_badge(r["status"])),
            "Sent": r["sent_at"] or "-",
        }
    if view.name == "invoices":
        overdue = is_overdue(r["due_date"], r["status"])
        due = format_date(r["due_date"])
        return {
            "Client": r["client_name"] or "-",
            "Email": r["email"] or "-",
            "Number": r["invoice_number"] or "-",
            "Amount": format_currency(r["amount"]),
            "Invoice Date": format_date(r["invoice_date"]),
            "Due": badge(due, "red") if overdue else due,
            "Status": badge(r["status"] or "-", invoice_status_badge(r["status"])),
        }
    if view.name == "follow_ups":
        return {
            "Client": r["client_name"] or "-",
            "Email": r["email"] or "-",
            "Followed Up": badge("Yes", "green") if r["followed_up"] else badge("Pending", "yellow"),
            "Last Follow-up": format_date(r["last_follow_up"]),
            "Notes": truncate_text(r["notes"]),
        }
    if view.name == "cv_evaluations":
        return {
            "Date": format_date(r["evaluation_date"]),
            "Name": r["candidate_name"] or "-",
            "Phone": r["phone"] or "-",
            "City": r["city"] or "-",
            "Email": r["email"] or "-",
            "D.O.B": format_date(r["date_of_birth"]),
            "Skills": truncate_text(r["skills"]),
            "Summary": truncate_text(r["ai_summary"], 80),
            "Vote": badge(format_vote(r["vote"]), VOTE_BADGES.get(vote_badge(r["vote"]), "gray")),
            "Consideration": badge(r["consideration"], consideration_badge(r["consideration"])) if r["consideration"] else "-",
        }
    return {k: str(v) for k, v in r.items()}


# ---------- pages ----------
def render_candidate_details(evaluations: List[Any]):
    for e in evaluations:
        with st.expander(f"{e.candidate_name or 'Candidate'}: details"):
            c1, c2 = st.columns(2)
            c1.markdown(f"**Email:** {e.email or 'N/A'}  \n**Phone:** {e.phone or 'N/A'}  \n**City:** {e.city or 'N/A'}")
            c2.markdown(f"**Education:** {e.education or 'N/A'}  \n**Job history:** {e.job_history or 'N/A'}")
            skills = split_skills(e.skills)
            if skills:
                st.markdown(format_filter_summary(skills), unsafe_allow_html=True)
            if e.ai_summary:
                st.caption(e.ai_summary)


def render_view(view: ViewSpec, records: List[Any]):
    with st.sidebar:
        st.markdown("---")
        st.markdown("### Filters")
        filters = render_filter_widgets(view)
    sort = render_sort_widgets(view)

    ctx = dc.prepare_context(view, records, filters, sort, PageState(view_page(view), settings.page_size))
    result = ctx["result"]
    set_page(view, result.current_page)

    render_page_header(
        view.title,
        "Dashboard / " + view.title,
        format_filter_summary(describe_filters(ctx["filters"], view.filters)),
        export_bytes=export_csv(ctx["ordered"], view.columns) if ctx["ordered"] else None,
        export_name=export_filename(view.export_prefix),
    )

    if result.empty_reason == "no_data":
        st.info(view.empty_message)
        return
    if result.empty_reason == "no_matches":
        st.warning(view.no_match_message)
        return

    st.caption(f"Showing {len(result.visible_records)} of {result.filtered_count} filtered records ({result.total_count} total)")
    rows = pd.DataFrame([present_row(view, r) for r in result.visible_records])
    st.markdown(rows.to_html(escape=False, index=False), unsafe_allow_html=True)
    if view.name == "cv_evaluations":
        render_candidate_details(result.visible_records)

    c1, c2, c3 = st.columns([1, 2, 1])
    if c1.button("← Previous", disabled=result.current_page <= 1, key=_state_key(view, "prev")):
        set_page(view, result.current_page - 1)
        st.rerun()
    c2.markdown(f"<div style='text-align:center'>Page {result.current_page} of {result.total_pages}</div>", unsafe_allow_html=True)
    if c3.button("Next →", disabled=result.current_page >= result.total_pages, key=_state_key(view, "next")):
        set_page(view, result.current_page + 1)
        st.rerun()


def render_summary(data_records: Dict[str, List[Any]]):
    render_page_header("Summary", "Dashboard / Summary", format_filter_summary([]))
    summary = compute_summary(data_records.get("clients", []))
    kpis = summary["kpis"]
    cols = st.columns(4)
    cols[0].metric("Total Leads This Month", f"{kpis['total_leads_this_month']:,}")
    cols[1].metric("Clients Onboarded", f"{kpis['clients_onboarded']:,}")
    cols[2].metric("Payments Received", format_currency(kpis["payments_received"]))
    cols[3].metric("Invoices Pending", f"{kpis['invoices_pending']:,}")

    inv = compute_invoice_summary(data_records.get("invoices", []))["kpis"]
    cv = compute_cv_summary(data_records.get("cv_evaluations", []))
    cols = st.columns(3)
    cols[0].metric("Outstanding", format_currency(inv["outstanding_total"]), help=f"{inv['overdue']} overdue")
    cols[1].metric("Candidates", f"{cv['kpis']['candidates']:,}")
    avg = cv["kpis"]["average_vote"]
    cols[2].metric("Average Vote", f"{avg:.1f}/10" if avg is not None else "N/A")

    c1, c2 = st.columns(2)
    if "client_status" in summary["charts"]:
        with c1, card("Client status"):
            st.vega_lite_chart(summary["charts"]["client_status"], use_container_width=True)
    if "consideration" in cv["charts"]:
        with c2, card("CV consideration"):
            st.vega_lite_chart(cv["charts"]["consideration"], use_container_width=True)


# ---------- UI setup ----------
settings = get_settings()
configure_logging(settings.log_level)
st.set_page_config(page_title="Business Operations Dashboard", layout="wide")
inject_base_styles()


@st.cache_resource
def data_source():
    return create_data_source(settings)


source = data_source()
try:
    data_ctx = dc.load_dashboard_data(source)
except Exception as exc:
    st.error(f"Failed to load data: {exc}")
    st.stop()

views = list_views()
with st.sidebar:
    st.markdown("### Navigate")
    labels = ["Summary"] + [v.title for v in views]
    nav_choice = st.radio("Navigate", labels, index=0)

if nav_choice == "Summary":
    render_summary(data_ctx["records"])
else:
    chosen = next(v for v in views if v.title == nav_choice)
    render_view(get_view(chosen.name), data_ctx["records"][chosen.name])
