"""Display helpers shared by the API payloads and the Streamlit shell.

On-screen formatting uses placeholders ("-", "N/A"); export formatting never
does, missing values there are empty strings.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, List, Optional

import pandas as pd

from core.dates import is_blank_date, normalize_date

PLACEHOLDER = "-"
NOT_AVAILABLE = "N/A"
INVALID_DATE = "Invalid Date"


def format_date(raw: Any, placeholder: str = PLACEHOLDER) -> str:
    if is_blank_date(raw):
        return placeholder
    ts = normalize_date(raw)
    if ts is None:
        return INVALID_DATE
    return ts.strftime("%d/%m/%Y")


def format_long_date(raw: Any) -> str:
    """``Jun 15, 2024`` style used on the onboarding submissions table."""
    if is_blank_date(raw):
        return NOT_AVAILABLE
    ts = normalize_date(raw)
    if ts is None:
        return INVALID_DATE
    return f"{ts.strftime('%b')} {ts.day}, {ts.year}"


def format_export_date(raw: Any) -> str:
    ts = normalize_date(raw)
    return "" if ts is None else ts.strftime("%Y-%m-%d")


def format_currency(amount: Any) -> str:
    if amount is None or (isinstance(amount, float) and pd.isna(amount)):
        return NOT_AVAILABLE
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return NOT_AVAILABLE
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def truncate_text(text: Optional[str], max_length: int = 50) -> str:
    if not text:
        return NOT_AVAILABLE
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def vote_badge(vote: Any) -> str:
    """Colour band for a 0-10 CV score."""
    try:
        v = float(vote)
    except (TypeError, ValueError):
        return "none"
    if 1 <= v <= 4:
        return "low"
    if 5 <= v <= 7:
        return "mid"
    if 8 <= v <= 10:
        return "high"
    return "none"


def format_vote(vote: Any) -> str:
    if vote is None or vote == "" or (isinstance(vote, float) and pd.isna(vote)) or vote == 0:
        return PLACEHOLDER
    if isinstance(vote, float) and vote.is_integer():
        vote = int(vote)
    return f"{vote}/10"


CONSIDERATION_BADGES = {"shortlist": "green", "rejected": "red", "under review": "yellow"}
CLIENT_STATUS_BADGES = {"contacted": "green", "pending": "yellow", "completed": "blue"}
LEAD_STATUS_BADGES = {"Hot": "red", "Warm": "yellow", "Cold": "blue"}
ONBOARDING_STATUS_BADGES = {"Completed": "green", "In Progress": "yellow", "Pending": "red"}
VOTE_BADGES = {"low": "red", "mid": "yellow", "high": "green"}


def consideration_badge(consideration: Optional[str]) -> str:
    return CONSIDERATION_BADGES.get((consideration or "").lower(), "gray")


def client_status_badge(status: Optional[str]) -> str:
    return CLIENT_STATUS_BADGES.get(status or "", "gray")


def lead_status_badge(status: Optional[str]) -> str:
    return LEAD_STATUS_BADGES.get(status or "", "gray")


def onboarding_status_badge(status: Optional[str]) -> str:
    return ONBOARDING_STATUS_BADGES.get(status or "", "gray")


def invoice_status_badge(status: Optional[str]) -> str:
    return "green" if (status or "").lower() == "paid" else "red"


def is_overdue(due_date: Any, status: Optional[str], today: Optional[date] = None) -> bool:
    """Unpaid invoices whose due date is already behind ``today``."""
    if (status or "").lower() == "paid":
        return False
    due = normalize_date(due_date)
    if due is None:
        return False
    return due < normalize_date(today or date.today())


def split_skills(skills: Optional[str]) -> List[str]:
    if not skills:
        return []
    return [s.strip() for s in re.split(r"[,;•\n]", skills) if s.strip()]
