"""Typed records for the backend tables.

Rows arrive as JSON objects; ``from_row`` keeps the named columns, ignores
anything else and leaves absent columns as ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from core.dates import normalize_date
from core.fields import get_value

T = TypeVar("T")


def _from_row(cls: Type[T], row: Mapping[str, Any]) -> T:
    return cls(**{f.name: row.get(f.name) for f in fields(cls)})  # type: ignore[arg-type]


class _Row:
    @classmethod
    def from_row(cls, row: Mapping[str, Any]):
        return _from_row(cls, row)


@dataclass(frozen=True)
class Client(_Row):
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    email_address: Optional[str] = None
    business: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    key_challenges: Optional[str] = None
    contacts: Optional[Dict[str, Any]] = None
    lead_handlings: Optional[Dict[str, Any]] = None
    invoice_details: Optional[Dict[str, Any]] = None
    onboarding_details: Optional[str] = None
    conversation: Optional[str] = None
    invoice_files: Optional[List[str]] = None
    meeting_time: Optional[Any] = None

    @property
    def phone(self) -> Optional[str]:
        return get_value(self.contacts, "phone")


@dataclass(frozen=True)
class Lead(_Row):
    id: Optional[int] = None
    name: Optional[str] = None
    email: str = ""
    phone: str = ""
    source: str = ""
    status: str = "Cold"
    created_at: str = ""
    contacted: bool = False


@dataclass(frozen=True)
class OnboardingItem(_Row):
    id: Optional[int] = None
    client_name: Optional[str] = None
    status: str = "Pending"
    sent_at: str = ""


@dataclass(frozen=True)
class Invoice(_Row):
    id: Optional[str] = None
    deal_id: Optional[int] = None
    client_name: Optional[str] = None
    email: Optional[str] = None
    invoice_date: Optional[str] = None
    amount: Optional[float] = None
    due_date: Optional[str] = None
    status: Optional[str] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class FollowUp(_Row):
    id: Optional[str] = None
    invoice_id: Optional[str] = None
    client_name: Optional[str] = None
    email: Optional[str] = None
    followed_up: Optional[bool] = None
    last_follow_up: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class CVEvaluation(_Row):
    id: Optional[str] = None
    candidate_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    date_of_birth: Optional[str] = None
    education: Optional[str] = None
    job_history: Optional[str] = None
    skills: Optional[str] = None
    ai_summary: Optional[str] = None
    vote: Optional[float] = None
    consideration: Optional[str] = None
    evaluation_date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class ProfileCriteria(_Row):
    id: int = 1
    criteria: str = ""
    updated_at: Optional[str] = None


def _iso_day(raw: Any) -> str:
    ts = normalize_date(raw)
    return "" if ts is None else ts.strftime("%Y-%m-%d")


def lead_status(client_status: Optional[str]) -> str:
    if client_status == "contacted":
        return "Hot"
    if client_status == "pending":
        return "Warm"
    return "Cold"


def to_lead(client: Client) -> Lead:
    return Lead(
        id=client.client_id,
        name=client.client_name,
        email=client.email_address or "No email provided",
        phone=client.phone or "No phone provided",
        source=get_value(client.contacts, "source") or "Unknown",
        status=lead_status(client.status),
        created_at=_iso_day(client.created_at),
        contacted=client.status == "contacted",
    )


def onboarding_status(client_status: Optional[str]) -> str:
    if client_status == "completed":
        return "Completed"
    if client_status == "contacted":
        return "In Progress"
    return "Pending"


def to_onboarding_item(client: Client) -> OnboardingItem:
    return OnboardingItem(
        id=client.client_id,
        client_name=client.client_name,
        status=onboarding_status(client.status),
        sent_at=_iso_day(client.created_at),
    )
