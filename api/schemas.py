from __future__ import annotations

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field


class TableRequestModel(BaseModel):
    filters: Dict[str, Optional[str]] = Field(default_factory=dict)
    sort_field: Optional[str] = None
    sort_direction: Literal["asc", "desc"] = "desc"
    page: int = 1
    page_size: Optional[int] = Field(default=None, gt=0)


class InvoiceCreateModel(BaseModel):
    client_name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    invoice_date: str
    status: Literal["paid", "unpaid", "pending"] = "unpaid"
    amount: Optional[float] = None
    due_date: Optional[str] = None
    invoice_number: Optional[str] = None
    deal_id: Optional[int] = None
    notes: Optional[str] = None


class InvoiceUpdateModel(BaseModel):
    client_name: Optional[str] = None
    email: Optional[str] = None
    invoice_date: Optional[str] = None
    status: Optional[Literal["paid", "unpaid", "pending"]] = None
    amount: Optional[float] = None
    due_date: Optional[str] = None
    invoice_number: Optional[str] = None
    deal_id: Optional[int] = None
    notes: Optional[str] = None


class FollowUpUpdateModel(BaseModel):
    client_name: Optional[str] = None
    email: Optional[str] = None
    followed_up: Optional[bool] = None
    last_follow_up: Optional[str] = None
    notes: Optional[str] = None


class ProfileCriteriaModel(BaseModel):
    criteria: str = ""
