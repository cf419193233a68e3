from __future__ import annotations

from dataclasses import asdict
import logging
import math
from typing import Any, Optional

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import (
    FollowUpUpdateModel,
    InvoiceCreateModel,
    InvoiceUpdateModel,
    ProfileCriteriaModel,
    TableRequestModel,
)
from core import data as dc
from core.config import configure_logging, create_data_source, get_settings
from core.datasource import DataSource
from core.errors import RecordNotFoundError, UnknownViewError
from core.export import export_csv, export_filename
from core.metrics_summary import compute_cv_summary, compute_invoice_summary, compute_summary
from core.models import Client, CVEvaluation, Invoice
from core.pipeline import PageState, result_payload
from core.views import get_view, list_views

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title="Business Operations Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_source: Optional[DataSource] = None


def get_data_source() -> DataSource:
    global _source
    if _source is None:
        _source = create_data_source(get_settings())
    return _source


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _not_found(exc: Exception) -> JSONResponse:
    return _error(exc, status_code=404)


def _table_context(view_name: str, body: TableRequestModel, source: DataSource) -> dict:
    view = get_view(view_name)
    records = dc.load_view_records(view, source)
    sort = dc.parse_sort(view, body.sort_field, body.sort_direction)
    page = PageState(body.page, body.page_size or view.page_size)
    return dc.prepare_context(view, records, body.filters, sort, page)


@app.get("/meta/views")
def meta_views():
    return _json({"views": [v.describe() for v in list_views()]})


@app.post("/tables/{view_name}")
def table(view_name: str, body: TableRequestModel, source: DataSource = Depends(get_data_source)):
    try:
        ctx = _table_context(view_name, body, source)
        payload = result_payload(ctx["result"], ctx["view"])
        payload["filters"] = ctx["filters"]
        payload["sort"] = {"field": ctx["sort"].field, "direction": ctx["sort"].direction.value}
        return _json(payload)
    except UnknownViewError as exc:
        return _not_found(exc)
    except Exception as exc:
        logger.exception("table %s failed", view_name)
        return _error(exc)


@app.post("/export/{view_name}")
def export_view(view_name: str, body: TableRequestModel, source: DataSource = Depends(get_data_source)):
    try:
        ctx = _table_context(view_name, body, source)
    except UnknownViewError as exc:
        return _not_found(exc)
    except Exception as exc:
        logger.exception("export %s failed", view_name)
        return _error(exc)

    view = ctx["view"]
    csv_bytes = export_csv(ctx["ordered"], view.columns)
    filename = export_filename(view.export_prefix)
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})


@app.get("/summary")
def summary(source: DataSource = Depends(get_data_source)):
    try:
        data_ctx = dc.load_dashboard_data(source, [get_view("clients"), get_view("invoices"), get_view("cv_evaluations")])
        records = data_ctx["records"]
        clients: list[Client] = records["clients"]
        invoices: list[Invoice] = records["invoices"]
        evaluations: list[CVEvaluation] = records["cv_evaluations"]
        payload: dict[str, Any] = compute_summary(clients)
        payload["invoices"] = compute_invoice_summary(invoices)
        payload["cv_evaluations"] = compute_cv_summary(evaluations)
        return _json(payload)
    except Exception as exc:
        logger.exception("summary failed")
        return _error(exc)


@app.get("/invoices/search")
def invoices_search(q: str = Query(default=""), source: DataSource = Depends(get_data_source)):
    try:
        invoice = dc.search_invoice(source, q)
        return _json({"invoice": asdict(invoice) if invoice else None})
    except Exception as exc:
        logger.exception("invoices_search failed")
        return _error(exc)


@app.post("/invoices")
def invoices_create(body: InvoiceCreateModel, source: DataSource = Depends(get_data_source)):
    try:
        invoice = dc.create_invoice(source, body.model_dump())
        return _json(asdict(invoice), status_code=201)
    except Exception as exc:
        logger.exception("invoices_create failed")
        return _error(exc)


@app.put("/invoices/{invoice_id}")
def invoices_update(invoice_id: str, body: InvoiceUpdateModel, source: DataSource = Depends(get_data_source)):
    try:
        invoice = dc.update_invoice(source, invoice_id, body.model_dump(exclude_unset=True))
        return _json(asdict(invoice))
    except RecordNotFoundError as exc:
        return _not_found(exc)
    except Exception as exc:
        logger.exception("invoices_update failed")
        return _error(exc)


@app.delete("/invoices/{invoice_id}")
def invoices_delete(invoice_id: str, source: DataSource = Depends(get_data_source)):
    try:
        dc.delete_invoice(source, invoice_id)
        return _json({"deleted": invoice_id})
    except RecordNotFoundError as exc:
        return _not_found(exc)
    except Exception as exc:
        logger.exception("invoices_delete failed")
        return _error(exc)


@app.put("/follow-ups/{follow_up_id}")
def follow_ups_update(follow_up_id: str, body: FollowUpUpdateModel, source: DataSource = Depends(get_data_source)):
    try:
        follow_up = dc.update_follow_up(source, follow_up_id, body.model_dump(exclude_unset=True))
        return _json(asdict(follow_up))
    except RecordNotFoundError as exc:
        return _not_found(exc)
    except Exception as exc:
        logger.exception("follow_ups_update failed")
        return _error(exc)


@app.post("/follow-ups/{follow_up_id}/mark")
def follow_ups_mark(
    follow_up_id: str,
    followed_up: bool = Query(default=True),
    source: DataSource = Depends(get_data_source),
):
    try:
        follow_up = dc.set_follow_up(source, follow_up_id, followed_up)
        return _json(asdict(follow_up))
    except RecordNotFoundError as exc:
        return _not_found(exc)
    except Exception as exc:
        logger.exception("follow_ups_mark failed")
        return _error(exc)


@app.post("/clients/{client_id}/contacted")
def clients_contacted(client_id: int, source: DataSource = Depends(get_data_source)):
    try:
        return _json(asdict(dc.mark_lead_contacted(source, client_id)))
    except RecordNotFoundError as exc:
        return _not_found(exc)
    except Exception as exc:
        logger.exception("clients_contacted failed")
        return _error(exc)


@app.post("/clients/{client_id}/resend-onboarding")
def clients_resend_onboarding(client_id: int, source: DataSource = Depends(get_data_source)):
    try:
        return _json(asdict(dc.resend_onboarding(source, client_id)))
    except RecordNotFoundError as exc:
        return _not_found(exc)
    except Exception as exc:
        logger.exception("clients_resend_onboarding failed")
        return _error(exc)


@app.get("/clients/{client_id}/invoice-draft")
def clients_invoice_draft(client_id: int, source: DataSource = Depends(get_data_source)):
    try:
        client = dc.find_client(source, client_id)
        if client is None:
            return _not_found(RecordNotFoundError("clients", client_id))
        return _json(dc.invoice_draft_from_client(client))
    except Exception as exc:
        logger.exception("clients_invoice_draft failed")
        return _error(exc)


@app.get("/profile-criteria")
def profile_criteria(source: DataSource = Depends(get_data_source)):
    try:
        return _json(asdict(dc.get_profile_criteria(source)))
    except Exception as exc:
        logger.exception("profile_criteria failed")
        return _error(exc)


@app.put("/profile-criteria")
def profile_criteria_update(body: ProfileCriteriaModel, source: DataSource = Depends(get_data_source)):
    try:
        return _json(asdict(dc.update_profile_criteria(source, body.criteria)))
    except Exception as exc:
        logger.exception("profile_criteria_update failed")
        return _error(exc)
