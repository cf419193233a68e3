"""Backends that hold the dashboard tables.

The dashboard never reaches for a global client: a ``DataSource`` is built
once (see ``core.config.create_data_source``) and passed to whoever needs it.
"""

from __future__ import annotations

import copy
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

import httpx

from core.errors import DataSourceError, RecordNotFoundError

logger = logging.getLogger(__name__)

TABLE_KEYS: Dict[str, str] = {
    "clients": "client_id",
    "invoices": "id",
    "follow_ups": "id",
    "cv_evaluations": "id",
    "profile_criteria": "id",
    "deals": "deal_id",
}
INTEGER_KEY_TABLES = {"clients", "profile_criteria", "deals"}


def table_key(table: str) -> str:
    return TABLE_KEYS.get(table, "id")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DataSource(Protocol):
    def list_rows(self, table: str, *, order_by: Optional[str] = None, descending: bool = True) -> List[Dict[str, Any]]:
        ...

    def find_rows(self, table: str, matches: Mapping[str, Any], *, any_match: bool = False) -> List[Dict[str, Any]]:
        ...

    def insert_row(self, table: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        ...

    def update_row(self, table: str, key: Any, values: Mapping[str, Any]) -> Dict[str, Any]:
        ...

    def delete_row(self, table: str, key: Any) -> None:
        ...


def _same_key(a: Any, b: Any) -> bool:
    return a is not None and str(a) == str(b)


class InMemoryDataSource:
    """Tables kept in process memory. Used for local runs and tests."""

    def __init__(self, tables: Optional[Mapping[str, List[Mapping[str, Any]]]] = None):
        self._tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(r) for r in rows] for name, rows in (tables or {}).items()
        }

    @classmethod
    def from_json(cls, path: Path) -> "InMemoryDataSource":
        with open(path, encoding="utf-8") as fh:
            payload = json.load(fh)
        if not isinstance(payload, dict):
            raise DataSourceError(f"{path}: expected an object mapping table names to row lists")
        logger.info("loaded %d tables from %s", len(payload), path)
        return cls(payload)

    def _rows(self, table: str) -> List[Dict[str, Any]]:
        return self._tables.setdefault(table, [])

    def list_rows(self, table: str, *, order_by: Optional[str] = None, descending: bool = True) -> List[Dict[str, Any]]:
        rows = [copy.deepcopy(r) for r in self._rows(table)]
        if order_by:
            # Rows lacking the column go last, like a NULLS LAST order.
            present = [r for r in rows if r.get(order_by) is not None]
            missing = [r for r in rows if r.get(order_by) is None]
            present.sort(key=lambda r: str(r[order_by]), reverse=descending)
            rows = present + missing
        return rows

    def find_rows(self, table: str, matches: Mapping[str, Any], *, any_match: bool = False) -> List[Dict[str, Any]]:
        combine = any if any_match else all
        return [
            copy.deepcopy(r)
            for r in self._rows(table)
            if combine(_same_key(r.get(col), value) for col, value in matches.items())
        ]

    def _next_key(self, table: str) -> Any:
        if table in INTEGER_KEY_TABLES:
            existing = [int(r[table_key(table)]) for r in self._rows(table) if r.get(table_key(table)) is not None]
            return max(existing, default=0) + 1
        return str(uuid.uuid4())

    def insert_row(self, table: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        row = dict(values)
        key = table_key(table)
        if row.get(key) is None:
            row[key] = self._next_key(table)
        row.setdefault("created_at", _now_iso())
        self._rows(table).append(row)
        return copy.deepcopy(row)

    def _index_of(self, table: str, key: Any) -> int:
        col = table_key(table)
        for i, r in enumerate(self._rows(table)):
            if _same_key(r.get(col), key):
                return i
        raise RecordNotFoundError(table, key)

    def update_row(self, table: str, key: Any, values: Mapping[str, Any]) -> Dict[str, Any]:
        idx = self._index_of(table, key)
        row = self._rows(table)[idx]
        row.update({k: v for k, v in values.items() if k != table_key(table)})
        return copy.deepcopy(row)

    def delete_row(self, table: str, key: Any) -> None:
        idx = self._index_of(table, key)
        del self._rows(table)[idx]


def _quoted(value: Any) -> str:
    # PostgREST reserves , . : ( ) inside logic filters unless the value is double-quoted.
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


class SupabaseDataSource:
    """PostgREST tables of a hosted Supabase project, over ``httpx``."""

    def __init__(self, url: str, api_key: str, *, timeout: float = 10.0, client: Optional[httpx.Client] = None):
        self.base_url = url.rstrip("/") + "/rest/v1"
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[Dict[str, str]] = None,
        body: Any = None,
        returning: bool = False,
    ) -> List[Dict[str, Any]]:
        headers = dict(self._headers)
        if returning:
            headers["Prefer"] = "return=representation"
        try:
            response = self._client.request(
                method,
                f"{self.base_url}/{table}",
                params=params,
                json=body,
                headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, table, exc)
            raise DataSourceError(f"{method} {table} failed: {exc}") from exc
        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    def list_rows(self, table: str, *, order_by: Optional[str] = None, descending: bool = True) -> List[Dict[str, Any]]:
        params = {"select": "*"}
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}.nullslast"
        return self._request("GET", table, params=params)

    def find_rows(self, table: str, matches: Mapping[str, Any], *, any_match: bool = False) -> List[Dict[str, Any]]:
        params = {"select": "*"}
        if any_match:
            params["or"] = "(" + ",".join(f"{col}.eq.{_quoted(value)}" for col, value in matches.items()) + ")"
        else:
            params.update({col: f"eq.{value}" for col, value in matches.items()})
        return self._request("GET", table, params=params)

    def insert_row(self, table: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        rows = self._request("POST", table, body=[dict(values)], returning=True)
        if not rows:
            raise DataSourceError(f"insert into {table} returned no row")
        return rows[0]

    def update_row(self, table: str, key: Any, values: Mapping[str, Any]) -> Dict[str, Any]:
        params = {table_key(table): f"eq.{key}"}
        rows = self._request("PATCH", table, params=params, body=dict(values), returning=True)
        if not rows:
            raise RecordNotFoundError(table, key)
        return rows[0]

    def delete_row(self, table: str, key: Any) -> None:
        params = {table_key(table): f"eq.{key}"}
        rows = self._request("DELETE", table, params=params, returning=True)
        if not rows:
            raise RecordNotFoundError(table, key)
