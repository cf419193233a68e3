from __future__ import annotations

from datetime import date, datetime
from functools import lru_cache
from typing import Optional

import pandas as pd

EPOCH = pd.Timestamp(0, tz="UTC")


def _as_utc(ts: pd.Timestamp) -> pd.Timestamp:
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def _parse_day_first(raw: str) -> Optional[pd.Timestamp]:
    """Parse DD/MM/YYYY. Anything that is not exactly three numeric parts is invalid.

    Two-digit years land in 1950-2049.
    """
    parts = [p.strip() for p in raw.split("/")]
    if len(parts) != 3:
        return None
    try:
        day, month, year = (int(p) for p in parts)
        if len(parts[2].lstrip("+-")) <= 2:
            year += 2000 if year < 50 else 1900
        return pd.Timestamp(year=year, month=month, day=day, tz="UTC")
    except (ValueError, OverflowError):
        return None


@lru_cache(maxsize=8192)
def _parse(raw: str) -> Optional[pd.Timestamp]:
    if "/" in raw:
        return _parse_day_first(raw)
    try:
        ts = pd.to_datetime(raw, utc=True, errors="coerce")
    except (ValueError, OverflowError, TypeError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts


def _is_null(raw: object) -> bool:
    # None, NaT and NaN; strings are handled by the parser.
    return raw is None or (not isinstance(raw, str) and pd.api.types.is_scalar(raw) and bool(pd.isna(raw)))


def normalize_date(raw: object) -> Optional[pd.Timestamp]:
    """Turn a stored date representation into a comparable UTC timestamp.

    Empty input and anything unparseable both come back as ``None``; callers
    that sort treat that as ``EPOCH`` and callers that display it decide on a
    placeholder.
    """
    if _is_null(raw):
        return None
    if isinstance(raw, pd.Timestamp):
        return _as_utc(raw)
    if isinstance(raw, (datetime, date)):
        return _as_utc(pd.Timestamp(raw))
    text = str(raw).strip()
    if not text:
        return None
    return _parse(text)


def is_blank_date(raw: object) -> bool:
    return _is_null(raw) or (isinstance(raw, str) and not raw.strip())


def sort_instant(raw: object) -> pd.Timestamp:
    ts = normalize_date(raw)
    return EPOCH if ts is None else ts
