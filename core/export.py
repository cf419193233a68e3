from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, List, Optional, Sequence

import pandas as pd

from core.fields import Field

logger = logging.getLogger(__name__)


def csv_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class CsvColumn:
    header: str
    field: Field
    formatter: Optional[Callable[[Any], str]] = None
    default: str = ""

    def render(self, record: Any) -> str:
        value = self.field.value(record)
        if value is None or value == "":
            return self.default
        if self.formatter is not None:
            return self.formatter(value)
        return csv_text(value)


def export_frame(records: Iterable[Any], columns: Sequence[CsvColumn]) -> pd.DataFrame:
    headers = [c.header for c in columns]
    rows: List[List[str]] = [[c.render(r) for c in columns] for r in records]
    return pd.DataFrame(rows, columns=headers, dtype=object)


def export_csv(records: Iterable[Any], columns: Sequence[CsvColumn]) -> bytes:
    """Serialize the (filtered, unpaginated) records with every cell quoted.

    Embedded double quotes are doubled, so the output parses with any
    standard CSV reader.
    """
    df = export_frame(records, columns)
    logger.debug("exporting %d rows x %d columns", len(df), len(columns))
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n").encode("utf-8")


def export_filename(prefix: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{prefix}-{today:%Y-%m-%d}.csv"
