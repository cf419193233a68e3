from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Iterable, List, Tuple

from core.dates import sort_instant
from core.fields import Field, FieldKind

Comparator = Callable[[Any, Any], int]


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> "Direction":
        return Direction.DESC if self is Direction.ASC else Direction.ASC


@dataclass(frozen=True)
class SortState:
    field: str
    direction: Direction = Direction.DESC

    def toggle(self, field: str) -> "SortState":
        """Header click: same column flips direction, a new column starts descending."""
        if field == self.field:
            return replace(self, direction=self.direction.flipped())
        return SortState(field=field, direction=Direction.DESC)


def _as_number(value: Any) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    try:
        out = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if out != out else out


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).lower()


def sort_value(field: Field, record: Any) -> Any:
    raw = field.value(record)
    if field.kind is FieldKind.DATE:
        return sort_instant(raw)
    if field.kind is FieldKind.NUMBER:
        return _as_number(raw)
    return _as_text(raw)


def compare_values(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _directed(ascending: Comparator, direction: Direction) -> Comparator:
    if Direction(direction) is Direction.ASC:
        return ascending

    def descending(a: Any, b: Any) -> int:
        return -ascending(a, b)

    return descending


def build_comparator(field: Field, direction: Direction) -> Comparator:
    """Record comparator for ``field``; descending is the exact negation of ascending."""

    def ascending(a: Any, b: Any) -> int:
        return compare_values(sort_value(field, a), sort_value(field, b))

    return _directed(ascending, direction)


def sort_records(records: Iterable[Any], field: Field, direction: Direction) -> List[Any]:
    # Sort values are computed once per record; ties keep input order.
    keyed: List[Tuple[Any, Any]] = [(sort_value(field, r), r) for r in records]
    cmp = _directed(lambda a, b: compare_values(a[0], b[0]), direction)
    return [r for _, r in sorted(keyed, key=cmp_to_key(cmp))]
