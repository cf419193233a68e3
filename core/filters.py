from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from core.dates import normalize_date
from core.fields import Field

ALL = "all"

Predicate = Callable[[Any], bool]


def _lower_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).lower()


@dataclass(frozen=True)
class TextFilter:
    """Free-text search: the record passes if any of ``fields`` contains the term."""

    key: str
    fields: Tuple[Field, ...]
    label: str = ""
    placeholder: str = ""

    def keys(self) -> Tuple[str, ...]:
        return (self.key,)

    def initial(self) -> Dict[str, str]:
        return {self.key: ""}

    def predicate(self, filters: Mapping[str, Any]) -> Optional[Predicate]:
        term = _lower_text(filters.get(self.key)).strip()
        if not term:
            return None
        fields = self.fields

        def matches(record: Any) -> bool:
            return any(term in _lower_text(f.value(record)) for f in fields)

        return matches


@dataclass(frozen=True)
class CategoryFilter:
    """Exact, case-insensitive match on one field. ``"all"`` disables it."""

    key: str
    field: Field
    choices: Tuple[Tuple[str, str], ...] = ()
    label: str = ""

    def keys(self) -> Tuple[str, ...]:
        return (self.key,)

    def initial(self) -> Dict[str, str]:
        return {self.key: ALL}

    def predicate(self, filters: Mapping[str, Any]) -> Optional[Predicate]:
        choice = _lower_text(filters.get(self.key)).strip()
        if not choice or choice == ALL:
            return None
        f = self.field

        def matches(record: Any) -> bool:
            return _lower_text(f.value(record)) == choice

        return matches


@dataclass(frozen=True)
class DateRangeFilter:
    """Inclusive range on a date field. Each bound is optional on its own."""

    from_key: str
    to_key: str
    field: Field
    label: str = ""

    def keys(self) -> Tuple[str, ...]:
        return (self.from_key, self.to_key)

    def initial(self) -> Dict[str, str]:
        return {self.from_key: "", self.to_key: ""}

    def predicate(self, filters: Mapping[str, Any]) -> Optional[Predicate]:
        lower = normalize_date(filters.get(self.from_key))
        upper = normalize_date(filters.get(self.to_key))
        if lower is None and upper is None:
            return None
        f = self.field

        def matches(record: Any) -> bool:
            ts = normalize_date(f.value(record))
            if ts is None:
                return False
            if lower is not None and ts < lower:
                return False
            if upper is not None and ts > upper:
                return False
            return True

        return matches


FilterDef = Union[TextFilter, CategoryFilter, DateRangeFilter]


def initial_filters(definitions: Iterable[FilterDef]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for d in definitions:
        out.update(d.initial())
    return out


def normalize_filters(raw: Optional[Mapping[str, Any]], definitions: Sequence[FilterDef]) -> Dict[str, str]:
    """Coerce user input into a complete filter state for ``definitions``.

    Unknown keys are dropped and every known key is present afterwards.
    """
    raw = raw or {}
    out = initial_filters(definitions)
    for key in out:
        value = raw.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            out[key] = text
    return out


def active_predicates(filters: Mapping[str, Any], definitions: Iterable[FilterDef]) -> List[Predicate]:
    preds: List[Predicate] = []
    for d in definitions:
        p = d.predicate(filters)
        if p is not None:
            preds.append(p)
    return preds


def build_predicate(filters: Mapping[str, Any], definitions: Iterable[FilterDef]) -> Predicate:
    preds = active_predicates(filters, definitions)
    if not preds:
        return lambda record: True

    def composite(record: Any) -> bool:
        return all(p(record) for p in preds)

    return composite


def is_filtered(filters: Mapping[str, Any], definitions: Iterable[FilterDef]) -> bool:
    return bool(active_predicates(filters, definitions))


def describe_filters(filters: Mapping[str, Any], definitions: Iterable[FilterDef]) -> List[str]:
    labels: List[str] = []
    for d in definitions:
        if d.predicate(filters) is None:
            continue
        if isinstance(d, DateRangeFilter):
            lo = filters.get(d.from_key) or "…"
            hi = filters.get(d.to_key) or "…"
            labels.append(f"{d.label or 'Date'}: {lo} – {hi}")
        else:
            labels.append(f"{d.label or d.key}: {filters.get(d.key)}")
    return labels
