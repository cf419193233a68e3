"""Filter -> sort -> paginate over an in-memory record list.

Everything here is a pure function of its inputs; the caller owns the
filter, sort and page state and re-runs the pipeline whenever one changes.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from core.filters import build_predicate
from core.sorting import SortState, sort_records
from core.views import ViewSpec


@dataclass(frozen=True)
class PageState:
    current_page: int = 1
    page_size: int = 10

    def __post_init__(self) -> None:
        if int(self.page_size) <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")


@dataclass(frozen=True)
class PipelineResult:
    visible_records: List[Any] = field(default_factory=list)
    filtered_count: int = 0
    total_count: int = 0
    total_pages: int = 1
    current_page: int = 1

    @property
    def empty_reason(self) -> Optional[str]:
        if self.total_count == 0:
            return "no_data"
        if self.filtered_count == 0:
            return "no_matches"
        return None


def total_pages_for(count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    return max(1, min(int(page), total_pages))


def filter_records(records: Sequence[Any], filters: Mapping[str, Any], view: ViewSpec) -> List[Any]:
    predicate = build_predicate(filters, view.filters)
    return [r for r in records if predicate(r)]


def filter_and_sort(
    records: Sequence[Any],
    filters: Mapping[str, Any],
    sort: Optional[SortState],
    view: ViewSpec,
) -> List[Any]:
    """Filtered and sorted, but not paged. This is also what gets exported."""
    sort = sort or view.initial_sort()
    filtered = filter_records(records, filters, view)
    return sort_records(filtered, view.field(sort.field), sort.direction)


def paginate(records: Sequence[Any], page: PageState) -> PipelineResult:
    total_pages = total_pages_for(len(records), page.page_size)
    current = clamp_page(page.current_page, total_pages)
    start = (current - 1) * page.page_size
    return PipelineResult(
        visible_records=list(records[start : start + page.page_size]),
        filtered_count=len(records),
        total_count=len(records),
        total_pages=total_pages,
        current_page=current,
    )


def run_ordered(
    records: Sequence[Any],
    filters: Mapping[str, Any],
    sort: Optional[SortState],
    page: PageState,
    *,
    view: ViewSpec,
) -> Tuple[List[Any], PipelineResult]:
    """Like ``run_pipeline``, also returning the full ordered list for export."""
    ordered = filter_and_sort(records, filters, sort, view)
    return ordered, replace(paginate(ordered, page), total_count=len(records))


def run_pipeline(
    records: Sequence[Any],
    filters: Mapping[str, Any],
    sort: Optional[SortState],
    page: PageState,
    *,
    view: ViewSpec,
) -> PipelineResult:
    return run_ordered(records, filters, sort, page, view=view)[1]


def result_payload(result: PipelineResult, view: ViewSpec, *, row_to_dict=None) -> Dict[str, Any]:
    to_dict = row_to_dict or _record_dict
    message = None
    if result.empty_reason == "no_data":
        message = view.empty_message
    elif result.empty_reason == "no_matches":
        message = view.no_match_message
    return {
        "view": view.name,
        "rows": [to_dict(r) for r in result.visible_records],
        "filtered_count": result.filtered_count,
        "total_count": result.total_count,
        "total_pages": result.total_pages,
        "current_page": result.current_page,
        "empty_reason": result.empty_reason,
        "empty_message": message,
    }


def _record_dict(record: Any) -> Dict[str, Any]:
    if isinstance(record, Mapping):
        return dict(record)
    return asdict(record)
