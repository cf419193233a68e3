from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

BADGE_COLORS = {
    "green": "#16a34a",
    "yellow": "#ca8a04",
    "red": "#dc2626",
    "blue": "#2563eb",
    "gray": "#6b7280",
}


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def breakdown_bar(
    counts: pd.DataFrame,
    *,
    category: str,
    title: str,
    colors: Optional[Mapping[str, str]] = None,
) -> alt.Chart:
    """Horizontal bar per category; ``counts`` has ``category`` and ``count`` columns."""
    color = alt.Color(f"{category}:N", legend=None)
    if colors:
        domain = list(counts[category].astype(str))
        color = alt.Color(
            f"{category}:N",
            legend=None,
            scale=alt.Scale(domain=domain, range=[BADGE_COLORS.get(colors.get(d, "gray"), BADGE_COLORS["gray"]) for d in domain]),
        )
    return (
        alt.Chart(counts)
        .mark_bar(cornerRadiusEnd=3)
        .encode(
            y=alt.Y(f"{category}:N", title=None, sort="-x"),
            x=alt.X("count:Q", title="Records", axis=alt.Axis(format="d", tickMinStep=1)),
            color=color,
            tooltip=[alt.Tooltip(f"{category}:N", title=title), alt.Tooltip("count:Q", title="Count")],
        )
        .properties(title=title)
    )
