"""Descriptive statistics over the matched specimen/survey table."""

from __future__ import annotations

from typing import Any

import pandas as pd

from lakelink.matcher import count_distinct_lakes
from lakelink.records import SPECIMEN_COLUMNS, SURVEY_COLUMNS

# Columns that are identifiers or keys, never measurements
_NON_MEASUREMENT_COLUMNS = set(SPECIMEN_COLUMNS) | set(SURVEY_COLUMNS) | {
    "num_individuals",
    "lakename",
}


def environmental_columns(matched: pd.DataFrame) -> list[str]:
    """Numeric survey-card measurement columns present in *matched*."""
    return [
        col
        for col in matched.columns
        if col not in _NON_MEASUREMENT_COLUMNS
        and not col.endswith("_survey")
        and pd.api.types.is_numeric_dtype(matched[col])
    ]


def _float_or_none(value: Any) -> float | None:
    return None if pd.isna(value) else float(value)


def summarize_matches(matched: pd.DataFrame) -> dict[str, Any]:
    """Compute summary statistics for a matched table.

    Returns
    -------
    dict
        ``matched_lots``, ``distinct_lakes``, ``distinct_cards``,
        ``first_year``, ``last_year``, ``individuals_total``,
        ``individuals_mean``, ``individuals_median``, ``lots_without_count``,
        ``lots_by_decade`` (``{1930: n, ...}``) and ``environmental``
        (``{column: {count, mean, std, min, max}}``).
    """
    counts = matched["num_individuals"].dropna()
    years = matched["year"].dropna().astype(int)

    decades = (years // 10 * 10).value_counts().sort_index()

    environmental: dict[str, dict[str, float | None]] = {}
    for col in environmental_columns(matched):
        described = matched[col].describe()
        environmental[col] = {
            stat: _float_or_none(described.get(stat))
            for stat in ("count", "mean", "std", "min", "max")
        }

    return {
        "matched_lots": len(matched),
        "distinct_lakes": count_distinct_lakes(matched),
        "distinct_cards": int(matched["new_key"].nunique()),
        "first_year": int(years.min()) if not years.empty else None,
        "last_year": int(years.max()) if not years.empty else None,
        "individuals_total": int(counts.sum()) if not counts.empty else 0,
        "individuals_mean": float(counts.mean()) if not counts.empty else None,
        "individuals_median": float(counts.median()) if not counts.empty else None,
        "lots_without_count": len(matched) - len(counts),
        "lots_by_decade": {int(decade): int(n) for decade, n in decades.items()},
        "environmental": environmental,
    }


def _fmt(value: float | None, spec: str = ".2f") -> str:
    return "n/a" if value is None else format(value, spec)


def generate_match_report(summary: dict[str, Any]) -> str:
    """Format :func:`summarize_matches` output into a human-readable report."""
    first, last = summary.get("first_year"), summary.get("last_year")
    span = f"{first}-{last}" if first is not None else "n/a"
    lines = [
        "Specimen / Survey Card Match Report",
        "=" * 40,
        "",
        f"Matched lots:           {summary.get('matched_lots', 0)}",
        f"Distinct lakes:         {summary.get('distinct_lakes', 0)}",
        f"Distinct survey cards:  {summary.get('distinct_cards', 0)}",
        f"Years covered:          {span}",
        "",
        f"Individuals (total):    {summary.get('individuals_total', 0)}",
        f"Individuals (mean):     {_fmt(summary.get('individuals_mean'))}",
        f"Individuals (median):   {_fmt(summary.get('individuals_median'))}",
        f"Lots without a count:   {summary.get('lots_without_count', 0)}",
    ]

    by_decade = summary.get("lots_by_decade", {})
    if by_decade:
        lines += ["", "Lots by decade:"]
        lines += [f"  {decade}s: {n}" for decade, n in sorted(by_decade.items())]

    environmental = summary.get("environmental", {})
    if environmental:
        lines += ["", "Survey measurements (n / mean / min / max):"]
        for col, stats in environmental.items():
            lines.append(
                f"  {col}: {_fmt(stats.get('count'), '.0f')} / {_fmt(stats.get('mean'))}"
                f" / {_fmt(stats.get('min'))} / {_fmt(stats.get('max'))}"
            )

    return "\n".join(lines)
