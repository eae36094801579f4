"""Field normalisation for specimen records.

Derives the individual count from the preparation note, back-fills the
sampling year from the field number, and restricts the table to the state
and year window the survey cards cover.  Nothing here raises on messy
data: an unparseable value becomes null and an out-of-policy row is
dropped.
"""

from __future__ import annotations

from typing import Any

import pandas as pd
import structlog

from lakelink.config import Settings
from lakelink.records import to_nullable_int
from lakelink.text import digits_in, integer_after, is_missing

logger = structlog.get_logger(__name__)

COUNT_MARKER = "EtOH - "


def extract_individual_count(preparations: Any) -> int | None:
    """Return the number of ethanol-preserved individuals in a preparation note.

    ``"EtOH - 12, formalin - 3"`` gives ``12``; anything without the
    ``EtOH - <digits>`` marker gives ``None``.
    """
    if is_missing(preparations):
        return None
    return integer_after(str(preparations), COUNT_MARKER)


def derive_field_number_year(
    field_number: Any,
    *,
    lowest: int = 19,
    highest: int = 96,
) -> int | None:
    """Derive a collection year from a field number such as ``"H31-42"``.

    The digits in the part before the first hyphen are read as a two-digit
    year.  Only values in ``[lowest, highest]`` are trusted and expanded
    into the 1900s; anything else yields ``None``.
    """
    if is_missing(field_number):
        return None
    prefix = str(field_number).split("-", 1)[0]
    digits = digits_in(prefix)
    if digits is None:
        return None
    two_digit = int(digits)
    if lowest <= two_digit <= highest:
        return 1900 + two_digit
    return None


def normalize_specimens(df: pd.DataFrame, settings: Settings | None = None) -> pd.DataFrame:
    """Return a normalised copy of the specimen table.

    Adds ``num_individuals``, keeps only rows from the configured state,
    back-fills missing years from ``fieldNumber`` and keeps rows whose year
    lies inside ``[min_year, max_year]``.  Re-running on its own output
    leaves the table unchanged.
    """
    if settings is None:
        from lakelink.config import get_settings
        settings = get_settings()

    out = df.copy()
    total = len(out)

    out["num_individuals"] = pd.array(
        [extract_individual_count(p) for p in out["preparations"]], dtype="Int64"
    )

    out = out[out["stateProvince"] == settings.state_province].copy()
    in_state = len(out)

    out["year"] = to_nullable_int(out["year"])
    derived = pd.Series(
        [
            derive_field_number_year(
                field_number,
                lowest=settings.field_year_min,
                highest=settings.field_year_max,
            )
            if pd.isna(year)
            else None
            for year, field_number in zip(out["year"], out["fieldNumber"])
        ],
        index=out.index,
        dtype="Int64",
    )
    backfilled = int(derived.notna().sum())
    out["year"] = out["year"].fillna(derived)

    in_window = out["year"].between(settings.min_year, settings.max_year)
    out = out[in_window.fillna(False).astype(bool)]

    logger.info(
        "specimens_normalized",
        total=total,
        in_state=in_state,
        years_backfilled=backfilled,
        in_year_window=len(out),
        with_count=int(out["num_individuals"].notna().sum()),
    )
    return out.reset_index(drop=True)
