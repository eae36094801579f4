"""Exact (county, lake name, year) join of specimen lots to survey cards."""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd
import structlog

from lakelink.text import normalize_key

logger = structlog.get_logger(__name__)

JOIN_KEYS = ["county", "lakename", "year"]


def _specimen_keys(specimens: pd.DataFrame) -> pd.DataFrame:
    """Specimen rows with a complete join key; a null key never matches."""
    left = specimens.dropna(subset=JOIN_KEYS).copy()
    left["year"] = left["year"].astype("Int64")
    return left


def _survey_keys(surveys: pd.DataFrame) -> pd.DataFrame:
    """Survey rows keyed like specimens, with ``year`` mirroring ``begin_date_year``."""
    right = surveys.copy()
    right["county"] = [normalize_key(c) for c in right["county"]]
    right["lakename"] = [normalize_key(n) for n in right["lakename"]]
    right["year"] = pd.to_numeric(right["begin_date_year"], errors="coerce").astype("Int64")
    return right.dropna(subset=JOIN_KEYS)


def match_records(
    specimens: pd.DataFrame,
    surveys: pd.DataFrame,
    excluded_subject_ids: Iterable[str] = (),
) -> pd.DataFrame:
    """Inner-join specimens to survey cards and drop known duplicate cards.

    One card may match several lots (same lake, county and year).  Columns
    shared by both tables other than the join keys get a ``_survey`` suffix
    on the survey side.
    """
    excluded = {str(s) for s in excluded_subject_ids}

    matched = _specimen_keys(specimens).merge(
        _survey_keys(surveys),
        how="inner",
        on=JOIN_KEYS,
        suffixes=("", "_survey"),
    )
    joined = len(matched)

    duplicate_cards = matched["subject_id"].astype(str).isin(excluded)
    matched = matched[~duplicate_cards].reset_index(drop=True)

    logger.info(
        "records_matched",
        joined=joined,
        excluded_duplicates=int(duplicate_cards.sum()),
        matched=len(matched),
        distinct_lakes=count_distinct_lakes(matched),
    )
    return matched


def count_distinct_lakes(matched: pd.DataFrame) -> int:
    """Number of distinct (lakename, county) pairs in a matched table."""
    if matched.empty:
        return 0
    return len(matched[["lakename", "county"]].drop_duplicates())


def unmatched_keys(specimens: pd.DataFrame, surveys: pd.DataFrame) -> pd.DataFrame:
    """Specimen join keys that no survey card carries, with their lot counts.

    Rows without a lake name are left out: they are river or creek sites
    rather than candidates for an override.  Sorted by descending lot count
    so the most valuable corrections come first.
    """
    left = _specimen_keys(specimens)
    lots = left.groupby(JOIN_KEYS, dropna=True).size().rename("lots").reset_index()
    if lots.empty:
        return lots

    card_keys = _survey_keys(surveys)[JOIN_KEYS].drop_duplicates()
    merged = lots.merge(card_keys, how="left", on=JOIN_KEYS, indicator=True)
    missing = merged[merged["_merge"] == "left_only"].drop(columns="_merge")
    return missing.sort_values(
        ["lots", "county", "lakename", "year"],
        ascending=[False, True, True, True],
    ).reset_index(drop=True)
