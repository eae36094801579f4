"""Lake-name extraction from free-text specimen localities.

Locality strings are inconsistent ("Bankers Lake, Hillsdale Co.",
"L. Lansing", "pond N of Jackson"), so the name is found by position
relative to the words LAKE and POND and then corrected against an
:class:`~lakelink.overrides.OverrideTable`.  A locality with no lake or
pond word yields ``None``: usually a river or creek site that cannot be
matched to a survey card.
"""

from __future__ import annotations

import re
from typing import Any

import pandas as pd
import structlog

from lakelink.overrides import DEFAULT_OVERRIDES, OverrideTable
from lakelink.text import is_missing, normalize_key, token_after, token_before

logger = structlog.get_logger(__name__)

WATER_BODY_WORDS = ("LAKE", "POND")

_LAKE_ABBREVIATION = re.compile(r"\bL\.\s*")
_WHITESPACE = re.compile(r"\s+")


def normalize_locality(locality: Any) -> str | None:
    """Uppercase a locality, drop apostrophes/parentheses and expand ``L.``."""
    text = normalize_key(locality)
    if text is None:
        return None
    text = _LAKE_ABBREVIATION.sub("LAKE ", text)
    return _WHITESPACE.sub(" ", text).strip()


def extract_lake_name(locality: Any) -> str | None:
    """Return the lake-name token of a locality, before any overrides.

    The word directly before LAKE/POND is preferred; failing that, the word
    directly after it.

    >>> extract_lake_name("Bankers Lake, Hillsdale Co.")
    'BANKERS'
    >>> extract_lake_name("Lake Orion")
    'ORION'
    """
    text = normalize_locality(locality)
    if text is None:
        return None
    name = token_before(text, *WATER_BODY_WORDS)
    if name is None:
        name = token_after(text, *WATER_BODY_WORDS)
    if name is None:
        return None
    return name.strip() or None


def _identifier(value: Any) -> str | None:
    if is_missing(value):
        return None
    return str(value).strip()


def parse_localities(
    df: pd.DataFrame,
    overrides: OverrideTable = DEFAULT_OVERRIDES,
) -> pd.DataFrame:
    """Return a copy of the specimen table with ``lakename`` set and ``county`` normalised.

    Overrides are applied after extraction; identifier overrides win over
    anything the locality text says.
    """
    if overrides.identifier_column not in df.columns:
        raise ValueError(
            f"Override table {overrides.version!r} keys on missing column "
            f"{overrides.identifier_column!r}"
        )

    out = df.copy()
    out["county"] = [normalize_key(c) for c in out["county"]]

    extracted = [extract_lake_name(loc) for loc in out["locality"]]
    identifiers = [_identifier(v) for v in out[overrides.identifier_column]]

    names: list[str | None] = []
    hits = {"identifier": 0, "value": 0}
    for identifier, name in zip(identifiers, extracted):
        rule = overrides.find_rule(identifier, name)
        if rule is not None:
            hits[rule.kind] += 1
            name = rule.replacement
        names.append(name)

    out["lakename"] = pd.Series(names, index=out.index, dtype="object")

    logger.info(
        "localities_parsed",
        rows=len(out),
        extracted=sum(n is not None for n in extracted),
        no_lake=sum(n is None for n in names),
        identifier_overrides=hits["identifier"],
        value_overrides=hits["value"],
        override_version=overrides.version,
    )
    return out
