"""End-to-end specimen/survey matching pipeline.

load -> normalise fields -> parse localities -> match -> summarise.
Each stage returns a new table; the inputs on disk are only read.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
import structlog

from lakelink.config import Settings
from lakelink.locality import parse_localities
from lakelink.matcher import match_records, unmatched_keys
from lakelink.normalize import normalize_specimens
from lakelink.overrides import DEFAULT_OVERRIDES, OverrideTable, load_override_table
from lakelink.records import load_specimens, load_surveys
from lakelink.report import summarize_matches

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    matched: pd.DataFrame
    summary: dict[str, Any]
    unmatched: pd.DataFrame


def resolve_overrides(settings: Settings, overrides: OverrideTable | None = None) -> OverrideTable:
    """Pick the override table: explicit argument, then settings path, then built-in."""
    if overrides is not None:
        return overrides
    if settings.overrides_path:
        return load_override_table(settings.overrides_path)
    return DEFAULT_OVERRIDES


def prepare_specimens(
    specimens: pd.DataFrame,
    overrides: OverrideTable = DEFAULT_OVERRIDES,
    settings: Settings | None = None,
) -> pd.DataFrame:
    """Normalise fields and attach lake names, ready for the join."""
    return parse_localities(normalize_specimens(specimens, settings), overrides)


def match_tables(
    specimens: pd.DataFrame,
    surveys: pd.DataFrame,
    overrides: OverrideTable = DEFAULT_OVERRIDES,
    settings: Settings | None = None,
) -> pd.DataFrame:
    """Run the in-memory stages on already loaded tables."""
    parsed = prepare_specimens(specimens, overrides, settings)
    return match_records(parsed, surveys, overrides.excluded_subject_ids)


def run_pipeline(
    specimen_path: Path | str | None = None,
    survey_path: Path | str | None = None,
    *,
    overrides: OverrideTable | None = None,
    settings: Settings | None = None,
    output_path: Path | str | None = None,
) -> PipelineResult:
    """Match a specimen export against a survey-card table.

    Paths left as ``None`` fall back to ``settings.specimen_path``,
    ``settings.survey_path`` and ``settings.output_path``.

    Raises
    ------
    SchemaError
        If either input is unreadable or lacks required columns.
    ValueError
        If an input path is given neither directly nor in settings.
    """
    if settings is None:
        from lakelink.config import get_settings
        settings = get_settings()
    specimen_path = specimen_path or settings.specimen_path
    survey_path = survey_path or settings.survey_path
    output_path = output_path or settings.output_path or None
    if not specimen_path or not survey_path:
        raise ValueError(
            "Both a specimen table and a survey table are required "
            "(arguments or LL_SPECIMEN_PATH / LL_SURVEY_PATH)"
        )
    table = resolve_overrides(settings, overrides)

    specimens = load_specimens(specimen_path)
    surveys = load_surveys(survey_path)

    parsed = prepare_specimens(specimens, table, settings)
    matched = match_records(parsed, surveys, table.excluded_subject_ids)
    summary = summarize_matches(matched)
    unmatched = unmatched_keys(parsed, surveys)

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        matched.to_csv(output_path, index=False)
        logger.info("matched_table_written", path=str(output_path), rows=len(matched))

    logger.info(
        "pipeline_complete",
        override_version=table.version,
        matched=summary["matched_lots"],
        distinct_lakes=summary["distinct_lakes"],
        unmatched_keys=len(unmatched),
    )
    return PipelineResult(matched=matched, summary=summary, unmatched=unmatched)
