"""Record linkage of museum fish specimens to historical lake survey cards."""

from __future__ import annotations

from lakelink.locality import extract_lake_name, parse_localities
from lakelink.matcher import count_distinct_lakes, match_records, unmatched_keys
from lakelink.normalize import (
    derive_field_number_year,
    extract_individual_count,
    normalize_specimens,
)
from lakelink.overrides import (
    DEFAULT_OVERRIDES,
    OverrideRule,
    OverrideTable,
    build_override_table,
    load_override_table,
)
from lakelink.pipeline import PipelineResult, match_tables, run_pipeline
from lakelink.records import SchemaError, load_specimens, load_surveys
from lakelink.report import generate_match_report, summarize_matches

__all__ = [
    "DEFAULT_OVERRIDES",
    "OverrideRule",
    "OverrideTable",
    "PipelineResult",
    "SchemaError",
    "build_override_table",
    "count_distinct_lakes",
    "derive_field_number_year",
    "extract_individual_count",
    "extract_lake_name",
    "generate_match_report",
    "load_override_table",
    "load_specimens",
    "load_surveys",
    "match_records",
    "match_tables",
    "normalize_specimens",
    "parse_localities",
    "run_pipeline",
    "summarize_matches",
    "unmatched_keys",
]
