"""Loaders for the specimen catalogue export and the survey-card transcription.

Both sources are flat delimited files.  Column names are a compatibility
surface with the reference datasets and are checked verbatim; a missing
column is the one failure the pipeline surfaces to the user.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import structlog

logger = structlog.get_logger(__name__)

SPECIMEN_COLUMNS: list[str] = [
    "gbifID",
    "identifier",
    "basisOfRecord",
    "occurrenceID",
    "catalogNumber",
    "preparations",
    "fieldNumber",
    "eventDate",
    "year",
    "month",
    "day",
    "stateProvince",
    "county",
    "decimalLatitude",
    "decimalLongitude",
    "locality",
    "recordedBy",
]

SURVEY_COLUMNS: list[str] = [
    "new_key",
    "lakename",
    "county",
    "begin_date_year",
    "subject_id",
]

_SPECIMEN_INT_COLUMNS = ["year", "month", "day"]
_SPECIMEN_FLOAT_COLUMNS = ["decimalLatitude", "decimalLongitude"]

# Survey columns that stay as text even though they may look numeric
_SURVEY_TEXT_COLUMNS = {"new_key", "lakename", "county", "subject_id"}


class SchemaError(ValueError):
    """Raised when an input table is unreadable or lacks required columns."""

    def __init__(self, path: Path | str, missing: list[str] | None = None, detail: str = ""):
        self.path = str(path)
        self.missing = missing or []
        if self.missing:
            message = f"{self.path}: missing required columns {', '.join(self.missing)}"
        else:
            message = f"{self.path}: {detail or 'unreadable table'}"
        super().__init__(message)


def _separator_for(path: Path) -> str:
    """GBIF exports are tab-delimited ``.txt``/``.tsv``; everything else is CSV."""
    return "\t" if path.suffix.lower() in (".tsv", ".txt", ".tab") else ","


def read_table(path: Path | str) -> pd.DataFrame:
    """Read a delimited file with every column as text.

    Column names are stripped of surrounding whitespace but otherwise kept
    verbatim (they are case-sensitive).
    """
    path = Path(path)
    try:
        df = pd.read_csv(path, dtype=str, sep=_separator_for(path), quotechar='"')
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise SchemaError(path, detail=str(e)) from e
    except OSError as e:
        raise SchemaError(path, detail=f"cannot read file ({e.strerror or e})") from e

    df.columns = [str(c).strip() for c in df.columns]
    return df


def validate_columns(df: pd.DataFrame, required: list[str]) -> list[str]:
    """Return the required columns absent from *df*, in declared order."""
    return [col for col in required if col not in df.columns]


def to_nullable_int(values: pd.Series) -> pd.Series:
    """Coerce a column to nullable integers; unparseable or fractional values become NA."""
    numeric = pd.to_numeric(values, errors="coerce").astype("float64")
    # Drop fractional junk such as "1931.5" rather than failing the cast
    return numeric.where(numeric == numeric.round()).astype("Int64")


def _coerce_integer(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Coerce specified columns to nullable integers."""
    for col in columns:
        if col in df.columns:
            df[col] = to_nullable_int(df[col])
    return df


def _coerce_numeric(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Coerce specified columns to floats; unparseable values become NaN."""
    for col in columns:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def load_specimens(path: Path | str) -> pd.DataFrame:
    """Load the specimen occurrence table.

    Raises
    ------
    SchemaError
        If the file cannot be parsed or any column in
        :data:`SPECIMEN_COLUMNS` is absent.
    """
    df = read_table(path)
    missing = validate_columns(df, SPECIMEN_COLUMNS)
    if missing:
        logger.error("specimen_table_missing_columns", missing=missing, path=str(path))
        raise SchemaError(path, missing)

    df = _coerce_integer(df, _SPECIMEN_INT_COLUMNS)
    df = _coerce_numeric(df, _SPECIMEN_FLOAT_COLUMNS)
    logger.info("specimens_loaded", path=str(path), rows=len(df))
    return df


def load_surveys(path: Path | str) -> pd.DataFrame:
    """Load the survey-card table.

    Columns beyond :data:`SURVEY_COLUMNS` are environmental measurements;
    those whose values all parse as numbers (blanks aside) become floats,
    the rest are left as text.
    """
    df = read_table(path)
    missing = validate_columns(df, SURVEY_COLUMNS)
    if missing:
        logger.error("survey_table_missing_columns", missing=missing, path=str(path))
        raise SchemaError(path, missing)

    df = _coerce_integer(df, ["begin_date_year"])
    for col in df.columns:
        if col in _SURVEY_TEXT_COLUMNS or col == "begin_date_year":
            continue
        converted = pd.to_numeric(df[col], errors="coerce")
        if converted.notna().sum() == df[col].notna().sum():
            df[col] = converted

    logger.info("surveys_loaded", path=str(path), rows=len(df))
    return df
