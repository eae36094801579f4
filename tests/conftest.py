"""Shared fixtures for specimen/survey matching tests."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from lakelink.config import Settings
from lakelink.records import SPECIMEN_COLUMNS


def _specimen_row(**fields) -> dict:
    """Return a complete specimen row; unspecified columns are blank."""
    row = {col: None for col in SPECIMEN_COLUMNS}
    row.update(
        {
            "basisOfRecord": "PRESERVED_SPECIMEN",
            "stateProvince": "Michigan",
        }
    )
    row.update(fields)
    return row


@pytest.fixture()
def make_specimen():
    """Factory for single specimen rows with every required column present."""
    return _specimen_row


@pytest.fixture()
def settings() -> Settings:
    """Default policy, independent of any LL_* environment variables."""
    return Settings(
        state_province="Michigan",
        min_year=1915,
        max_year=1995,
        field_year_min=19,
        field_year_max=96,
    )


@pytest.fixture()
def specimens() -> pd.DataFrame:
    """Six lots covering the interesting normalisation and parsing cases."""
    rows = [
        # Year back-filled from the field number
        _specimen_row(
            gbifID="1001", catalogNumber="UMMZ 100", preparations="EtOH - 12, formalin - 3",
            fieldNumber="H31-42", year=None, county="Hillsdale",
            locality="Bankers Lake, Hillsdale Co.",
        ),
        # No count in the preparation note
        _specimen_row(
            gbifID="1002", catalogNumber="UMMZ 101", preparations="skeleton",
            fieldNumber="H31-43", year=1931, county="Hillsdale",
            locality="Bankers Lake, Hillsdale Co.",
        ),
        # Value override DEVIL -> DEVILS
        _specimen_row(
            gbifID="1003", catalogNumber="UMMZ 102", preparations="EtOH - 4",
            fieldNumber="M40-1", year=1940, county="Oakland", locality="Devil Lake",
        ),
        # River site: no lake name
        _specimen_row(
            gbifID="1004", catalogNumber="UMMZ 103", preparations="EtOH - 7",
            fieldNumber="R35-2", year=1935, county="Washtenaw", locality="Huron River at Dexter",
        ),
        # Out of state
        _specimen_row(
            gbifID="1005", catalogNumber="UMMZ 104", preparations="EtOH - 2",
            fieldNumber="W33-9", year=1933, stateProvince="Wisconsin", county="Dane",
            locality="Mendota Lake",
        ),
        # Field-number year outside the accepted window
        _specimen_row(
            gbifID="1006", catalogNumber="UMMZ 105", preparations="EtOH - 1",
            fieldNumber="X05-1", year=None, county="Oakland", locality="Orion Lake",
        ),
    ]
    df = pd.DataFrame(rows, columns=SPECIMEN_COLUMNS)
    df["year"] = df["year"].astype("Int64")
    return df


@pytest.fixture()
def surveys() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "new_key": ["K1", "K2", "K3"],
            "lakename": ["BANKERS", "DEVILS", "ORION"],
            "county": ["HILLSDALE", "OAKLAND", "OAKLAND"],
            "begin_date_year": pd.array([1931, 1940, 1905], dtype="Int64"),
            "subject_id": ["S1", "S2", "S3"],
            "area": [42.0, 500.5, 80.0],
            "max_depth": [5.0, 20.0, 11.0],
        }
    )


@pytest.fixture()
def specimen_csv(tmp_path: Path, specimens: pd.DataFrame) -> Path:
    path = tmp_path / "specimens.csv"
    specimens.to_csv(path, index=False)
    return path


@pytest.fixture()
def survey_csv(tmp_path: Path, surveys: pd.DataFrame) -> Path:
    path = tmp_path / "surveys.csv"
    surveys.to_csv(path, index=False)
    return path
