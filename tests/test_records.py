"""Tests for the specimen and survey table loaders."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from lakelink.records import (
    SPECIMEN_COLUMNS,
    SchemaError,
    load_specimens,
    load_surveys,
    to_nullable_int,
    validate_columns,
)


class TestValidateColumns:
    """Tests for required-column checks."""

    def test_reports_missing_in_order(self):
        df = pd.DataFrame(columns=["new_key", "county"])
        assert validate_columns(df, ["new_key", "lakename", "county", "subject_id"]) == [
            "lakename",
            "subject_id",
        ]

    def test_column_names_are_case_sensitive(self):
        df = pd.DataFrame(columns=["GBIFID"])
        assert validate_columns(df, ["gbifID"]) == ["gbifID"]


class TestLoadSpecimens:
    """Tests for loading the specimen export."""

    def test_loads_and_types_columns(self, specimen_csv: Path):
        df = load_specimens(specimen_csv)
        assert len(df) == 6
        assert str(df["year"].dtype) == "Int64"
        assert df["gbifID"].iloc[0] == "1001"
        assert pd.isna(df["year"].iloc[0])
        assert df["year"].iloc[1] == 1931

    def test_tab_delimited_export(self, tmp_path: Path, specimens: pd.DataFrame):
        path = tmp_path / "occurrence.txt"
        specimens.to_csv(path, sep="\t", index=False)
        df = load_specimens(path)
        assert list(df.columns) == SPECIMEN_COLUMNS
        assert df["locality"].iloc[0] == "Bankers Lake, Hillsdale Co."

    def test_missing_column_raises(self, tmp_path: Path, specimens: pd.DataFrame):
        path = tmp_path / "specimens.csv"
        specimens.drop(columns=["fieldNumber", "locality"]).to_csv(path, index=False)
        with pytest.raises(SchemaError) as exc_info:
            load_specimens(path)
        assert exc_info.value.missing == ["fieldNumber", "locality"]
        assert "fieldNumber" in str(exc_info.value)

    def test_empty_file_raises(self, tmp_path: Path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(SchemaError):
            load_specimens(path)

    def test_schema_error_is_value_error(self, tmp_path: Path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(ValueError):
            load_specimens(path)

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(SchemaError, match="cannot read file"):
            load_specimens(tmp_path / "nope.csv")

    def test_directory_raises(self, tmp_path: Path):
        with pytest.raises(SchemaError):
            load_specimens(tmp_path)

    def test_unparseable_year_becomes_null(self, tmp_path: Path, specimens: pd.DataFrame):
        df = specimens.astype({"year": "object"})
        df.loc[1, "year"] = "c. 1931"
        path = tmp_path / "specimens.csv"
        df.to_csv(path, index=False)
        loaded = load_specimens(path)
        assert pd.isna(loaded["year"].iloc[1])


class TestLoadSurveys:
    """Tests for loading the survey-card table."""

    def test_loads_and_types_columns(self, survey_csv: Path):
        df = load_surveys(survey_csv)
        assert str(df["begin_date_year"].dtype) == "Int64"
        assert df["area"].dtype == float
        assert df["subject_id"].iloc[0] == "S1"

    def test_numeric_looking_ids_stay_text(self, tmp_path: Path):
        path = tmp_path / "cards.csv"
        path.write_text(
            "new_key,lakename,county,begin_date_year,subject_id,notes\n"
            "0012,BANKERS,HILLSDALE,1931,4471,weedy\n"
        )
        df = load_surveys(path)
        assert df["new_key"].iloc[0] == "0012"
        assert df["subject_id"].iloc[0] == "4471"
        assert df["notes"].iloc[0] == "weedy"

    def test_missing_column_raises(self, tmp_path: Path):
        path = tmp_path / "cards.csv"
        path.write_text("new_key,lakename,county\nK1,BANKERS,HILLSDALE\n")
        with pytest.raises(SchemaError) as exc_info:
            load_surveys(path)
        assert exc_info.value.missing == ["begin_date_year", "subject_id"]

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(SchemaError):
            load_surveys(tmp_path / "cards.csv")


class TestToNullableInt:
    """Tests for nullable integer coercion."""

    def test_fractional_and_text_become_na(self):
        result = to_nullable_int(pd.Series(["1931", "1931.5", "c. 1940", None, "1950.0"]))
        assert str(result.dtype) == "Int64"
        assert result.iloc[0] == 1931
        assert result.iloc[1:4].isna().all()
        assert result.iloc[4] == 1950

    def test_already_integer(self):
        result = to_nullable_int(pd.Series([1931, None], dtype="Int64"))
        assert result.iloc[0] == 1931
        assert pd.isna(result.iloc[1])
