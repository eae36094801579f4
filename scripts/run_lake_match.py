#!/usr/bin/env python3
"""CLI script to match specimen lots against lake survey cards."""

from __future__ import annotations

from pathlib import Path

import structlog
import typer

from lakelink.config import get_settings
from lakelink.overrides import load_override_table
from lakelink.pipeline import run_pipeline
from lakelink.report import generate_match_report

logger = structlog.get_logger(__name__)
app = typer.Typer()


@app.command()
def main(
    specimens: Path | None = typer.Argument(
        None,
        help="Specimen occurrence export (CSV or tab-delimited .txt); defaults to LL_SPECIMEN_PATH",
    ),
    surveys: Path | None = typer.Argument(
        None, help="Survey-card transcription CSV; defaults to LL_SURVEY_PATH"
    ),
    overrides: Path | None = typer.Option(
        None, "--overrides", help="Override table JSON for this dataset snapshot"
    ),
    output: Path | None = typer.Option(
        None, "--output", help="Write the matched table here; defaults to LL_OUTPUT_PATH"
    ),
    unmatched: Path | None = typer.Option(
        None, "--unmatched", help="Write specimen keys without a survey card here"
    ),
    report: bool = typer.Option(True, "--report/--no-report", help="Print a summary report"),
) -> None:
    """Normalise specimens, extract lake names and join them to survey cards."""
    settings = get_settings()

    try:
        table = load_override_table(overrides) if overrides else None
        result = run_pipeline(
            specimens,
            surveys,
            overrides=table,
            settings=settings,
            output_path=output,
        )
    except ValueError as e:  # SchemaError, missing input path or an invalid override table
        logger.error("lake_match_failed", error=str(e))
        raise typer.Exit(code=1) from e

    if unmatched:
        result.unmatched.to_csv(unmatched, index=False)
        logger.info("unmatched_keys_written", path=str(unmatched), rows=len(result.unmatched))

    if report:
        typer.echo(generate_match_report(result.summary))


if __name__ == "__main__":
    app()
