from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from dealscope.adapters.config import config
from dealscope.adapters.sql_repo import SqlPropertyRepository, SqlVerdictRepository
from dealscope.adapters.storage import read_records
from dealscope.domain.errors import ConfigurationError, InputError
from dealscope.pipelines.core import analyze_file, run_analysis
from dealscope.services.validation import record_from_payload

app = typer.Typer(help="dealscope deal analysis pipeline (ingest, analyze, rank).")


def _load_overrides(path: Optional[str]) -> dict:
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise typer.BadParameter("config file must hold a JSON object of flat keys")
    return data


@app.command()
def analyze(
    input: str = typer.Option(..., "--input", "-i", help="CSV / parquet / JSON file of property rows"),
    output: str = typer.Option(..., "--output", "-o", help="Where to write ranked verdicts"),
    config_file: Optional[str] = typer.Option(None, "--config", help="JSON file of flat analysis overrides"),
    workers: int = typer.Option(config.BATCH_WORKERS, help="Parallel analysis workers"),
    timeout: Optional[float] = typer.Option(None, help="Stop starting new records after N seconds"),
) -> None:
    """
    Analyze a file of property rows and write a ranked verdict table.
    """
    try:
        cfg = config.analysis_config(_load_overrides(config_file))
    except ConfigurationError as e:
        typer.echo(f"configuration error: {e}", err=True)
        raise typer.Exit(code=2)

    result = analyze_file(Path(input), Path(output), cfg, workers=workers, timeout_seconds=timeout)
    typer.echo(
        f"succeeded={result.succeeded} failed={result.failed} skipped={result.skipped} -> {output}"
    )
    for f in result.failures:
        typer.echo(f"  failed {f.property_identifier or '?'} [{f.stage}] {f.message}", err=True)


@app.command("ingest")
def ingest(
    input: str = typer.Option(..., "--input", "-i", help="CSV / parquet / JSON file of property rows"),
    db_uri: str = typer.Option(config.DB_URI, help="Database URI for the property store"),
) -> None:
    """
    Load property rows into the property store. Unparseable rows are reported
    and skipped.
    """
    repo = SqlPropertyRepository(db_uri)
    records = []
    for row in read_records(input):
        try:
            records.append(record_from_payload(row))
        except InputError as e:
            typer.echo(f"  skipped {e.identifier or '?'}: {e.message}", err=True)
    written = repo.upsert_many(records)
    typer.echo(f"ingested={written}")


@app.command("run")
def run(
    db_uri: str = typer.Option(config.DB_URI, help="Database URI for properties and verdicts"),
    config_file: Optional[str] = typer.Option(None, "--config", help="JSON file of flat analysis overrides"),
    limit: Optional[int] = typer.Option(None, help="Analyze at most N stored properties"),
    workers: int = typer.Option(config.BATCH_WORKERS, help="Parallel analysis workers"),
    timeout: Optional[float] = typer.Option(None, help="Stop starting new records after N seconds"),
) -> None:
    """
    Analyze every stored property and upsert verdicts into the verdict table.
    """
    try:
        cfg = config.analysis_config(_load_overrides(config_file))
    except ConfigurationError as e:
        typer.echo(f"configuration error: {e}", err=True)
        raise typer.Exit(code=2)

    result = run_analysis(
        SqlPropertyRepository(db_uri),
        SqlVerdictRepository(db_uri),
        cfg,
        limit=limit,
        workers=workers,
        timeout_seconds=timeout,
    )
    typer.echo(f"succeeded={result.succeeded} failed={result.failed} skipped={result.skipped}")


if __name__ == "__main__":
    app()
