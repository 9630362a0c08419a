# src/dealscope/pipelines/core.py

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from loguru import logger

from dealscope.adapters.storage import read_records, write_verdicts
from dealscope.domain.assumptions import AnalysisConfig
from dealscope.domain.ports import PropertyStore, VerdictSink
from dealscope.services.deal_analyzer import BatchResult, CancellationToken, analyze_batch


def _log_failures(result: BatchResult) -> None:
    for f in result.failures:
        logger.warning(
            "Record failed analysis",
            property_identifier=f.property_identifier,
            error_type=f.error_type,
            stage=f.stage,
            message=f.message,
        )


# ---------------------------
# 1. STORE -> SINK
# ---------------------------

def run_analysis(
    store: PropertyStore,
    sink: VerdictSink,
    config: AnalysisConfig | Mapping[str, Any] | None = None,
    *,
    limit: int | None = None,
    workers: int = 1,
    timeout_seconds: float | None = None,
) -> BatchResult:
    """
    Pull records from the store, analyze them as one batch, publish the
    verdicts.

    Reads happen once up front and the single write happens after the batch,
    so the analysis itself never touches I/O. Verdicts from a cancelled run
    are still published: each one is complete on its own.
    """
    cfg = config if isinstance(config, AnalysisConfig) else AnalysisConfig.from_mapping(config)

    records = store.list_all(limit=limit)
    logger.info("Starting analysis run", records=len(records), workers=workers)

    token = CancellationToken(timeout_seconds) if timeout_seconds is not None else None
    result = analyze_batch(records, cfg, cancel_token=token, workers=workers)

    published = sink.publish_many(result.verdicts)
    _log_failures(result)
    logger.info(
        "Analysis run completed",
        succeeded=result.succeeded,
        failed=result.failed,
        skipped=result.skipped,
        published=published,
    )
    return result


# ---------------------------
# 2. FILE -> FILE
# ---------------------------

def analyze_file(
    input_path: Path,
    output_path: Path,
    config: AnalysisConfig | Mapping[str, Any] | None = None,
    *,
    workers: int = 1,
    timeout_seconds: float | None = None,
) -> BatchResult:
    """
    CSV / parquet / JSON in, ranked verdict table out.
    """
    cfg = config if isinstance(config, AnalysisConfig) else AnalysisConfig.from_mapping(config)

    logger.info("Reading property records", path=str(input_path))
    rows = read_records(str(input_path))

    token = CancellationToken(timeout_seconds) if timeout_seconds is not None else None
    result = analyze_batch(rows, cfg, cancel_token=token, workers=workers)
    _log_failures(result)

    written = write_verdicts(result.verdicts, str(output_path))
    logger.info(
        "Wrote verdicts",
        path=str(output_path),
        rows=written,
        succeeded=result.succeeded,
        failed=result.failed,
        skipped=result.skipped,
    )
    return result
