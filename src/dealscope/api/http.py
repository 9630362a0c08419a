# src/dealscope/api/http.py
from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Query

from dealscope.adapters.config import config
from dealscope.adapters.logging_utils import get_logger
from dealscope.adapters.memory_repo import InMemoryVerdictSink
from dealscope.adapters.sql_repo import SqlVerdictRepository
from dealscope.domain.errors import ComputationError, ConfigurationError, InputError
from dealscope.services.deal_analyzer import analyze_batch, analyze_one, sort_verdicts
from .schemas import (
    AnalyzeRequest,
    BatchAnalyzeRequest,
    BatchAnalyzeResponse,
    VerdictResponse,
)

logger = get_logger(__name__)

app = FastAPI(title="dealscope")

if config.VERDICT_STORE == "sql":
    _verdict_sink: InMemoryVerdictSink | SqlVerdictRepository = SqlVerdictRepository(config.DB_URI)
else:
    _verdict_sink = InMemoryVerdictSink()


def _list_verdicts(limit: int) -> list[dict[str, Any]]:
    if isinstance(_verdict_sink, SqlVerdictRepository):
        return _verdict_sink.list_ranked(limit=limit)
    return [v.to_dict() for v in sort_verdicts(_verdict_sink.all())[:limit]]


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": config.ENV}


@app.post("/analyze", response_model=VerdictResponse)
def analyze_endpoint(payload: AnalyzeRequest, save: bool = Query(True)) -> VerdictResponse:
    """
    Analyze one property and (by default) publish the verdict, replacing any
    earlier verdict for the same identifier.
    """
    try:
        analysis_cfg = config.analysis_config()
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    try:
        verdict = analyze_one(payload.model_dump(exclude_none=True), analysis_cfg)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ComputationError as e:
        logger.error("analysis_failed", extra={"context": {"stage": e.stage, "property_identifier": e.identifier}})
        raise HTTPException(status_code=500, detail=str(e)) from e

    if save:
        _verdict_sink.publish_many([verdict])
    return VerdictResponse(**verdict.to_dict())


@app.post("/analyze/batch", response_model=BatchAnalyzeResponse)
def analyze_batch_endpoint(body: BatchAnalyzeRequest) -> BatchAnalyzeResponse:
    """
    Analyze a list of raw rows. Bad rows are reported in `failures`; a bad
    config fails the whole request.
    """
    try:
        analysis_cfg = config.analysis_config(body.config)
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    result = analyze_batch(body.records, analysis_cfg, workers=body.workers)
    if body.publish:
        _verdict_sink.publish_many(result.verdicts)
    return BatchAnalyzeResponse(**result.to_dict())


@app.get("/verdicts", response_model=list[dict])
def list_verdicts(limit: int = Query(50, ge=1, le=1000)) -> list[dict]:
    return _list_verdicts(limit)


@app.get("/verdicts/{property_identifier}")
def get_verdict(property_identifier: str) -> dict[str, Any]:
    found = _verdict_sink.get(property_identifier)
    if found is None:
        raise HTTPException(status_code=404, detail="verdict not found")
    return found if isinstance(found, dict) else found.to_dict()
