# src/dealscope/api/schemas.py
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# --------------------------------------------
# Analyze (single record)
# --------------------------------------------

class AnalyzeRequest(BaseModel):
    """
    One raw property row.

    Kept permissive: upstream column aliases (zip, list_price, askingPrice,
    ...) pass straight through to the ingestion mapping.
    """
    model_config = ConfigDict(extra="allow")

    identifier: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zipcode: str | None = None

    asking_price: float | str | None = None
    arv: float | str | None = None
    repair_estimate: float | str | None = None
    sqft: float | str | None = None
    year_built: int | None = None
    notes: str | None = None


class VerdictResponse(BaseModel):
    """DealVerdict.to_dict(); permissive so new fields don't break clients."""
    model_config = ConfigDict(extra="allow")

    property_identifier: str
    classification: Literal["HOT", "SOLID", "MARGINAL", "PASS"]
    deal_score: int
    priority: Literal["HIGH", "MEDIUM", "LOW"]


# --------------------------------------------
# Batch
# --------------------------------------------

class BatchAnalyzeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    records: list[dict[str, Any]]
    config: dict[str, Any] = Field(default_factory=dict, description="Flat analysis overrides")
    workers: int = Field(default=1, ge=1, le=32)
    publish: bool = True


class FailureItem(BaseModel):
    property_identifier: str | None = None
    error_type: str
    stage: str
    message: str


class BatchAnalyzeResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    succeeded: int
    failed: int
    skipped: int = 0
    cancelled: bool = False
    verdicts: list[dict[str, Any]]
    failures: list[FailureItem]
