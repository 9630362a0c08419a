# src/dealscope/services/guardrails.py
from __future__ import annotations

import math
from dataclasses import fields, is_dataclass
from typing import Any, List

from dealscope.domain.errors import ComputationError
from dealscope.domain.property import PropertyRecord
from dealscope.domain.underwriting import RentalEstimate, ValuationResult


def ensure_finite(identifier: str | None, stage: str, obj: Any) -> Any:
    """
    Raise ComputationError if a stage output carries NaN/inf anywhere.

    Accepts a plain number or a (possibly nested) dataclass; returns the
    object unchanged so it can wrap a stage call inline.
    """
    def _walk(value: Any, path: str) -> None:
        if isinstance(value, bool):
            return
        if isinstance(value, (int, float)):
            if not math.isfinite(value):
                raise ComputationError(identifier, stage, path, float(value))
        elif is_dataclass(value):
            for f in fields(value):
                _walk(getattr(value, f.name), f"{path}.{f.name}" if path else f.name)
        elif isinstance(value, (list, tuple)):
            for i, item in enumerate(value):
                _walk(item, f"{path}[{i}]")

    _walk(obj, "" if is_dataclass(obj) else "value")
    return obj


def valuation_warnings(
    record: PropertyRecord,
    valuation: ValuationResult,
    rental: RentalEstimate | None = None,
) -> List[str]:
    """
    Cheap sanity checks on the valuation inputs. These never change the
    verdict; they travel with it so a human can spot data problems.
    """
    warnings: List[str] = []
    asking = valuation.asking_price
    arv = valuation.arv

    if asking <= 0:
        warnings.append("Non-positive asking price; profit percent treated as 0.")
    elif valuation.arv_source == "input":
        if arv < asking * 0.8:
            warnings.append("ARV is unusually low relative to asking price (possible data issue).")
        if arv > asking * 2.0:
            warnings.append("ARV is > 2x asking price; check if this is realistic.")

    if valuation.arv_source == "asking_price":
        warnings.append("ARV estimated from asking price; no comps or explicit ARV.")
    if valuation.repair_source == "sqft" and not record.sqft:
        warnings.append("No repair estimate and no square footage; repairs assumed $0.")

    if arv > 0 and valuation.repair_estimate > arv * 0.5:
        warnings.append("Repair estimate exceeds half of ARV.")

    if rental is not None and rental.monthly_cash_flow < 0:
        warnings.append(f"Negative estimated cash flow: ${rental.monthly_cash_flow:,.0f}/mo")

    return warnings
