# src/dealscope/analysis/valuation.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from dealscope.analysis.rehab_estimator import RehabEstimator
from dealscope.domain.assumptions import AnalysisConfig
from dealscope.domain.property import ComparableSale, PropertyRecord
from dealscope.domain.underwriting import ValuationResult

# Comparable-sale adjustments (subject minus comp, per unit of difference)
SQFT_ADJUSTMENT = 50.0
BEDROOM_ADJUSTMENT = 5_000.0
BATHROOM_ADJUSTMENT = 3_000.0
AGE_ADJUSTMENT_PER_YEAR = 1_000.0
CONDITION_ADJUSTMENT = 5_000.0

# Assumed condition ratings when a record or comp carries none
DEFAULT_SUBJECT_CONDITION = 8.0   # after repair
DEFAULT_COMP_CONDITION = 7.0


def compute_mao(arv: float, repair_estimate: float, config: AnalysisConfig) -> float:
    """
    Maximum allowable offer ("70% rule"):

        MAO = arv * arvMultiplier - repairs - holding - closing

    holding = monthlyHoldingCost * holdingMonths (flat),
    closing = arv * closingCostPercent. Floored at 0.
    """
    closing = arv * config.closing_cost_percent
    mao = arv * config.arv_multiplier - repair_estimate - config.holding_costs - closing
    return max(mao, 0.0)


def compute_profit_potential(
    arv: float,
    asking_price: float,
    repair_estimate: float,
    config: AnalysisConfig,
) -> float:
    """
    Resale profit if bought at asking and sold at ARV. Signed: a negative
    result is a bad deal, not an error.
    """
    closing = arv * config.closing_cost_percent
    selling = arv * config.selling_cost_percent
    all_in = asking_price + repair_estimate + config.holding_costs + closing + selling
    return arv - all_in


def profit_percent(profit: float, asking_price: float) -> float:
    if asking_price <= 0:
        return 0.0
    return profit / asking_price * 100.0


def estimate_arv(asking_price: float, config: AnalysisConfig) -> float:
    return asking_price * config.arv_estimate_multiplier


def estimate_repairs(sqft: float | None, per_sqft_rate: float) -> float:
    if sqft is None or sqft <= 0:
        return 0.0
    return sqft * per_sqft_rate


@dataclass(frozen=True)
class CompAdjustment:
    sale_price: float
    adjusted_price: float
    adjustments: tuple[tuple[str, float], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ArvEstimate:
    arv: float
    confidence: str            # high | medium | low
    comp_count: int
    value_low: float
    value_high: float
    comps: tuple[CompAdjustment, ...] = field(default_factory=tuple)


def _adjust_comp(subject: PropertyRecord, comp: ComparableSale) -> CompAdjustment:
    value = comp.sale_price
    adjustments: list[tuple[str, float]] = []

    def add(name: str, subject_val: float | None, comp_val: float | None, per_unit: float) -> None:
        nonlocal value
        if subject_val is None or comp_val is None:
            return
        diff = float(subject_val) - float(comp_val)
        if diff == 0:
            return
        amount = diff * per_unit
        value += amount
        adjustments.append((name, amount))

    add("sqft", subject.sqft, comp.sqft, SQFT_ADJUSTMENT)
    add("bedrooms", subject.bedrooms, comp.bedrooms, BEDROOM_ADJUSTMENT)
    add("bathrooms", subject.bathrooms, comp.bathrooms, BATHROOM_ADJUSTMENT)
    add("age", comp.year_built, subject.year_built, AGE_ADJUSTMENT_PER_YEAR)

    # subject is compared at its post-rehab condition
    subject_condition = subject.condition_after_repair
    if subject_condition is None:
        subject_condition = DEFAULT_SUBJECT_CONDITION
    comp_condition = comp.condition if comp.condition is not None else DEFAULT_COMP_CONDITION
    add("condition", subject_condition, comp_condition, CONDITION_ADJUSTMENT)

    return CompAdjustment(sale_price=comp.sale_price, adjusted_price=value, adjustments=tuple(adjustments))


def estimate_arv_from_comps(subject: PropertyRecord, comps: Sequence[ComparableSale]) -> ArvEstimate | None:
    """
    Adjusted-comps ARV: each sale is adjusted toward the subject on size,
    bed/bath count, age and condition, then averaged. Confidence comes from the
    coefficient of variation of the adjusted values.
    """
    if not comps:
        return None

    adjusted = [_adjust_comp(subject, c) for c in comps]
    values = [a.adjusted_price for a in adjusted]
    mean = sum(values) / len(values)
    if mean <= 0:
        return None

    variance = sum((v - mean) ** 2 for v in values) / len(values)
    cv = math.sqrt(variance) / mean
    if cv < 0.05:
        confidence = "high"
    elif cv < 0.15:
        confidence = "medium"
    else:
        confidence = "low"

    return ArvEstimate(
        arv=round(mean, 2),
        confidence=confidence,
        comp_count=len(values),
        value_low=min(values),
        value_high=max(values),
        comps=tuple(adjusted),
    )


def value_property(record: PropertyRecord, config: AnalysisConfig) -> ValuationResult:
    """
    Valuation for one record.

    ARV priority:
      1) explicit record.arv
      2) adjusted comps, when the record carries any
      3) asking_price * arvEstimateMultiplier
    Repairs:
      1) explicit record.repair_estimate
      2) itemized condition survey, when the record has a condition and sqft
      3) sqft * repairPerSqft
    """
    asking = float(record.asking_price or 0.0)

    if record.arv is not None:
        arv, arv_source = float(record.arv), "input"
    else:
        comp_est = estimate_arv_from_comps(record, record.comps)
        if comp_est is not None:
            arv, arv_source = comp_est.arv, "comps"
        else:
            arv, arv_source = estimate_arv(asking, config), "asking_price"

    repair_plan = None
    if record.repair_estimate is not None:
        repairs, repair_source = float(record.repair_estimate), "input"
    elif record.condition is not None and record.sqft:
        repair_plan = RehabEstimator().estimate(record)
        repairs, repair_source = repair_plan.total, "itemized"
    else:
        repairs, repair_source = estimate_repairs(record.sqft, config.repair_per_sqft), "sqft"

    mao = compute_mao(arv, repairs, config)
    profit = compute_profit_potential(arv, asking, repairs, config)

    return ValuationResult(
        arv=arv,
        repair_estimate=repairs,
        arv_source=arv_source,
        repair_source=repair_source,
        asking_price=asking,
        maximum_allowable_offer=mao,
        spread=mao - asking,
        profit_potential=profit,
        profit_percent=profit_percent(profit, asking),
        repair_plan=repair_plan,
    )
