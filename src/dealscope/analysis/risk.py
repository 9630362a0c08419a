# src/dealscope/analysis/risk.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from dealscope.domain.assumptions import AnalysisConfig
from dealscope.domain.property import PropertyRecord
from dealscope.domain.underwriting import RiskAssessment

MIN_RISK = 0
MAX_RISK = 10


@dataclass(frozen=True)
class RiskFactor:
    """
    One row of the risk table.

    A factor contributes its points at most once per evaluation, however
    many of its keywords show up in the notes.
    """

    name: str
    points: int
    triggered: Callable[[PropertyRecord, float, str], bool]


def _contains_any(keywords: tuple[str, ...]) -> Callable[[PropertyRecord, float, str], bool]:
    def check(_record: PropertyRecord, _repairs: float, notes: str) -> bool:
        return any(k in notes for k in keywords)

    return check


def _flag_or_keywords(flag: str, keywords: tuple[str, ...]) -> Callable[[PropertyRecord, float, str], bool]:
    has_keyword = _contains_any(keywords)

    def check(record: PropertyRecord, repairs: float, notes: str) -> bool:
        return bool(getattr(record, flag)) or has_keyword(record, repairs, notes)

    return check


def build_risk_table(config: AnalysisConfig) -> tuple[RiskFactor, ...]:
    return (
        RiskFactor(
            name="high_repair_cost",
            points=config.risk_high_repair_points,
            triggered=lambda _r, repairs, _n: repairs > config.risk_high_repair_threshold,
        ),
        RiskFactor(
            name="structural",
            points=config.risk_structural_points,
            triggered=_flag_or_keywords("foundation_issues", config.risk_structural_keywords),
        ),
        RiskFactor(
            name="legal",
            points=config.risk_legal_points,
            triggered=_flag_or_keywords("title_issues", config.risk_legal_keywords),
        ),
        RiskFactor(
            name="location",
            points=config.risk_location_points,
            triggered=_contains_any(config.risk_location_keywords),
        ),
        RiskFactor(
            name="age",
            points=config.risk_age_points,
            triggered=lambda r, _repairs, _n: bool(r.year_built) and 0 < r.year_built < config.risk_old_home_year,
        ),
    )


def compute_risk_score(
    record: PropertyRecord,
    config: AnalysisConfig,
    *,
    repair_estimate: float | None = None,
) -> RiskAssessment:
    """
    Sum the points of every triggered factor and clamp to [0, 10].

    `repair_estimate` lets the caller pass the repair figure actually used in
    valuation (which may be an sqft-based estimate); otherwise the record's
    explicit value is used, and a missing one counts as 0.
    """
    repairs = repair_estimate if repair_estimate is not None else float(record.repair_estimate or 0.0)
    notes = (record.notes or "").lower()

    raw = 0
    triggered: list[tuple[str, int]] = []
    for factor in build_risk_table(config):
        if factor.triggered(record, repairs, notes):
            raw += factor.points
            triggered.append((factor.name, factor.points))

    score = max(MIN_RISK, min(raw, MAX_RISK))
    return RiskAssessment(score=score, triggered_factors=tuple(triggered))
