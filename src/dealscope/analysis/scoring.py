# src/dealscope/analysis/scoring.py
from __future__ import annotations

import math

# Normalizers: $50k of spread or profit saturates the sub-score.
SPREAD_SATURATION = 50_000.0
PROFIT_SATURATION = 50_000.0

WEIGHT_SPREAD = 0.30
WEIGHT_PROFIT = 0.30
WEIGHT_ROI = 0.20
WEIGHT_SAFETY = 0.20

RISK_PENALTY_PER_POINT = 5.0
MAX_RISK_PENALTY = 50.0

_GRADE_BANDS: tuple[tuple[int, str], ...] = (
    (90, "A+"),
    (85, "A"),
    (80, "A-"),
    (75, "B+"),
    (70, "B"),
    (65, "B-"),
    (60, "C+"),
    (55, "C"),
    (50, "C-"),
    (45, "D+"),
    (40, "D"),
)


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(x, hi))


def compute_score(
    spread: float,
    profit: float,
    asking_price: float,
    risk_score: int,
    arv: float,
) -> int:
    """
    Continuous 0-100 deal score used to rank deals inside a tier.

    Components (each capped at 100):
      - spread:  spread / 50k
      - profit:  profit / 50k
      - roi:     2x profit-on-asking percent (0 when asking <= 0)
      - safety:  100 - 5 per risk point (penalty capped at 50)

    Pure and deterministic. `arv` is part of the signature so callers can
    pass the full valuation context; it does not move the score.
    """
    spread_score = min(100.0, spread / SPREAD_SATURATION * 100.0)
    profit_score = min(100.0, profit / PROFIT_SATURATION * 100.0)

    if asking_price > 0:
        roi_score = min(100.0, (profit / asking_price * 100.0) * 2.0)
    else:
        roi_score = 0.0

    risk_penalty = min(MAX_RISK_PENALTY, risk_score * RISK_PENALTY_PER_POINT)

    final = (
        WEIGHT_SPREAD * spread_score
        + WEIGHT_PROFIT * profit_score
        + WEIGHT_ROI * roi_score
        + WEIGHT_SAFETY * (100.0 - risk_penalty)
    )
    final = _clamp(final, 0.0, 100.0)
    # half-up: 72.5 -> 73
    return int(math.floor(final + 0.5))


def letter_grade(deal_score: int) -> str:
    for floor, grade in _GRADE_BANDS:
        if deal_score >= floor:
            return grade
    return "F"


def success_probability(deal_score: int, risk_score: int) -> int:
    """
    Rough close probability in percent: 70% deal quality, 30% safety
    (risk rescaled 0-10 -> 0-100), kept within 5..95.
    """
    base = deal_score * 0.7 + (100.0 - risk_score * 10.0) * 0.3
    return int(round(_clamp(base, 5.0, 95.0)))
