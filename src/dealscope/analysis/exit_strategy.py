# src/dealscope/analysis/exit_strategy.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from dealscope.analysis.finance import estimate_rental_cash_flow
from dealscope.domain.assumptions import AnalysisConfig
from dealscope.domain.underwriting import (
    NO_VIABLE_STRATEGY,
    ExitRecommendation,
    RentalEstimate,
    StrategyCandidate,
)


@dataclass(frozen=True)
class ExitProfile:
    """Financial profile of one property, as the advisor sees it."""

    arv: float
    repair_estimate: float
    equity_percent: float          # (arv - asking) / arv * 100
    market_volume_score: float     # 0-100
    velocity_score: float          # 0-100
    profit_potential: float
    asking_price: float
    sqft: float = 0.0


def equity_percent(arv: float, asking_price: float) -> float:
    if arv <= 0:
        return 0.0
    return (arv - asking_price) / arv * 100.0


@dataclass(frozen=True)
class _Context:
    profile: ExitProfile
    rental: RentalEstimate
    config: AnalysisConfig

    @property
    def cash_flow(self) -> float:
        return self.rental.monthly_cash_flow


@dataclass(frozen=True)
class StrategyRule:
    name: str
    timeline: str
    eligible: Callable[[_Context], bool]
    score: Callable[[_Context], float]
    expected_profit: Callable[[_Context], float]
    blurb: str


def _rental_profit(multiplier: float) -> Callable[[_Context], float]:
    return lambda c: c.cash_flow * multiplier * 12.0


# Fixed catalogue. Order matters only for breaking score ties.
CATALOGUE: tuple[StrategyRule, ...] = (
    StrategyRule(
        name="WHOLESALE",
        timeline="2-4 weeks",
        eligible=lambda c: (
            c.profile.equity_percent >= c.config.exit_wholesale_min_equity_pct
            and c.profile.profit_potential > c.config.exit_wholesale_min_profit
        ),
        score=lambda c: 60.0 + c.profile.profit_potential / 1000.0,
        expected_profit=lambda c: c.profile.profit_potential,
        blurb="strong equity supports a quick contract assignment",
    ),
    StrategyRule(
        name="WHOLETAIL",
        timeline="1-3 months",
        eligible=lambda c: (
            c.profile.equity_percent >= 15.0
            and c.profile.repair_estimate <= c.profile.arv * 0.10
            and c.profile.velocity_score >= 50.0
            and c.profile.profit_potential > 0
        ),
        score=lambda c: 55.0 + c.profile.profit_potential / 1500.0 + c.profile.velocity_score / 10.0,
        expected_profit=lambda c: c.profile.profit_potential * 0.85,
        blurb="light repairs in a fast market suit a clean-up and retail listing",
    ),
    StrategyRule(
        name="SUB2",
        timeline="30-60 days",
        eligible=lambda c: c.profile.equity_percent < 20.0 and c.cash_flow > 100.0,
        score=lambda c: 50.0 + c.cash_flow / 20.0,
        expected_profit=_rental_profit(1.0),
        blurb="thin equity but positive cash flow favours taking over existing financing",
    ),
    StrategyRule(
        name="WRAPAROUND",
        timeline="3-6 months",
        eligible=lambda c: (
            c.profile.equity_percent >= 10.0
            and c.cash_flow > 0
            and c.profile.market_volume_score >= 40.0
        ),
        score=lambda c: 45.0 + c.cash_flow / 25.0 + c.profile.equity_percent / 2.0,
        expected_profit=_rental_profit(1.5),
        blurb="equity plus buyer demand supports a seller-financed resale",
    ),
    StrategyRule(
        name="SHORT_TERM_RENTAL",
        timeline="1+ years",
        eligible=lambda c: c.cash_flow > 300.0 and c.profile.market_volume_score >= 60.0,
        score=lambda c: 40.0 + c.cash_flow / 10.0,
        expected_profit=_rental_profit(2.0),
        blurb="strong cash flow in a high-volume market suits nightly rentals",
    ),
    StrategyRule(
        name="MID_TERM_RENTAL",
        timeline="1+ years",
        eligible=lambda c: c.cash_flow > 200.0 and c.profile.market_volume_score >= 40.0,
        score=lambda c: 45.0 + c.cash_flow / 15.0,
        expected_profit=_rental_profit(1.5),
        blurb="solid cash flow supports furnished monthly rentals",
    ),
    StrategyRule(
        name="LONG_TERM_RENTAL",
        timeline="1+ years",
        eligible=lambda c: c.cash_flow > 100.0,
        score=lambda c: 50.0 + c.cash_flow / 20.0,
        expected_profit=_rental_profit(1.0),
        blurb="positive cash flow supports a conventional buy-and-hold",
    ),
)

CATALOGUE_NAMES: frozenset[str] = frozenset(s.name for s in CATALOGUE)


def recommend(
    profile: ExitProfile,
    config: AnalysisConfig,
    *,
    rental: RentalEstimate | None = None,
) -> ExitRecommendation:
    """
    Rank the viable exit strategies for a property.

    Only eligible strategies are scored; ineligible ones are dropped rather
    than scored 0. When nothing qualifies the result is NO_VIABLE_STRATEGY.
    """
    if rental is None:
        rental = estimate_rental_cash_flow(profile.arv, profile.asking_price, config)
    ctx = _Context(profile=profile, rental=rental, config=config)

    scored: list[tuple[float, int, StrategyRule]] = []
    for idx, rule in enumerate(CATALOGUE):
        if rule.eligible(ctx):
            scored.append((rule.score(ctx), idx, rule))

    if not scored:
        return ExitRecommendation(
            primary=NO_VIABLE_STRATEGY,
            secondary=None,
            reason=(
                f"No strategy fits: equity {profile.equity_percent:.1f}%, "
                f"profit ${profile.profit_potential:,.0f}, "
                f"cash flow ${rental.monthly_cash_flow:,.0f}/mo"
            ),
            timeline="n/a",
            expected_profit=0.0,
        )

    scored.sort(key=lambda t: (-t[0], t[1]))

    candidates = tuple(
        StrategyCandidate(
            strategy=rule.name,
            score=round(score, 2),
            expected_profit=round(rule.expected_profit(ctx), 2),
            timeline=rule.timeline,
        )
        for score, _idx, rule in scored
    )
    top_rule = scored[0][2]
    top = candidates[0]

    return ExitRecommendation(
        primary=top.strategy,
        secondary=candidates[1].strategy if len(candidates) > 1 else None,
        reason=f"{top.strategy.replace('_', ' ').title()}: {top_rule.blurb}",
        timeline=top.timeline,
        expected_profit=top.expected_profit,
        candidates=candidates,
    )
