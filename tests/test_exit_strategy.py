import pytest

from hypothesis import given, strategies as st

from dealscope.analysis.exit_strategy import (
    CATALOGUE_NAMES,
    ExitProfile,
    equity_percent,
    recommend,
)
from dealscope.analysis.finance import estimate_rental_cash_flow
from dealscope.domain.assumptions import AnalysisConfig
from dealscope.domain.underwriting import NO_VIABLE_STRATEGY, RentalEstimate


def _profile(**overrides) -> ExitProfile:
    fields = dict(
        arv=300_000.0,
        repair_estimate=20_000.0,
        equity_percent=50.0,
        market_volume_score=50.0,
        velocity_score=50.0,
        profit_potential=94_000.0,
        asking_price=150_000.0,
    )
    fields.update(overrides)
    return ExitProfile(**fields)


def test_rental_cash_flow_rule_of_thumb(default_config):
    r = estimate_rental_cash_flow(300_000.0, 150_000.0, default_config)

    assert r.monthly_rent == pytest.approx(2_400.0)
    assert r.monthly_expenses == pytest.approx(960.0)
    assert r.monthly_payment == pytest.approx(750.0)
    assert r.monthly_cash_flow == pytest.approx(690.0)


def test_equity_percent_handles_zero_arv():
    assert equity_percent(0.0, 100_000.0) == 0.0
    assert equity_percent(300_000.0, 150_000.0) == pytest.approx(50.0)


def test_strong_equity_recommends_wholesale_then_wholetail(default_config):
    rec = recommend(_profile(), default_config)

    assert rec.primary == "WHOLESALE"
    assert rec.secondary == "WHOLETAIL"
    assert rec.timeline == "2-4 weeks"
    assert rec.expected_profit == pytest.approx(94_000.0)
    assert rec.is_viable

    scores = [c.score for c in rec.candidates]
    assert scores == sorted(scores, reverse=True)
    # volume 50 is below the short-term rental floor
    assert "SHORT_TERM_RENTAL" not in {c.strategy for c in rec.candidates}


def test_equal_scores_keep_catalogue_order(default_config):
    rental = RentalEstimate(monthly_rent=2_000.0, monthly_expenses=800.0, monthly_payment=700.0, monthly_cash_flow=500.0)
    profile = _profile(
        arv=200_000.0,
        asking_price=180_000.0,
        equity_percent=10.0,
        profit_potential=-5_000.0,
    )
    rec = recommend(profile, default_config, rental=rental)

    # MTR 45 + 500/15; SUB2 and LTR tie at 75 and SUB2 comes first in the catalogue
    assert [c.strategy for c in rec.candidates] == ["MID_TERM_RENTAL", "SUB2", "LONG_TERM_RENTAL", "WRAPAROUND"]
    assert rec.secondary == "SUB2"
    assert rec.candidates[0].expected_profit == pytest.approx(500.0 * 1.5 * 12)


def test_no_candidate_returns_sentinel(default_config):
    profile = _profile(arv=100_000.0, asking_price=100_000.0, equity_percent=0.0, profit_potential=-20_000.0)
    rec = recommend(profile, default_config)

    assert rec.primary == NO_VIABLE_STRATEGY
    assert rec.secondary is None
    assert rec.timeline == "n/a"
    assert rec.expected_profit == 0.0
    assert rec.candidates == ()
    assert not rec.is_viable


@given(
    arv=st.floats(min_value=0.0, max_value=3_000_000.0),
    asking=st.floats(min_value=0.0, max_value=3_000_000.0),
    repairs=st.floats(min_value=0.0, max_value=500_000.0),
    volume=st.floats(min_value=0.0, max_value=100.0),
    velocity=st.floats(min_value=0.0, max_value=100.0),
    profit=st.floats(min_value=-1_000_000.0, max_value=1_000_000.0),
)
def test_primary_is_catalogue_member_or_sentinel(arv, asking, repairs, volume, velocity, profit):
    profile = ExitProfile(
        arv=arv,
        repair_estimate=repairs,
        equity_percent=equity_percent(arv, asking),
        market_volume_score=volume,
        velocity_score=velocity,
        profit_potential=profit,
        asking_price=asking,
    )
    rec = recommend(profile, AnalysisConfig())

    assert rec.primary in CATALOGUE_NAMES or rec.primary == NO_VIABLE_STRATEGY
    assert all(c.strategy in CATALOGUE_NAMES for c in rec.candidates)
