import pytest

from dealscope.analysis.finance import project_holding_period
from dealscope.domain.assumptions import AnalysisConfig
from dealscope.domain.underwriting import RentalEstimate
from dealscope.services.deal_analyzer import analyze_one
from fixtures.records import solid_flip_row


def _sub2_row(**overrides) -> dict:
    # equity 18% and ~$350/month net cash flow -> SUB2 is a candidate
    row = dict(
        identifier="sub2-1",
        address="50 Takeover Way",
        arv=500_000,
        asking_price=410_000,
        repair_estimate=0,
        year_built=2012,
    )
    row.update(overrides)
    return row


def test_positive_cash_flow_breaks_even_immediately(default_config):
    rental = RentalEstimate(monthly_rent=1_500.0, monthly_expenses=300.0, monthly_payment=700.0, monthly_cash_flow=500.0)
    proj = project_holding_period(
        200_000.0, 100_000.0, rental, default_config, mortgage_balance=100_000.0, mortgage_rate_pct=0.0
    )

    assert proj.months == 60
    assert proj.break_even_months == 0
    assert proj.cash_flow_total == pytest.approx(30_000.0)
    # interest-free loan: every payment is principal
    assert proj.equity_buildup == pytest.approx(42_000.0)
    assert proj.appreciation == pytest.approx(200_000.0 * (1.03 ** 5 - 1), abs=0.01)


def test_negative_cash_flow_break_even_from_appreciation(default_config):
    rental = RentalEstimate(monthly_rent=1_000.0, monthly_expenses=400.0, monthly_payment=800.0, monthly_cash_flow=-200.0)
    proj = project_holding_period(100_000.0, 90_000.0, rental, default_config)

    # 200 * 12 / (100k * 3%) = 0.8 -> 1
    assert proj.break_even_months == 1
    assert proj.cash_flow_total == pytest.approx(-12_000.0)


def test_no_appreciation_means_no_break_even():
    cfg = AnalysisConfig.from_mapping({"exit.appreciationRate": 0})
    rental = RentalEstimate(monthly_rent=1_000.0, monthly_expenses=400.0, monthly_payment=800.0, monthly_cash_flow=-200.0)
    proj = project_holding_period(100_000.0, 90_000.0, rental, cfg)

    assert proj.break_even_months is None
    assert proj.appreciation == 0.0


def test_equity_buildup_with_interest_is_less_than_payments(default_config):
    rental = RentalEstimate(monthly_rent=2_000.0, monthly_expenses=400.0, monthly_payment=600.0, monthly_cash_flow=1_000.0)
    proj = project_holding_period(
        150_000.0, 100_000.0, rental, default_config, mortgage_balance=100_000.0, mortgage_rate_pct=6.0
    )

    # first month: 600 - 100k * 0.5% = 100 of principal
    assert 100.0 * 60 < proj.equity_buildup < 600.0 * 60


def test_payoff_stops_at_the_remaining_balance(default_config):
    rental = RentalEstimate(monthly_rent=2_000.0, monthly_expenses=400.0, monthly_payment=1_000.0, monthly_cash_flow=600.0)
    proj = project_holding_period(
        150_000.0, 100_000.0, rental, default_config, mortgage_balance=5_500.0, mortgage_rate_pct=0.0
    )

    assert proj.equity_buildup == pytest.approx(5_500.0)


def test_projection_length_is_configurable():
    cfg = AnalysisConfig.from_mapping({"exit.projectionMonths": 12})
    rental = RentalEstimate(monthly_rent=1_500.0, monthly_expenses=300.0, monthly_payment=700.0, monthly_cash_flow=500.0)
    proj = project_holding_period(200_000.0, 100_000.0, rental, cfg)

    assert proj.months == 12
    assert proj.cash_flow_total == pytest.approx(6_000.0)


def test_sub2_candidate_gets_holding_projection():
    v = analyze_one(_sub2_row(existing_mortgage_balance=300_000, mortgage_rate=0))

    assert "SUB2" in {c.strategy for c in v.exit_plan.candidates}
    proj = v.holding_projection
    assert proj is not None
    assert proj.break_even_months == 0
    assert proj.monthly_cash_flow == pytest.approx(350.0)
    # payment is 0.5% of asking: 2,050 a month, all principal at 0%
    assert proj.equity_buildup == pytest.approx(2_050.0 * 60)


def test_high_equity_flip_has_no_holding_projection():
    v = analyze_one(solid_flip_row())

    assert "SUB2" not in {c.strategy for c in v.exit_plan.candidates}
    assert v.holding_projection is None
