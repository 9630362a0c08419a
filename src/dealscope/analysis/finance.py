import math

from dealscope.domain.assumptions import AnalysisConfig
from dealscope.domain.underwriting import HoldingProjection, RentalEstimate


def _estimate_monthly_rent(arv: float, config: AnalysisConfig) -> float:
    """
    Rule-of-thumb rent: a fixed fraction of ARV per month
    (0.8% by default, i.e. a soft version of the "1% rule").
    """
    return arv * config.exit_rent_multiplier


def _financed_payment(asking_price: float, config: AnalysisConfig) -> float:
    """
    Approximate P&I on a 30-year loan at roughly 6%: 0.5% of price per month.
    Cheaper than a full amortization schedule and close enough for ranking.
    """
    return asking_price * config.exit_payment_factor


def estimate_rental_cash_flow(arv: float, asking_price: float, config: AnalysisConfig) -> RentalEstimate:
    """
    Monthly buy-and-hold picture used by the exit strategy advisor:

        cash_flow = rent - payment - expenses
        expenses  = rent * expenseRatio (taxes, insurance, vacancy, capex, mgmt)
    """
    rent = _estimate_monthly_rent(arv, config)
    expenses = rent * config.exit_expense_ratio
    payment = _financed_payment(asking_price, config)
    return RentalEstimate(
        monthly_rent=rent,
        monthly_expenses=expenses,
        monthly_payment=payment,
        monthly_cash_flow=rent - payment - expenses,
    )


def _equity_buildup(balance: float, annual_rate_pct: float, payment: float, months: int) -> float:
    """Principal retired over `months` of a fixed payment (standard amortization)."""
    monthly_rate = annual_rate_pct / 100.0 / 12.0
    paid = 0.0
    for _ in range(months):
        if balance <= 0:
            break
        principal = min(payment - balance * monthly_rate, balance)
        if principal <= 0:
            break
        balance -= principal
        paid += principal
    return paid


def project_holding_period(
    arv: float,
    asking_price: float,
    rental: RentalEstimate,
    config: AnalysisConfig,
    *,
    mortgage_balance: float | None = None,
    mortgage_rate_pct: float | None = None,
) -> HoldingProjection:
    """
    Subject-to hold over `exit.projectionMonths` (60 by default).

    Cash flow is the net monthly figure from the rental estimate. When it is
    negative, break-even is the number of months of appreciation needed to
    cover one year of shortfall. The loan is the seller's existing mortgage
    when known, else the asking price at `exit.sub2.defaultRatePct`.
    """
    months = config.exit_projection_months
    rate = config.exit_appreciation_rate
    cash_flow = rental.monthly_cash_flow

    if cash_flow > 0:
        break_even: int | None = 0
    elif arv * rate <= 0:
        break_even = None
    else:
        break_even = math.ceil(abs(cash_flow) * 12 / (arv * rate))

    appreciation = arv * (1 + rate) ** (months / 12) - arv

    balance = mortgage_balance if mortgage_balance is not None else asking_price
    loan_rate = mortgage_rate_pct if mortgage_rate_pct is not None else config.exit_sub2_default_rate_pct
    buildup = _equity_buildup(balance, loan_rate, rental.monthly_payment, months)

    return HoldingProjection(
        months=months,
        monthly_cash_flow=cash_flow,
        break_even_months=break_even,
        cash_flow_total=round(cash_flow * months, 2),
        appreciation=round(appreciation, 2),
        equity_buildup=round(buildup, 2),
    )
