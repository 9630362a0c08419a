from dealscope.domain.assumptions import AnalysisConfig
from dealscope.domain.property import PropertyRecord
from dealscope.domain.underwriting import Classification, Priority, RiskAssessment


def _tiers(config: AnalysisConfig) -> list[tuple[Classification, float, float, int]]:
    # Strictest first: the first tier whose three gates all pass wins.
    return [
        ("HOT", config.hot_min_spread, config.hot_min_profit_pct, config.hot_max_risk),
        ("SOLID", config.solid_min_spread, config.solid_min_profit_pct, config.solid_max_risk),
        ("MARGINAL", config.marginal_min_spread, config.marginal_min_profit_pct, config.marginal_max_risk),
    ]


def classify(
    spread: float,
    profit_percent: float,
    risk_score: int,
    config: AnalysisConfig,
) -> Classification:
    """
    Map a deal onto HOT / SOLID / MARGINAL / PASS.

    Gates are AND-conjoined per tier, so a big spread with high risk is
    demoted rather than promoted. PASS is the fallback and makes the
    mapping total.
    """
    for tier, min_spread, min_profit_pct, max_risk in _tiers(config):
        if spread >= min_spread and profit_percent >= min_profit_pct and risk_score <= max_risk:
            return tier
    return "PASS"


def derive_priority(classification: Classification, deal_score: int) -> Priority:
    if classification == "HOT":
        return "HIGH"
    if classification == "SOLID":
        return "HIGH" if deal_score >= 70 else "MEDIUM"
    if classification == "MARGINAL":
        return "MEDIUM" if deal_score >= 60 else "LOW"
    return "LOW"


def build_action_items(
    classification: Classification,
    *,
    mao: float,
    asking_price: float,
    triggered_factors: tuple[tuple[str, int], ...],
    exit_strategy: str | None,
    arv_source: str,
    repair_source: str,
) -> tuple[str, ...]:
    """Human-readable follow-ups for whoever works the lead next."""
    items: list[str] = []

    if classification == "HOT":
        items.append("Contact seller within 24 hours")
        items.append(f"Submit offer at or below MAO ${mao:,.0f}")
        items.append("Line up buyers from the disposition list")
    elif classification == "SOLID":
        items.append("Schedule walkthrough this week")
        items.append(f"Open negotiation below MAO ${mao:,.0f}")
    elif classification == "MARGINAL":
        gap = max(asking_price - mao, 0.0)
        if gap > 0:
            items.append(f"Negotiate price down by at least ${gap:,.0f} to reach MAO")
        else:
            items.append("Proceed only if better terms can be negotiated")
        items.append("Re-check repair estimate before committing")
    else:
        items.append("Archive lead; revisit if price drops")

    factor_actions = {
        "high_repair_cost": "Get contractor bid to confirm repair budget",
        "structural": "Order structural / foundation inspection",
        "legal": "Run title search and confirm lien / probate status",
        "location": "Verify location risk (flood map, crime stats)",
        "age": "Inspect roof, electrical and plumbing on older home",
    }
    if classification != "PASS":
        for name, _points in triggered_factors:
            action = factor_actions.get(name)
            if action:
                items.append(action)

        if arv_source != "input":
            items.append("Pull sold comps to confirm ARV")
        if repair_source == "itemized":
            items.append("Confirm itemized repair budget with a contractor walkthrough")
        elif repair_source != "input":
            items.append("Replace per-sqft repair estimate with a walkthrough estimate")

        if exit_strategy:
            items.append(f"Plan exit via {exit_strategy.replace('_', ' ').title()}")

    return tuple(items)


# Strength / weakness cut-offs on the lead signals
STRONG_EQUITY_SPREAD = 30_000.0
MOTIVATED_SELLER = 8
STALE_LISTING_DAYS = 60
GOOD_LOCATION = 7
STRONG_DEAL_SCORE = 70
POOR_CONDITION = 4
ELEVATED_RISK = 5


def identify_strengths(record: PropertyRecord, *, spread: float, deal_score: int) -> tuple[str, ...]:
    out: list[str] = []
    if spread > STRONG_EQUITY_SPREAD:
        out.append("Strong equity position")
    if record.seller_motivation is not None and record.seller_motivation >= MOTIVATED_SELLER:
        out.append("Highly motivated seller")
    if record.days_on_market is not None and record.days_on_market > STALE_LISTING_DAYS:
        out.append("Extended market time creates negotiation leverage")
    if record.location_score is not None and record.location_score >= GOOD_LOCATION:
        out.append("Desirable location")
    if deal_score >= STRONG_DEAL_SCORE:
        out.append("Above-average deal metrics")
    return tuple(out)


def identify_weaknesses(record: PropertyRecord, *, risk: RiskAssessment) -> tuple[str, ...]:
    """Survey flags and the matching note keywords both count."""
    triggered = {name for name, _ in risk.triggered_factors}
    out: list[str] = []
    if record.condition is not None and record.condition <= POOR_CONDITION:
        out.append("Significant repairs needed")
    if record.title_issues or "legal" in triggered:
        out.append("Title issues present")
    if record.foundation_issues or "structural" in triggered:
        out.append("Foundation concerns")
    if risk.score > ELEVATED_RISK:
        out.append("Elevated overall risk profile")
    return tuple(out)
