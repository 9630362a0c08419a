from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Optional, Tuple

Classification = Literal["HOT", "SOLID", "MARGINAL", "PASS"]
Priority = Literal["HIGH", "MEDIUM", "LOW"]

# ascending = more urgent
TIER_ORDER: dict[str, int] = {"HOT": 0, "SOLID": 1, "MARGINAL": 2, "PASS": 3}

ExitStrategy = Literal[
    "WHOLESALE",
    "WHOLETAIL",
    "SUB2",
    "WRAPAROUND",
    "SHORT_TERM_RENTAL",
    "MID_TERM_RENTAL",
    "LONG_TERM_RENTAL",
]

# Terminal advisor outcome; never one of the catalogue strategies.
NO_VIABLE_STRATEGY = "NO_VIABLE_STRATEGY"

ArvSource = Literal["input", "comps", "asking_price"]
RepairSource = Literal["input", "itemized", "sqft"]


@dataclass(frozen=True)
class RepairLineItem:
    item: str
    cost: float
    note: str = ""


@dataclass(frozen=True)
class RepairEstimate:
    """Itemized rehab budget built from a condition survey."""

    total: float
    per_sqft: float
    confidence: str                  # high | medium | low
    line_items: Tuple[RepairLineItem, ...] = ()


@dataclass(frozen=True)
class ValuationResult:
    arv: float                       # value used (explicit or estimated)
    repair_estimate: float           # value used (explicit or estimated)
    arv_source: ArvSource
    repair_source: RepairSource
    asking_price: float
    maximum_allowable_offer: float   # never negative
    spread: float                    # MAO - asking price
    profit_potential: float          # signed
    profit_percent: float            # 0 when asking price <= 0
    estimated_monthly_rent: Optional[float] = None
    estimated_cash_flow: Optional[float] = None
    repair_plan: Optional[RepairEstimate] = None     # set when repair_source == "itemized"


@dataclass(frozen=True)
class RiskAssessment:
    score: int                                   # 0..10, 0 = lowest risk
    triggered_factors: Tuple[Tuple[str, int], ...] = ()


@dataclass(frozen=True)
class RentalEstimate:
    monthly_rent: float
    monthly_expenses: float
    monthly_payment: float
    monthly_cash_flow: float


@dataclass(frozen=True)
class HoldingProjection:
    """Buy-and-hold outlook for a subject-to takeover over `months`."""

    months: int
    monthly_cash_flow: float
    break_even_months: Optional[int]     # 0 = cash-flow positive from day one; None = never
    cash_flow_total: float
    appreciation: float
    equity_buildup: float


@dataclass(frozen=True)
class StrategyCandidate:
    strategy: str
    score: float
    expected_profit: float
    timeline: str


@dataclass(frozen=True)
class ExitRecommendation:
    primary: str                     # catalogue strategy or NO_VIABLE_STRATEGY
    secondary: Optional[str]
    reason: str
    timeline: str
    expected_profit: float
    candidates: Tuple[StrategyCandidate, ...] = ()

    @property
    def is_viable(self) -> bool:
        return self.primary != NO_VIABLE_STRATEGY


@dataclass(frozen=True)
class DealVerdict:
    property_identifier: str
    classification: Classification
    deal_score: int
    valuation: ValuationResult
    risk: RiskAssessment
    recommended_exit_strategy: Optional[str]
    alternate_exit_strategy: Optional[str]
    action_items: Tuple[str, ...]
    priority: Priority

    # Presentation extras
    grade: str = "F"
    success_probability: int = 5
    exit_plan: Optional[ExitRecommendation] = None
    address: str = ""
    warnings: Tuple[str, ...] = field(default_factory=tuple)
    strengths: Tuple[str, ...] = field(default_factory=tuple)
    weaknesses: Tuple[str, ...] = field(default_factory=tuple)
    holding_projection: Optional[HoldingProjection] = None   # only when SUB2 is a candidate

    @property
    def sort_key(self) -> tuple[int, int]:
        return TIER_ORDER[self.classification], -self.deal_score

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
