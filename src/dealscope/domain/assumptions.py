# src/dealscope/domain/assumptions.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dealscope.domain.errors import ConfigurationError

DEFAULT_STRUCTURAL_KEYWORDS = ("foundation", "structural", "crack", "sinkhole", "settling")
DEFAULT_LEGAL_KEYWORDS = ("probate", "lien", "foreclosure")
DEFAULT_LOCATION_KEYWORDS = ("flood zone", "high crime", "busy road", "railroad", "industrial")


class AnalysisConfig(BaseModel):
    """
    Immutable per-run analysis settings.

    Built once per batch from a flat key -> value mapping whose keys are the
    field aliases below (``arvMultiplier``, ``exit.rentEstimate.multiplier``,
    ...). Absent keys take the defaults; unknown keys are ignored.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        allow_inf_nan=False,
    )

    # --- valuation ---
    arv_multiplier: float = Field(default=0.70, alias="arvMultiplier", gt=0, le=1)
    monthly_holding_cost: float = Field(default=1500.0, alias="monthlyHoldingCost", ge=0)
    holding_months: int = Field(default=6, alias="holdingMonths", ge=0, le=120)
    closing_cost_percent: float = Field(default=0.03, alias="closingCostPercent", ge=0, le=1)
    selling_cost_percent: float = Field(default=0.06, alias="sellingCostPercent", ge=0, le=1)
    arv_estimate_multiplier: float = Field(default=1.2, alias="arvEstimateMultiplier", gt=0, le=5)
    repair_per_sqft: float = Field(default=25.0, alias="repairPerSqft", ge=0)

    # --- risk ---
    risk_high_repair_threshold: float = Field(default=50_000.0, alias="risk.highRepairThreshold", ge=0)
    risk_high_repair_points: int = Field(default=2, alias="risk.highRepairPoints", ge=0, le=10)
    risk_structural_points: int = Field(default=3, alias="risk.structuralPoints", ge=0, le=10)
    risk_legal_points: int = Field(default=2, alias="risk.legalPoints", ge=0, le=10)
    risk_location_points: int = Field(default=2, alias="risk.locationPoints", ge=0, le=10)
    risk_age_points: int = Field(default=1, alias="risk.agePoints", ge=0, le=10)
    risk_old_home_year: int = Field(default=1950, alias="risk.oldHomeYear", ge=0)
    risk_structural_keywords: tuple[str, ...] = Field(
        default=DEFAULT_STRUCTURAL_KEYWORDS, alias="risk.structuralKeywords"
    )
    risk_legal_keywords: tuple[str, ...] = Field(default=DEFAULT_LEGAL_KEYWORDS, alias="risk.legalKeywords")
    risk_location_keywords: tuple[str, ...] = Field(
        default=DEFAULT_LOCATION_KEYWORDS, alias="risk.locationKeywords"
    )

    # --- tier thresholds (profit thresholds are in percent units) ---
    hot_min_spread: float = Field(default=25_000.0, alias="hotMinSpread")
    hot_min_profit_pct: float = Field(default=20.0, alias="hotMinProfitPct")
    hot_max_risk: int = Field(default=3, alias="hotMaxRisk", ge=0, le=10)
    solid_min_spread: float = Field(default=15_000.0, alias="solidMinSpread")
    solid_min_profit_pct: float = Field(default=12.0, alias="solidMinProfitPct")
    solid_max_risk: int = Field(default=5, alias="solidMaxRisk", ge=0, le=10)
    marginal_min_spread: float = Field(default=8_000.0, alias="marginalMinSpread")
    marginal_min_profit_pct: float = Field(default=8.0, alias="marginalMinProfitPct")
    marginal_max_risk: int = Field(default=7, alias="marginalMaxRisk", ge=0, le=10)

    # --- exit strategy ---
    exit_rent_multiplier: float = Field(default=0.008, alias="exit.rentEstimate.multiplier", gt=0, le=0.1)
    exit_expense_ratio: float = Field(default=0.40, alias="exit.expenseRatio", ge=0, le=1)
    exit_payment_factor: float = Field(default=0.005, alias="exit.paymentFactor", ge=0, le=0.1)
    exit_wholesale_min_equity_pct: float = Field(default=20.0, alias="exit.wholesale.minEquityPct", ge=0, le=100)
    exit_wholesale_min_profit: float = Field(default=8_000.0, alias="exit.wholesale.minProfit", ge=0)
    exit_appreciation_rate: float = Field(default=0.03, alias="exit.appreciationRate", ge=0, le=0.5)
    exit_sub2_default_rate_pct: float = Field(default=6.0, alias="exit.sub2.defaultRatePct", ge=0, le=30)
    exit_projection_months: int = Field(default=60, alias="exit.projectionMonths", ge=1, le=600)

    @field_validator(
        "arv_multiplier",
        "closing_cost_percent",
        "selling_cost_percent",
        "exit_expense_ratio",
        "exit_appreciation_rate",
        mode="before",
    )
    @classmethod
    def _to_non_negative_fraction(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, str):
            v = v.strip().replace("%", "")
        try:
            f = float(v)
        except (TypeError, ValueError) as err:
            raise ValueError("rate must be numeric or percent-like") from err
        if f > 1.0:
            f = f / 100.0
        if f < 0:
            raise ValueError("rate must be non-negative")
        return f

    @field_validator(
        "risk_structural_keywords",
        "risk_legal_keywords",
        "risk_location_keywords",
        mode="before",
    )
    @classmethod
    def _split_keywords(cls, v: Any) -> Any:
        # "foundation, structural" -> ("foundation", "structural")
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, (list, tuple)):
            words = tuple(str(w).strip().lower() for w in v if str(w).strip())
            if not words:
                raise ValueError("keyword set must not be empty")
            return words
        return v

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None = None) -> "AnalysisConfig":
        """
        Build a config from a flat key -> value mapping.

        Raises ConfigurationError when any value is non-numeric or out of range.
        """
        try:
            return cls.model_validate(dict(mapping or {}))
        except ValidationError as err:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in err.errors()
            )
            raise ConfigurationError(f"invalid analysis configuration: {problems}") from err

    @property
    def holding_costs(self) -> float:
        return self.monthly_holding_cost * self.holding_months
