# src/dealscope/analysis/rehab_estimator.py
from __future__ import annotations

from dataclasses import dataclass, field

from dealscope.domain.property import PropertyRecord
from dealscope.domain.underwriting import RepairEstimate, RepairLineItem


@dataclass
class RehabEstimatorConfig:
    """
    Condition-driven rehab model for flip underwriting.

    The base per-sqft rate scales linearly with condition (1 = gut, 10 = turnkey):

        rate = base_cost_per_sqft + (10 - condition) / 10 * condition_cost_range

    System line items are added on top, then a flat contingency.
    """
    base_cost_per_sqft: float = 15.0
    condition_cost_range: float = 35.0
    default_condition: float = 5.0

    roof_max_age: float = 15.0
    roof_cost_per_sqft: float = 4.0

    hvac_max_age: float = 12.0
    hvac_cost: float = 5_000.0
    hvac_large_home_sqft: float = 2_000.0
    hvac_large_home_extra: float = 2_000.0

    # plumbing / electrical below this rating need work
    poor_system_rating: float = 5.0
    plumbing_base: float = 3_000.0
    plumbing_per_sqft: float = 2.0
    electrical_base: float = 2_500.0
    electrical_per_sqft: float = 3.0

    foundation_cost: float = 8_000.0

    cosmetic_costs: dict[str, float] = field(
        default_factory=lambda: {"light": 3_000.0, "medium": 8_000.0, "heavy": 15_000.0}
    )
    default_cosmetic: str = "medium"

    contingency_rate: float = 0.10


class RehabEstimator:
    """
    Itemized rehab budget from a record's condition survey.

    Inputs (all optional except sqft):
      - condition, roof_age, hvac_age
      - plumbing_condition, electrical_condition
      - foundation_issues, cosmetic_needs, inspection_report

    Output:
      - RepairEstimate with one line item per cost driver and a contingency line.
    """

    def __init__(self, cfg: RehabEstimatorConfig | None = None) -> None:
        self.cfg = cfg or RehabEstimatorConfig()

    def _confidence(self, record: PropertyRecord) -> str:
        if record.inspection_report:
            return "high"
        if record.condition is None:
            return "low"
        return "medium"

    def estimate(self, record: PropertyRecord) -> RepairEstimate:
        cfg = self.cfg
        sqft = float(record.sqft or 0.0)
        items: list[RepairLineItem] = []

        condition = record.condition if record.condition is not None else cfg.default_condition
        rate = cfg.base_cost_per_sqft + (10.0 - condition) / 10.0 * cfg.condition_cost_range
        items.append(RepairLineItem("Base Repairs", round(sqft * rate, 2), f"{rate:.2f}/sqft at condition {condition:g}"))

        if record.roof_age is not None and record.roof_age > cfg.roof_max_age:
            items.append(
                RepairLineItem("Roof Replacement", round(sqft * cfg.roof_cost_per_sqft, 2), f"roof is {record.roof_age:g} years old")
            )

        if record.hvac_age is not None and record.hvac_age > cfg.hvac_max_age:
            cost = cfg.hvac_cost
            if sqft > cfg.hvac_large_home_sqft:
                cost += cfg.hvac_large_home_extra
            items.append(RepairLineItem("HVAC Replacement", cost, f"system is {record.hvac_age:g} years old"))

        if record.plumbing_condition is not None and record.plumbing_condition < cfg.poor_system_rating:
            cost = cfg.plumbing_base + sqft * cfg.plumbing_per_sqft
            items.append(RepairLineItem("Plumbing Repairs", round(cost, 2), f"rated {record.plumbing_condition:g}/10"))

        if record.electrical_condition is not None and record.electrical_condition < cfg.poor_system_rating:
            cost = cfg.electrical_base + sqft * cfg.electrical_per_sqft
            items.append(RepairLineItem("Electrical Updates", round(cost, 2), f"rated {record.electrical_condition:g}/10"))

        if record.foundation_issues:
            items.append(RepairLineItem("Foundation Repair", cfg.foundation_cost, "reported foundation issues"))

        level = record.cosmetic_needs or cfg.default_cosmetic
        items.append(RepairLineItem("Cosmetic Updates", cfg.cosmetic_costs[level], f"{level} cosmetic work"))

        subtotal = sum(i.cost for i in items)
        contingency = round(subtotal * cfg.contingency_rate, 2)
        items.append(RepairLineItem(f"Contingency ({cfg.contingency_rate:.0%})", contingency))

        total = round(subtotal + contingency, 2)
        per_sqft = float(round(total / sqft)) if sqft > 0 else 0.0

        return RepairEstimate(
            total=total,
            per_sqft=per_sqft,
            confidence=self._confidence(record),
            line_items=tuple(items),
        )
