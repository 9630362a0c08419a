from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Union

from dealscope.adapters.config import config as app_config
from dealscope.adapters.logging_utils import get_logger, log_event
from dealscope.analysis.exit_strategy import ExitProfile, equity_percent, recommend
from dealscope.analysis.finance import estimate_rental_cash_flow, project_holding_period
from dealscope.analysis.risk import compute_risk_score
from dealscope.analysis.scoring import compute_score, letter_grade, success_probability
from dealscope.analysis.valuation import value_property
from dealscope.domain.assumptions import AnalysisConfig
from dealscope.domain.errors import ComputationError, InputError
from dealscope.domain.property import PropertyRecord
from dealscope.domain.rules import (
    build_action_items,
    classify,
    derive_priority,
    identify_strengths,
    identify_weaknesses,
)
from dealscope.domain.underwriting import TIER_ORDER, DealVerdict
from dealscope.services.guardrails import ensure_finite, valuation_warnings
from dealscope.services.validation import record_from_payload, validate_record

logger = get_logger(__name__)

RecordLike = Union[PropertyRecord, Mapping[str, Any]]


# ---------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisSuccess:
    index: int
    property_identifier: str
    verdict: DealVerdict


@dataclass(frozen=True)
class AnalysisFailure:
    index: int
    property_identifier: str | None
    error_type: str      # input | computation | unexpected
    stage: str
    message: str


AnalysisOutcome = Union[AnalysisSuccess, AnalysisFailure]


@dataclass(frozen=True)
class BatchResult:
    succeeded: int
    failed: int
    verdicts: tuple[DealVerdict, ...]
    failures: tuple[AnalysisFailure, ...] = ()
    cancelled: bool = False
    skipped: int = 0

    @property
    def failed_identifiers(self) -> list[str | None]:
        return [f.property_identifier for f in self.failures]

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "cancelled": self.cancelled,
            "verdicts": [v.to_dict() for v in self.verdicts],
            "failures": [
                {
                    "property_identifier": f.property_identifier,
                    "error_type": f.error_type,
                    "stage": f.stage,
                    "message": f.message,
                }
                for f in self.failures
            ],
        }


class CancellationToken:
    """
    Cooperative stop signal for long batches.

    Checked between records only, so every verdict already produced is
    complete. Trips on an explicit cancel() or once the deadline passes.
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout_seconds if timeout_seconds is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False


# ---------------------------------------------------------------------
# Single record
# ---------------------------------------------------------------------

class _Progress:
    __slots__ = ("stage", "identifier")

    def __init__(self) -> None:
        self.stage = "ingest"
        self.identifier: str | None = None


def _resolve_config(config: AnalysisConfig | Mapping[str, Any] | None) -> AnalysisConfig:
    if config is None:
        return AnalysisConfig()
    if isinstance(config, AnalysisConfig):
        return config
    return AnalysisConfig.from_mapping(config)


def _analyze(raw: RecordLike, config: AnalysisConfig, progress: _Progress) -> DealVerdict:
    record = record_from_payload(raw)
    progress.identifier = record.identifier
    ident = record.identifier

    progress.stage = "validate"
    validate_record(record)

    progress.stage = "valuation"
    valuation = ensure_finite(ident, "valuation", value_property(record, config))
    rental = ensure_finite(
        ident, "valuation", estimate_rental_cash_flow(valuation.arv, valuation.asking_price, config)
    )
    valuation = replace(
        valuation,
        estimated_monthly_rent=rental.monthly_rent,
        estimated_cash_flow=rental.monthly_cash_flow,
    )

    progress.stage = "risk"
    risk = compute_risk_score(record, config, repair_estimate=valuation.repair_estimate)

    progress.stage = "classification"
    classification = classify(valuation.spread, valuation.profit_percent, risk.score, config)

    progress.stage = "scoring"
    deal_score = compute_score(
        spread=valuation.spread,
        profit=valuation.profit_potential,
        asking_price=valuation.asking_price,
        risk_score=risk.score,
        arv=valuation.arv,
    )

    progress.stage = "exit_strategy"
    profile = ExitProfile(
        arv=valuation.arv,
        repair_estimate=valuation.repair_estimate,
        equity_percent=equity_percent(valuation.arv, valuation.asking_price),
        market_volume_score=record.market_volume_score,
        velocity_score=record.velocity_score,
        profit_potential=valuation.profit_potential,
        asking_price=valuation.asking_price,
        sqft=float(record.sqft or 0.0),
    )
    exit_plan = ensure_finite(ident, "exit_strategy", recommend(profile, config, rental=rental))

    holding = None
    if any(c.strategy == "SUB2" for c in exit_plan.candidates):
        holding = ensure_finite(
            ident,
            "exit_strategy",
            project_holding_period(
                valuation.arv,
                valuation.asking_price,
                rental,
                config,
                mortgage_balance=record.existing_mortgage_balance,
                mortgage_rate_pct=record.mortgage_rate,
            ),
        )

    progress.stage = "assemble"
    action_items = build_action_items(
        classification,
        mao=valuation.maximum_allowable_offer,
        asking_price=valuation.asking_price,
        triggered_factors=risk.triggered_factors,
        exit_strategy=exit_plan.primary if exit_plan.is_viable else None,
        arv_source=valuation.arv_source,
        repair_source=valuation.repair_source,
    )

    return DealVerdict(
        property_identifier=ident,
        classification=classification,
        deal_score=deal_score,
        valuation=valuation,
        risk=risk,
        recommended_exit_strategy=exit_plan.primary,
        alternate_exit_strategy=exit_plan.secondary,
        action_items=action_items,
        priority=derive_priority(classification, deal_score),
        grade=letter_grade(deal_score),
        success_probability=success_probability(deal_score, risk.score),
        exit_plan=exit_plan,
        address=record.address,
        warnings=tuple(valuation_warnings(record, valuation, rental)),
        strengths=identify_strengths(record, spread=valuation.spread, deal_score=deal_score),
        weaknesses=identify_weaknesses(record, risk=risk),
        holding_projection=holding,
    )


def analyze_one(
    record: RecordLike,
    config: AnalysisConfig | Mapping[str, Any] | None = None,
) -> DealVerdict:
    """
    Analyze one property: validate -> valuation -> risk -> classification
    -> scoring -> exit strategy.

    Raises InputError for unusable records, ComputationError when any stage
    yields a non-finite number, ConfigurationError for a bad config mapping.
    """
    return _analyze(record, _resolve_config(config), _Progress())


def _analyze_safely(index: int, raw: RecordLike, config: AnalysisConfig) -> AnalysisOutcome:
    progress = _Progress()
    try:
        verdict = _analyze(raw, config, progress)
    except InputError as e:
        log_event(
            logger, logging.WARNING, "record_skipped",
            property_identifier=e.identifier or progress.identifier, stage=progress.stage, error=e.message,
        )
        return AnalysisFailure(index, e.identifier or progress.identifier, "input", progress.stage, e.message)
    except ComputationError as e:
        log_event(
            logger, logging.ERROR, "analysis_failed", exc_info=True,
            property_identifier=e.identifier, stage=e.stage, field=e.field, error_type="computation",
        )
        return AnalysisFailure(index, e.identifier, "computation", e.stage, str(e))
    except Exception as e:
        log_event(
            logger, logging.ERROR, "analysis_failed", exc_info=True,
            property_identifier=progress.identifier, stage=progress.stage, error_type=type(e).__name__,
        )
        return AnalysisFailure(index, progress.identifier, "unexpected", progress.stage, f"{type(e).__name__}: {e}")
    return AnalysisSuccess(index, verdict.property_identifier, verdict)


def sort_verdicts(verdicts: Iterable[DealVerdict]) -> list[DealVerdict]:
    """Tier priority first, then deal score descending; stable for ties."""
    return sorted(verdicts, key=lambda v: v.sort_key)


def analyze_batch(
    records: Iterable[RecordLike],
    config: AnalysisConfig | Mapping[str, Any] | None = None,
    *,
    cancel_token: CancellationToken | None = None,
    workers: int = 1,
) -> BatchResult:
    """
    Analyze many records and return a summary instead of raising on
    per-record problems.

    - A bad config is fatal and raises ConfigurationError before any record runs.
    - Input/computation failures are recorded per record and the batch goes on.
    - `workers > 1` fans records out on a thread pool; output order does not
      depend on it.
    - `cancel_token` is checked between records; records not started are
      counted in `skipped`. `cancelled` reports whether the token tripped,
      even if it did so after the last record had started.
    """
    cfg = _resolve_config(config)
    items = list(records)
    t0 = time.monotonic()
    log_event(logger, logging.INFO, "batch_started", records=len(items), workers=workers)

    def _task(index: int, raw: RecordLike) -> AnalysisOutcome | None:
        if cancel_token is not None and cancel_token.cancelled:
            return None
        return _analyze_safely(index, raw, cfg)

    if workers > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=workers) as ex:
            outcomes = list(ex.map(_task, range(len(items)), items))
    else:
        outcomes = []
        for index, raw in enumerate(items):
            outcome = _task(index, raw)
            if outcome is None:
                # stop early; the rest would be skipped anyway
                outcomes.extend([None] * (len(items) - index))
                break
            outcomes.append(outcome)

    successes = [o for o in outcomes if isinstance(o, AnalysisSuccess)]
    failures = [o for o in outcomes if isinstance(o, AnalysisFailure)]
    skipped = sum(1 for o in outcomes if o is None)

    ordered = sorted(
        successes,
        key=lambda s: (TIER_ORDER[s.verdict.classification], -s.verdict.deal_score, s.index),
    )

    result = BatchResult(
        succeeded=len(successes),
        failed=len(failures),
        verdicts=tuple(s.verdict for s in ordered),
        failures=tuple(sorted(failures, key=lambda f: f.index)),
        cancelled=skipped > 0 or (cancel_token is not None and cancel_token.cancelled),
        skipped=skipped,
    )
    log_event(
        logger, logging.INFO, "batch_finished",
        succeeded=result.succeeded, failed=result.failed, skipped=skipped,
        seconds=round(time.monotonic() - t0, 3),
    )
    return result


def analyze_with_defaults(raw_payload: Mapping[str, Any]) -> DealVerdict:
    return analyze_one(raw_payload, app_config.analysis_config())
