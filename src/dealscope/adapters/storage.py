from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from dealscope.domain.underwriting import DealVerdict


def read_df(path: str) -> pd.DataFrame:
    if path.endswith(".parquet"):
        return pd.read_parquet(path)
    if path.endswith(".json"):
        return pd.read_json(path, orient="records", dtype=False)
    # keep ZIPs and ids as text ("02134" stays "02134")
    header = pd.read_csv(path, nrows=0).columns
    text_cols = {c: str for c in ("zipcode", "zip", "identifier", "id") if c in header}
    return pd.read_csv(path, dtype=text_cols)


def write_df(df: pd.DataFrame, path: str):
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    if path.endswith(".parquet"):
        df.to_parquet(path, index=False)
    elif path.endswith(".json"):
        df.to_json(path, orient="records", indent=2)
    else:
        df.to_csv(path, index=False)


def read_records(path: str) -> list[dict[str, Any]]:
    """
    Load raw property rows as plain dicts (one per listing).

    Empty cells come back as None. Cells are passed through untouched; a
    `comps` column holding JSON text is decoded per row at ingestion, so one
    bad cell fails only its own row.
    """
    df = read_df(path)
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def verdicts_to_df(verdicts: Iterable[DealVerdict]) -> pd.DataFrame:
    """Flatten verdicts into one reporting row each, in the given order."""
    rows = []
    for rank, v in enumerate(verdicts, start=1):
        val = v.valuation
        rows.append(
            {
                "rank": rank,
                "property_identifier": v.property_identifier,
                "address": v.address,
                "classification": v.classification,
                "priority": v.priority,
                "deal_score": v.deal_score,
                "grade": v.grade,
                "success_probability": v.success_probability,
                "risk_score": v.risk.score,
                "risk_factors": ";".join(name for name, _ in v.risk.triggered_factors),
                "asking_price": val.asking_price,
                "arv": val.arv,
                "repair_estimate": val.repair_estimate,
                "mao": round(val.maximum_allowable_offer, 2),
                "spread": round(val.spread, 2),
                "profit_potential": round(val.profit_potential, 2),
                "profit_percent": round(val.profit_percent, 2),
                "estimated_monthly_rent": val.estimated_monthly_rent,
                "estimated_cash_flow": val.estimated_cash_flow,
                "recommended_exit_strategy": v.recommended_exit_strategy,
                "alternate_exit_strategy": v.alternate_exit_strategy,
                "action_items": " | ".join(v.action_items),
                "strengths": " | ".join(v.strengths),
                "weaknesses": " | ".join(v.weaknesses),
            }
        )
    return pd.DataFrame(rows)


def write_verdicts(verdicts: Iterable[DealVerdict], path: str) -> int:
    df = verdicts_to_df(verdicts)
    write_df(df, path)
    return len(df)
