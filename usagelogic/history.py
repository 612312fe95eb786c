from __future__ import annotations
from typing import Dict, Iterable, List, Optional

import pandas as pd

from . import canon
from .types import ConsumptionRecord, HistoryPoint

RECORD_COLS = ["owner_id", "year", "month", "total_units", "estimated_bill"]


def records_frame(records: Iterable[ConsumptionRecord]) -> pd.DataFrame:
    """Flatten records to ['owner_id', 'year', 'month', 'total_units', 'estimated_bill']."""
    rows = [
        {
            "owner_id": r.owner_id,
            "year": int(r.year),
            "month": int(r.month),
            "total_units": float(r.total_units),
            "estimated_bill": float(r.estimated_bill),
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=RECORD_COLS)


def _latest_first(df: pd.DataFrame, window: Optional[int]) -> pd.DataFrame:
    df = df.sort_values(["year", "month"], ascending=False)
    return df.head(window) if window is not None else df


def user_history(
    records: Iterable[ConsumptionRecord], owner_id: str, window: Optional[int] = 6
) -> List[HistoryPoint]:
    """One owner's monthly totals, most recent first."""
    df = records_frame(records)
    df = _latest_first(df[df["owner_id"] == owner_id], window)
    return [
        HistoryPoint(
            total_units=float(row.total_units),
            month=int(row.month),
            year=int(row.year),
            total_bill=float(row.estimated_bill),
        )
        for row in df.itertuples(index=False)
    ]


def system_history(
    records: Iterable[ConsumptionRecord], window: Optional[int] = 12
) -> List[HistoryPoint]:
    """
    Totals across all owners per (year, month), most recent first, with the
    number of distinct owners that reported in each month.
    """
    df = records_frame(records)
    if df.empty:
        return []
    monthly = df.groupby(["year", "month"], as_index=False).agg(
        total_units=("total_units", "sum"),
        total_bill=("estimated_bill", "sum"),
        user_count=("owner_id", "nunique"),
    )
    monthly = _latest_first(monthly, window)
    return [
        HistoryPoint(
            total_units=round(float(row.total_units), canon.ROUND_DP),
            month=int(row.month),
            year=int(row.year),
            total_bill=round(float(row.total_bill), canon.ROUND_DP),
            user_count=int(row.user_count),
        )
        for row in monthly.itertuples(index=False)
    ]


def usage_statistics(records: Iterable[ConsumptionRecord]) -> Dict[str, float]:
    df = records_frame(records)
    n = len(df)
    total_units = float(df["total_units"].sum()) if n else 0.0
    total_bill = float(df["estimated_bill"].sum()) if n else 0.0
    return {
        "total_records": n,
        "total_consumption": round(total_units, canon.ROUND_DP),
        "total_bill": round(total_bill, canon.ROUND_DP),
        "average_consumption": round(total_units / n, canon.ROUND_DP) if n else 0.0,
    }
