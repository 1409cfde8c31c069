"""
CSV flattenings of dashboard and forecast data for download.
"""

import io
from typing import Sequence

import pandas as pd

from app.core.schemas import DailyPoint, PredictionPoint, RankedRow


def _to_csv(df: pd.DataFrame) -> str:
    output = io.StringIO()
    df.to_csv(output, index=False, lineterminator="\n")
    return output.getvalue()


def daily_revenue_csv(points: Sequence[DailyPoint]) -> str:
    """Render a daily series as ``date,revenue`` rows."""
    df = pd.DataFrame(
        [{"date": p.date.isoformat(), "revenue": p.revenue} for p in points],
        columns=["date", "revenue"],
    )
    return _to_csv(df)


def ranked_rows_csv(rows: Sequence[RankedRow], label: str = "product") -> str:
    """Render a top-N breakdown as ``<label>,revenue`` rows."""
    df = pd.DataFrame(
        [{label: r.name, "revenue": r.revenue} for r in rows],
        columns=[label, "revenue"],
    )
    return _to_csv(df)


def forecast_csv(points: Sequence[PredictionPoint]) -> str:
    """Render a forecast series as ``date,revenue,kind`` rows."""
    df = pd.DataFrame(
        [{"date": p.date.isoformat(), "revenue": p.revenue, "kind": p.kind.value} for p in points],
        columns=["date", "revenue", "kind"],
    )
    return _to_csv(df)


TEMPLATE_COLUMNS = ["date", "amount", "product", "category"]
TEMPLATE_EXAMPLE = {"date": "2024-01-01", "amount": "150.50", "product": "Coffee Blend", "category": "Beverages"}


def template_csv() -> str:
    """Blank upload template: the recognized header plus one example row."""
    return _to_csv(pd.DataFrame([TEMPLATE_EXAMPLE], columns=TEMPLATE_COLUMNS))
