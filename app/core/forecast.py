"""
Short-term revenue forecast using a rolling simple moving average.

Each forecast value is the mean of the previous seven values, and is then
fed back into the window, so the projection flattens out roughly a week
past the last real observation.
"""

import logging
from collections import deque
from datetime import timedelta
from typing import List, Sequence

from app.core.schemas import DailyPoint, PredictionKind, PredictionPoint

# Set up logging
logger = logging.getLogger(__name__)

WINDOW_SIZE = 7


def generate_forecast(
    history: Sequence[DailyPoint],
    horizon_days: int,
    window_size: int = WINDOW_SIZE,
) -> List[PredictionPoint]:
    """
    Project daily revenue ``horizon_days`` past the end of ``history``.

    Args:
        history: Daily revenue points, one per date
        horizon_days: Number of calendar days to project
        window_size: Length of the moving-average window

    Returns:
        List[PredictionPoint]: History echoed as "history" points followed by
        the projected "forecast" points, ascending by date. Empty when the
        history is shorter than the window.
    """
    if isinstance(horizon_days, bool) or not isinstance(horizon_days, int) or horizon_days <= 0:
        raise ValueError(f"horizon_days must be a positive integer, got {horizon_days!r}")

    if len(history) < window_size:
        logger.info(f"Not enough history to forecast: {len(history)} points, need {window_size}")
        return []

    ordered = sorted(history, key=lambda p: p.date)

    result = [
        PredictionPoint(date=p.date, revenue=p.revenue, kind=PredictionKind.HISTORY)
        for p in ordered
    ]

    last_date = ordered[-1].date
    window = deque((p.revenue for p in ordered[-window_size:]), maxlen=window_size)

    for step in range(1, horizon_days + 1):
        value = max(0.0, sum(window) / len(window))
        result.append(
            PredictionPoint(
                date=last_date + timedelta(days=step),
                revenue=value,
                kind=PredictionKind.FORECAST,
            )
        )
        # maxlen drops the oldest value
        window.append(value)

    logger.debug(f"Forecast {horizon_days} days from {last_date.isoformat()}")
    return result
