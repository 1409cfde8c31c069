"""
Service layer for dashboard and forecast queries

Loads a dataset's sales from the database and hands them to the pure
aggregation and forecast functions in app.core.
"""

from typing import Dict, List, Optional, Sequence, Tuple, Union
import logging

from app.config.settings import settings
from app.core.analytics import aggregate, label_key, range_cutoff, rank, summary_from_daily
from app.core.forecast import generate_forecast
from app.core.schemas import DailyPoint, DashboardSummary, PredictionPoint, RangeOption, SaleRecord
from app.db.repository import DatasetRepository, SaleRepository
from app.db.session import get_db_session
from app.services.dataset_service import DatasetNotFoundError

# Configure logging
logger = logging.getLogger(__name__)

dataset_repo = DatasetRepository()
sale_repo = SaleRepository()


def _require_ready(session, dataset_id: str) -> None:
    if dataset_repo.get_ready(session, dataset_id) is None:
        raise DatasetNotFoundError(dataset_id)


def _fold_labels(rows: Sequence[Tuple[Optional[str], float]]) -> Dict[str, float]:
    """Merge blank and missing labels into the Unspecified key, keeping row order."""
    folded: Dict[str, float] = {}
    for name, revenue in rows:
        key = label_key(name)
        folded[key] = folded.get(key, 0.0) + revenue
    return folded


def get_dashboard(
    dataset_id: str,
    range_option: Union[RangeOption, str] = RangeOption.ALL,
) -> Optional[DashboardSummary]:
    """
    Dashboard summary computed from the dataset's raw sale rows

    Args:
        dataset_id: Dataset to summarize
        range_option: "30", "90" or "all"

    Returns:
        Optional[DashboardSummary]: None when the range holds no sales
    """
    with get_db_session() as session:
        _require_ready(session, dataset_id)
        records = [SaleRecord.model_validate(sale) for sale in sale_repo.list_for_dataset(session, dataset_id)]

    logger.info(f"Loaded {len(records)} sales for dashboard of dataset {dataset_id}")
    return aggregate(records, range_option, top_n=settings.TOP_N)


def get_dashboard_from_store(
    dataset_id: str,
    range_option: Union[RangeOption, str] = RangeOption.ALL,
) -> Optional[DashboardSummary]:
    """
    Dashboard summary computed by the database

    Sums per date, per product and per category are grouped in SQL; only
    the final assembly happens in Python. The window is anchored on the
    dataset's latest sale date, as in get_dashboard.
    """
    with get_db_session() as session:
        _require_ready(session, dataset_id)

        latest = sale_repo.latest_date(session, dataset_id)
        if latest is None:
            return None
        start = range_cutoff(latest, range_option)

        daily = [
            DailyPoint(date=day, revenue=revenue)
            for day, revenue in sale_repo.daily_revenue(session, dataset_id, start=start)
        ]
        products = _fold_labels(sale_repo.revenue_by_label(session, dataset_id, "product", start=start))
        categories = _fold_labels(sale_repo.revenue_by_label(session, dataset_id, "category", start=start))
        _, order_count = sale_repo.totals(session, dataset_id, start=start)

    return summary_from_daily(
        daily,
        rank(products, settings.TOP_N),
        order_count,
        categories=rank(categories, settings.TOP_N),
    )


def get_history(dataset_id: str) -> List[DailyPoint]:
    """Most recent daily revenue points of a dataset, ascending"""
    with get_db_session() as session:
        _require_ready(session, dataset_id)
        rows = sale_repo.daily_revenue(session, dataset_id, limit=settings.FORECAST_HISTORY_LIMIT)
    return [DailyPoint(date=day, revenue=revenue) for day, revenue in rows]


def get_forecast(dataset_id: str, horizon_days: int) -> List[PredictionPoint]:
    """
    Revenue forecast for a dataset

    Args:
        dataset_id: Dataset to project
        horizon_days: Number of days to project

    Returns:
        List[PredictionPoint]: Empty when there is not enough history
    """
    history = get_history(dataset_id)
    points = generate_forecast(history, horizon_days, window_size=settings.FORECAST_WINDOW)
    if not points:
        logger.info(f"Dataset {dataset_id} has {len(history)} days of history, not enough to forecast")
    return points
