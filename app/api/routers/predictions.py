"""
API router for revenue forecasts
"""

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import StreamingResponse
import io
import logging

from app.api.models.analytics import ForecastResponse
from app.core.export import forecast_csv
from app.services.analytics_service import get_forecast
from app.services.dataset_service import DatasetNotFoundError

# Create router
router = APIRouter()
logger = logging.getLogger(__name__)

HORIZON_QUERY = Query(14, ge=1, le=365, description="Number of days to project")


def _forecast(dataset_id: str, horizon: int):
    try:
        return get_forecast(dataset_id, horizon)
    except DatasetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/{dataset_id}",
    response_model=ForecastResponse,
    summary="Get revenue forecast",
    description="Daily history followed by a moving-average projection"
)
def get_predictions(dataset_id: str, horizon: int = HORIZON_QUERY):
    """
    Get the revenue forecast of a dataset

    Args:
        dataset_id: Dataset to project
        horizon: Number of days to project

    Returns:
        ForecastResponse: Points, empty with sufficient_history false when
        the dataset has fewer than seven days of sales
    """
    points = _forecast(dataset_id, horizon)
    return {
        "dataset_id": dataset_id,
        "horizon": horizon,
        "sufficient_history": bool(points),
        "points": points,
    }


@router.get(
    "/{dataset_id}/export",
    summary="Export revenue forecast",
    description="Download the forecast series as CSV"
)
def export_predictions(dataset_id: str, horizon: int = HORIZON_QUERY):
    points = _forecast(dataset_id, horizon)
    filename = f"{dataset_id}_forecast_{horizon}d.csv"

    return StreamingResponse(
        io.StringIO(forecast_csv(points)),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
