"""
API router for dashboard summaries

Provides endpoints for a dataset's KPIs, daily chart and top-N
breakdowns, and for downloading those tables as CSV.
"""

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import StreamingResponse
import io
import logging

from app.api.models.analytics import DashboardResponse, ExportKind, SummarySource
from app.core.export import daily_revenue_csv, ranked_rows_csv
from app.core.schemas import RangeOption
from app.services.analytics_service import get_dashboard, get_dashboard_from_store
from app.services.dataset_service import DatasetNotFoundError

# Create router
router = APIRouter()
logger = logging.getLogger(__name__)


def _load_summary(dataset_id: str, range_option: RangeOption, source: SummarySource):
    try:
        if source == SummarySource.STORE:
            return get_dashboard_from_store(dataset_id, range_option)
        return get_dashboard(dataset_id, range_option)
    except DatasetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/{dataset_id}",
    response_model=DashboardResponse,
    summary="Get dashboard summary",
    description="KPIs, daily revenue and top products and categories for a dataset"
)
def get_dashboard_summary(
    dataset_id: str,
    range_option: RangeOption = Query(RangeOption.ALL, alias="range"),
    source: SummarySource = Query(SummarySource.RECORDS),
):
    """
    Get the dashboard summary of a dataset

    Args:
        dataset_id: Dataset to summarize
        range_option: Trailing window, "30", "90" or "all"
        source: Aggregate the raw records in Python or group in the database

    Returns:
        DashboardResponse: Summary, null when the range holds no sales
    """
    summary = _load_summary(dataset_id, range_option, source)
    return {"dataset_id": dataset_id, "range": range_option.value, "summary": summary}


@router.get(
    "/{dataset_id}/export/{kind}",
    summary="Export dashboard table",
    description="Download the daily series or a top-N breakdown as CSV"
)
def export_dashboard(
    dataset_id: str,
    kind: ExportKind,
    range_option: RangeOption = Query(RangeOption.ALL, alias="range"),
):
    summary = _load_summary(dataset_id, range_option, SummarySource.RECORDS)

    if kind == ExportKind.DAILY:
        content = daily_revenue_csv(summary.chart_data if summary else [])
    elif kind == ExportKind.PRODUCTS:
        content = ranked_rows_csv(summary.top_products if summary else [], label="product")
    else:
        content = ranked_rows_csv(summary.categories if summary else [], label="category")

    filename = f"{dataset_id}_{kind.value}_{range_option.value}.csv"
    logger.info(f"Exporting {kind.value} table of dataset {dataset_id}")

    return StreamingResponse(
        io.StringIO(content),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
