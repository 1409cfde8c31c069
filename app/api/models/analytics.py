"""
API data models for dashboard and forecast responses
"""

from pydantic import BaseModel, Field
from enum import Enum
from typing import List, Optional

from app.core.schemas import DashboardSummary, PredictionPoint


class SummarySource(str, Enum):
    """Where the dashboard sums are computed"""
    RECORDS = "records"
    STORE = "store"


class ExportKind(str, Enum):
    """Dashboard tables available as CSV"""
    DAILY = "daily"
    PRODUCTS = "products"
    CATEGORIES = "categories"


class DashboardResponse(BaseModel):
    """Model for dashboard response"""
    dataset_id: str = Field(..., description="Dataset the summary belongs to")
    range: str = Field(..., description="Applied range (30, 90 or all)")
    summary: Optional[DashboardSummary] = Field(None, description="Summary, or null when the range holds no sales")


class ForecastResponse(BaseModel):
    """Model for forecast response"""
    dataset_id: str = Field(..., description="Dataset the forecast belongs to")
    horizon: int = Field(..., description="Number of projected days")
    sufficient_history: bool = Field(..., description="False when fewer than 7 days of history exist")
    points: List[PredictionPoint] = Field(..., description="History followed by projected points")
