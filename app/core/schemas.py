"""
Value types shared by the ingestion, aggregation and forecast components.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import date
from enum import Enum
import math


class RangeOption(str, Enum):
    """Trailing window applied before aggregation"""
    LAST_30 = "30"
    LAST_90 = "90"
    ALL = "all"


class PredictionKind(str, Enum):
    """Origin of a point in a forecast series"""
    HISTORY = "history"
    FORECAST = "forecast"


class SaleRecord(BaseModel):
    """One normalized transaction line, ready for bulk insertion"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    dataset_id: str
    date: date
    amount: float = Field(ge=0)
    product: Optional[str] = None
    category: Optional[str] = None
    customer_id: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if not math.isfinite(v):
            raise ValueError('Amount must be a finite number')
        return v


class DailyPoint(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    revenue: float


class RankedRow(BaseModel):
    name: str
    revenue: float


class Kpis(BaseModel):
    total_revenue: float
    order_count: int
    avg_ticket: float
    top_product: Optional[str] = None
    top_product_share: float = 0.0


class DashboardSummary(BaseModel):
    kpis: Kpis
    chart_data: List[DailyPoint] = []
    top_products: List[RankedRow] = []
    categories: List[RankedRow] = []


class PredictionPoint(BaseModel):
    date: date
    revenue: float
    kind: PredictionKind
