"""
API data models for dataset operations
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class DatasetResponse(BaseModel):
    """Model for dataset response"""
    id: str = Field(..., description="Unique identifier for the dataset")
    business_id: str = Field(..., description="Business that owns the dataset")
    name: str = Field(..., description="Display name of the dataset")
    status: str = Field(..., description="Upload status (processing/ready)")
    created_at: Optional[str] = Field(None, description="Timestamp when the dataset was created")
    rows_count: Optional[int] = Field(None, description="Number of stored sale rows")


class DatasetList(BaseModel):
    """Model for dataset list response"""
    datasets: List[DatasetResponse] = Field(..., description="List of datasets")
    total_count: int = Field(..., description="Number of datasets returned")
