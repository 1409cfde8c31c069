"""
API router for dataset operations

Provides endpoints for uploading, listing and deleting sales datasets.
"""

from fastapi import APIRouter, HTTPException, status, File, Form, UploadFile, Response
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool
from typing import Optional
import io
import logging

from app.api.models.dataset import DatasetList, DatasetResponse
from app.config.settings import settings
from app.core.exceptions import CsvValidationError
from app.core.export import template_csv
from app.services.dataset_service import (
    DatasetNotFoundError,
    delete_dataset,
    get_dataset,
    list_datasets,
    upload_dataset,
)

# Create router
router = APIRouter()
logger = logging.getLogger(__name__)


def _decode_upload(contents: bytes) -> str:
    """Decode uploaded bytes as UTF-8, dropping a leading byte order mark."""
    try:
        return contents.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="CSV file must be UTF-8 encoded"
        )


@router.post(
    "/",
    response_model=DatasetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a dataset",
    description="Create a new dataset from an uploaded CSV file of sales"
)
async def create_dataset(
    name: str = Form(...),
    business_id: str = Form(...),
    file: UploadFile = File(...)
):
    """
    Create a new dataset from an uploaded CSV file

    Args:
        name: Display name for the dataset
        business_id: Business that owns the dataset
        file: CSV file with at least date and amount columns

    Returns:
        DatasetResponse: Created dataset information
    """
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are accepted"
        )

    contents = await file.read()
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"CSV file exceeds {settings.MAX_UPLOAD_BYTES} bytes"
        )

    csv_text = _decode_upload(contents)
    logger.info(f"Received upload {file.filename} ({len(contents)} bytes) for business {business_id}")

    try:
        return await run_in_threadpool(upload_dataset, name, business_id, csv_text)
    except CsvValidationError:
        # Reported with its error code by the registered exception handler
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get(
    "/",
    response_model=DatasetList,
    summary="List datasets",
    description="List ready datasets with their row counts, newest first"
)
def get_datasets(business_id: Optional[str] = None):
    """
    List ready datasets

    Args:
        business_id: Restrict to one business

    Returns:
        DatasetList: Datasets with row counts
    """
    datasets = list_datasets(business_id)
    return {"datasets": datasets, "total_count": len(datasets)}


@router.get(
    "/template",
    summary="Download upload template",
    description="CSV with the recognized columns and one example row"
)
def download_template():
    # Declared before /{dataset_id} so "template" is not taken for an id
    return StreamingResponse(
        io.StringIO(template_csv()),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=sales_template.csv"}
    )


@router.get(
    "/{dataset_id}",
    response_model=DatasetResponse,
    summary="Get dataset by ID"
)
def get_dataset_by_id(dataset_id: str):
    try:
        return get_dataset(dataset_id)
    except DatasetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/{dataset_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a dataset",
    description="Delete a dataset together with all of its sales"
)
def remove_dataset(dataset_id: str):
    try:
        delete_dataset(dataset_id)
    except DatasetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
