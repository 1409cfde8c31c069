"""
Service layer for dataset operations

Creates datasets from uploaded CSV text, lists and deletes them.
"""

from typing import List, Dict, Any, Optional, Sequence
import logging

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from app.config.settings import settings
from app.core.csv_parser import parse_and_validate
from app.core.schemas import SaleRecord
from app.db.repository import DatasetRepository, SaleRepository
from app.db.session import get_db_session
from app.models.models import DatasetStatus
from app.utils.retry_helper import with_retry

# Configure logging
logger = logging.getLogger(__name__)

dataset_repo = DatasetRepository()
sale_repo = SaleRepository()


class DatasetNotFoundError(LookupError):
    """Raised when a dataset does not exist or is not ready yet"""

    def __init__(self, dataset_id: str):
        super().__init__(f"Dataset {dataset_id} not found")
        self.dataset_id = dataset_id


def _dataset_dict(dataset, rows_count: Optional[int] = None) -> Dict[str, Any]:
    return {
        "id": dataset.id,
        "business_id": dataset.business_id,
        "name": dataset.name,
        "status": dataset.status,
        "created_at": dataset.created_at.isoformat() if dataset.created_at else None,
        "rows_count": rows_count,
    }


@with_retry(
    max_attempts=settings.INSERT_MAX_ATTEMPTS,
    exceptions_to_retry=(OperationalError,),
)
def insert_batch(dataset_id: str, batch: Sequence[SaleRecord]) -> int:
    """
    Insert one batch of sale records in its own transaction.

    Retried on transient database errors; a failed attempt is rolled back
    so a retry never duplicates rows.
    """
    with get_db_session() as session:
        return sale_repo.bulk_insert(session, [record.model_dump() for record in batch])


def _discard_dataset(dataset_id: str) -> None:
    """Remove a dataset whose upload failed, together with any inserted rows."""
    try:
        with get_db_session() as session:
            dataset_repo.delete(session, dataset_id)
        logger.info(f"Discarded dataset {dataset_id} after failed upload")
    except SQLAlchemyError as se:
        # If even this fails, just log it
        logger.error(f"Failed to discard dataset {dataset_id}: {str(se)}")


def upload_dataset(name: str, business_id: str, csv_text: str) -> Dict[str, Any]:
    """
    Create a dataset from uploaded CSV text.

    The dataset stays in the "processing" state, hidden from listings and
    analytics, until every row is stored. Any failure deletes it again.

    Args:
        name: Display name for the dataset
        business_id: Owning business
        csv_text: Raw content of the uploaded file

    Returns:
        Dict: Created dataset with its row count

    Raises:
        ValueError: Blank name or business id
        CsvValidationError: The file was rejected during parsing
        RetryError: A batch could not be stored
    """
    if not name or not name.strip():
        raise ValueError("Please provide a dataset name")
    if not business_id or not business_id.strip():
        raise ValueError("No workspace found for this upload")

    with get_db_session() as session:
        dataset = dataset_repo.create(session, {
            "name": name.strip(),
            "business_id": business_id.strip(),
            "status": DatasetStatus.PROCESSING,
        })
        dataset_id = dataset.id

    logger.info(f"Created dataset {dataset_id} for business {business_id}")

    try:
        records = parse_and_validate(csv_text, dataset_id)

        batch_size = settings.INSERT_BATCH_SIZE
        inserted = 0
        for start in range(0, len(records), batch_size):
            inserted += insert_batch(dataset_id, records[start:start + batch_size])

        with get_db_session() as session:
            dataset_repo.mark_ready(session, dataset_id)
            dataset = dataset_repo.get(session, dataset_id)
            result = _dataset_dict(dataset, rows_count=inserted)

    except Exception as e:
        logger.error(f"Upload of dataset {dataset_id} failed: {str(e)}")
        _discard_dataset(dataset_id)
        raise

    logger.info(f"Dataset {dataset_id} ready with {inserted} rows")
    return result


def list_datasets(business_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    List ready datasets with their row counts, newest first

    Args:
        business_id: Restrict to one business when given

    Returns:
        List[Dict]: Dataset information
    """
    with get_db_session() as session:
        return [
            _dataset_dict(dataset, rows_count=count)
            for dataset, count in dataset_repo.list_with_counts(session, business_id)
        ]


def get_dataset(dataset_id: str) -> Dict[str, Any]:
    """
    Get a ready dataset with its row count

    Raises:
        DatasetNotFoundError: Unknown or still processing
    """
    with get_db_session() as session:
        dataset = dataset_repo.get_ready(session, dataset_id)
        if not dataset:
            raise DatasetNotFoundError(dataset_id)
        _, count = sale_repo.totals(session, dataset_id)
        return _dataset_dict(dataset, rows_count=count)


def delete_dataset(dataset_id: str) -> None:
    """
    Delete a dataset and its sales

    Raises:
        DatasetNotFoundError: Unknown dataset
    """
    with get_db_session() as session:
        if not dataset_repo.delete(session, dataset_id):
            raise DatasetNotFoundError(dataset_id)
    logger.info(f"Deleted dataset {dataset_id}")
