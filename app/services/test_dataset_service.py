"""
Tests for the dataset upload service
"""

import pytest

from app.db.session import get_db_session, init_db
from app.models.models import Dataset
from app.services import dataset_service
from app.services.dataset_service import get_dataset, list_datasets, upload_dataset
from app.utils.retry_helper import RetryError


def five_day_csv():
    rows = [f"2024-01-0{day},{day * 10}" for day in range(1, 6)]
    return "date,amount\n" + "\n".join(rows) + "\n"


@pytest.fixture(autouse=True)
def tables():
    init_db()


def count_datasets(business_id):
    with get_db_session() as session:
        return session.query(Dataset).filter(Dataset.business_id == business_id).count()


def test_upload_inserts_in_batches(monkeypatch, business_id):
    """Test that rows beyond one batch are all stored"""
    monkeypatch.setattr(dataset_service.settings, "INSERT_BATCH_SIZE", 2)
    batch_sizes = []
    original_insert = dataset_service.insert_batch

    def counting_insert(dataset_id, batch):
        batch_sizes.append(len(batch))
        return original_insert(dataset_id, batch)

    monkeypatch.setattr(dataset_service, "insert_batch", counting_insert)

    result = upload_dataset("Batched", business_id, five_day_csv())

    assert result["rows_count"] == 5
    assert result["status"] == "ready"
    assert batch_sizes == [2, 2, 1]
    assert get_dataset(result["id"])["rows_count"] == 5


def test_failed_insert_discards_dataset(monkeypatch, business_id):
    """Test that a failed batch removes the dataset and its rows"""
    calls = []
    original_insert = dataset_service.insert_batch

    def failing_insert(dataset_id, batch):
        calls.append(dataset_id)
        if len(calls) == 2:
            raise RetryError("insert_batch", 3)
        return original_insert(dataset_id, batch)

    monkeypatch.setattr(dataset_service.settings, "INSERT_BATCH_SIZE", 2)
    monkeypatch.setattr(dataset_service, "insert_batch", failing_insert)

    with pytest.raises(RetryError):
        upload_dataset("Broken", business_id, five_day_csv())

    assert count_datasets(business_id) == 0
    assert list_datasets(business_id) == []
    with pytest.raises(dataset_service.DatasetNotFoundError):
        get_dataset(calls[0])


def test_rejected_file_discards_dataset(business_id):
    with pytest.raises(ValueError):
        upload_dataset("Empty", business_id, "date,amount\n")

    assert count_datasets(business_id) == 0


def test_blank_name_creates_nothing(business_id):
    with pytest.raises(ValueError, match="dataset name"):
        upload_dataset("  ", business_id, five_day_csv())

    assert count_datasets(business_id) == 0
