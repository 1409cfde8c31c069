"""
Shared test configuration

Points the application at a throwaway SQLite database before any app
module reads its settings, and provides API fixtures.
"""

import os
import tempfile
import uuid

import pytest

_test_dir = tempfile.mkdtemp(prefix="revenue-insights-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_test_dir, 'test.db')}"
os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture(scope="session")
def client():
    """Test client for the API"""
    from fastapi.testclient import TestClient
    from app.api.main import app

    return TestClient(app)


@pytest.fixture
def business_id():
    """Fresh business id so listings only see this test's datasets"""
    return str(uuid.uuid4())


@pytest.fixture
def upload_csv(client, business_id):
    """Upload CSV text as a dataset and return the response"""
    def _upload(csv_text, name="Sales", filename="sales.csv"):
        return client.post(
            "/api/datasets/",
            data={"name": name, "business_id": business_id},
            files={"file": (filename, csv_text.encode("utf-8"), "text/csv")},
        )
    return _upload
