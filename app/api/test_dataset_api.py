"""
Tests for dataset API endpoints
"""

import pytest

SAMPLE_CSV = (
    "date,amount,product,category\n"
    "2024-01-01,$1,000.00,Widget,Tools\n"
    "2024-01-01,50,Gadget,Toys\n"
    ",20,Widget,Tools\n"
)


@pytest.fixture
def dataset(upload_csv):
    """Create a dataset for testing"""
    response = upload_csv(SAMPLE_CSV)
    assert response.status_code == 201
    return response.json()


def test_upload_dataset(dataset, business_id):
    """Test creating a dataset from a CSV file"""
    assert dataset["name"] == "Sales"
    assert dataset["business_id"] == business_id
    assert dataset["status"] == "ready"
    assert dataset["rows_count"] == 2
    assert dataset["id"]
    assert dataset["created_at"]


def test_list_datasets(client, dataset, business_id):
    """Test listing datasets of a business"""
    response = client.get("/api/datasets/", params={"business_id": business_id})
    assert response.status_code == 200

    data = response.json()
    assert data["total_count"] == 1
    assert data["datasets"][0]["id"] == dataset["id"]
    assert data["datasets"][0]["rows_count"] == 2


def test_list_datasets_filters_by_business(client, dataset):
    response = client.get("/api/datasets/", params={"business_id": "someone-else"})
    ids = [d["id"] for d in response.json()["datasets"]]
    assert dataset["id"] not in ids


def test_get_dataset(client, dataset):
    """Test getting a dataset by ID"""
    response = client.get(f"/api/datasets/{dataset['id']}")
    assert response.status_code == 200
    assert response.json()["rows_count"] == 2


def test_get_unknown_dataset(client):
    response = client.get("/api/datasets/does-not-exist")
    assert response.status_code == 404

    body = response.json()
    assert body["status"] == 404
    assert body["type"] == "http_error"
    assert "error_id" in body


def test_delete_dataset(client, dataset):
    """Test deleting a dataset and its sales"""
    response = client.delete(f"/api/datasets/{dataset['id']}")
    assert response.status_code == 204

    assert client.get(f"/api/datasets/{dataset['id']}").status_code == 404
    assert client.get(f"/api/dashboard/{dataset['id']}").status_code == 404
    assert client.delete(f"/api/datasets/{dataset['id']}").status_code == 404


def test_upload_strips_byte_order_mark(upload_csv):
    response = upload_csv("\ufeffDate,Amount\n2024-01-01,10\n")
    assert response.status_code == 201
    assert response.json()["rows_count"] == 1


def test_upload_missing_columns(client, upload_csv, business_id):
    """Test that a rejected file leaves no dataset behind"""
    response = upload_csv("when,price\n2024-01-01,5\n")
    assert response.status_code == 400

    body = response.json()
    assert body["type"] == "csv_validation_error"
    assert body["error_code"] == "missing_columns"
    assert body["missing_columns"] == ["date", "amount"]

    listing = client.get("/api/datasets/", params={"business_id": business_id}).json()
    assert listing["total_count"] == 0


@pytest.mark.parametrize("csv_text,error_code", [
    ("date,amount\n", "empty_file"),
    ("date,amount\n2024-01-01,abc\n", "no_valid_rows"),
])
def test_upload_rejected_files(upload_csv, csv_text, error_code):
    response = upload_csv(csv_text)
    assert response.status_code == 400
    assert response.json()["error_code"] == error_code


def test_upload_requires_csv_extension(upload_csv):
    response = upload_csv(SAMPLE_CSV, filename="sales.xlsx")
    assert response.status_code == 400
    assert "CSV" in response.json()["message"]


def test_upload_requires_name(upload_csv):
    response = upload_csv(SAMPLE_CSV, name="   ")
    assert response.status_code == 400
    assert response.json()["message"] == "Please provide a dataset name"


def test_upload_rejects_non_utf8(client, business_id):
    response = client.post(
        "/api/datasets/",
        data={"name": "Sales", "business_id": business_id},
        files={"file": ("sales.csv", b"date,amount\n2024-01-01,\xff\xfe\n", "text/csv")},
    )
    assert response.status_code == 400


def test_upload_without_file(client, business_id):
    response = client.post("/api/datasets/", data={"name": "Sales", "business_id": business_id})
    assert response.status_code == 422
    assert response.json()["type"] == "validation_error"


def test_download_template(client, upload_csv):
    """Test that the upload template downloads and is itself a valid upload"""
    response = client.get("/api/datasets/template")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "sales_template.csv" in response.headers["content-disposition"]
    assert response.text.split("\n")[0] == "date,amount,product,category"

    uploaded = upload_csv(response.text)
    assert uploaded.status_code == 201
    assert uploaded.json()["rows_count"] == 1
