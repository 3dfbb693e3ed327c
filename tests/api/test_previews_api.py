from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.dependencies import get_document_store
from app.main import app
from app.repositories.document_store import DocumentStore
from app.schemas.document import Installment
from tests.factories import make_document, make_signatories


def test_health(test_client):
    response = test_client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_split_preview(test_client, auth_headers):
    response = test_client.post(
        "/api/v1/installments/split",
        headers=auth_headers(),
        json={"total": 100, "count": 3, "startDate": "2024-01-31", "cadence": {"interval": 1, "unit": "months"}},
    )

    assert response.status_code == 200
    items = response.json()["data"]["items"]
    assert [i["amount"] for i in items] == [34, 33, 33]
    assert [i["dueDate"] for i in items] == ["2024-02-29", "2024-03-31", "2024-04-30"]


def test_split_preview_rejects_too_many_installments(test_client, auth_headers):
    response = test_client.post(
        "/api/v1/installments/split",
        headers=auth_headers(),
        json={"total": 100, "count": 13},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["errors"][0]["code"] == "INVALID_SPLIT_COUNT"


def test_recalculate_preview_keeps_dates(test_client, auth_headers):
    response = test_client.post(
        "/api/v1/installments/recalculate",
        headers=auth_headers(),
        json={
            "total": 1001,
            "startDate": "2024-01-01",
            "installments": [
                {"installmentNumber": 1, "amount": 1, "dueDate": "2024-06-01"},
                {"installmentNumber": 2, "amount": 999, "dueDate": "2024-07-01"},
            ],
        },
    )

    items = response.json()["data"]["items"]
    assert [i["amount"] for i in items] == [501, 500]
    assert [i["dueDate"] for i in items] == ["2024-06-01", "2024-07-01"]


def test_allocation_add_over_remainder(test_client, auth_headers):
    response = test_client.post(
        "/api/v1/allocations/add",
        headers=auth_headers(),
        json={
            "total": 1000,
            "allocations": [{"id": "a1", "filial": "SP", "centroCusto": "ADM", "valor": 900}],
            "entry": {"filial": "RJ", "centroCusto": "OPS", "valor": 200},
        },
    )

    assert response.status_code == 422
    error = response.json()["detail"]["errors"][0]
    assert error["code"] == "INSUFFICIENT_REMAINDER"
    assert error["details"]["excess"] == 100


def test_allocation_edit_returns_summary(test_client, auth_headers):
    response = test_client.post(
        "/api/v1/allocations/edit",
        headers=auth_headers(),
        json={
            "total": 1000,
            "allocations": [{"id": "a1", "filial": "SP", "centroCusto": "ADM", "valor": 900}],
            "allocationId": "a1",
            "valor": 250,
        },
    )

    data = response.json()["data"]
    assert data["items"][0]["percentual"] == "25.00"
    assert data["summary"]["remaining"] == 750


def test_allocation_remove_unknown_is_404(test_client, auth_headers):
    response = test_client.post(
        "/api/v1/allocations/remove",
        headers=auth_headers(),
        json={"total": 1000, "allocations": [], "allocationId": "nope"},
    )

    assert response.status_code == 404


@pytest.fixture
def store():
    store = AsyncMock(spec=DocumentStore)
    app.dependency_overrides[get_document_store] = lambda: store
    return store


def test_dashboard_stats(test_client, store, auth_headers):
    store.list_documents.return_value = [
        make_document(make_signatories("SIGNED", "SIGNED"), id="a"),
        make_document(make_signatories("PENDING"), id="b"),
    ]

    response = test_client.get("/api/v1/dashboard/stats", headers=auth_headers())

    data = response.json()["data"]
    assert data["totalDocuments"] == 2
    assert data["completedDocuments"] == 1
    assert data["pendingDocuments"] == 1


def test_dashboard_installments(test_client, store, auth_headers):
    store.list_documents.return_value = [
        make_document(id="late", installments=[
            Installment(installment_number=1, amount=1000, due_date=date(2000, 1, 1)),
        ]),
    ]

    response = test_client.get("/api/v1/dashboard/installments", headers=auth_headers())

    data = response.json()["data"]
    assert data["overdueTotal"] == 1000
    assert data["documents"][0]["documentId"] == "late"
