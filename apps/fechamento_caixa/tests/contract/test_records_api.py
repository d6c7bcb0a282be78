from __future__ import annotations

from collections.abc import Callable
from typing import Any
from uuid import UUID

from fastapi.testclient import TestClient

ImportBatch = Callable[..., list[dict[str, Any]]]


def test_import_records_accepts_lis_labels_and_splits(
    client: TestClient, unit_id: UUID
) -> None:
    response = client.post(
        "/v1/units/U1/records/import",
        json={
            "actor_id": "importador",
            "records": [
                {
                    "external_code": " 3001 ",
                    "service_date": "2026-03-10",
                    "payment_method": "Dinheiro",
                    "gross_amount": "150.00",
                    "net_amount": "150.00",
                    "payer_id": "Particular",
                },
                {
                    "external_code": "3002",
                    "service_date": "2026-03-10",
                    "payment_method": "Nao pago",
                    "gross_amount": "200.00",
                    "net_amount": "0.00",
                    "payer_id": "Unimed",
                },
            ],
        },
    )

    body = response.json()
    assert response.status_code == 201
    assert body["imported"] == 2
    cash, receivable = body["items"]
    assert cash["external_code"] == "3001"
    assert cash["payment_method"] == "cash"
    assert cash["cash_component"] == "150.00"
    assert cash["payment_status"] == "pending"
    assert receivable["payment_method"] == "unpaid"
    assert receivable["receivable_component"] == "200.00"
    assert receivable["payment_status"] == "receivable"
    assert cash["unit_id"] == str(unit_id)


def test_import_records_returns_400_for_unknown_label(
    client: TestClient, unit_id: UUID
) -> None:
    response = client.post(
        "/v1/units/U1/records/import",
        json={
            "actor_id": "importador",
            "records": [
                {
                    "external_code": "3101",
                    "service_date": "2026-03-10",
                    "payment_method": "Cheque",
                    "gross_amount": "10.00",
                    "net_amount": "10.00",
                }
            ],
        },
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_import_records_returns_400_with_invalid_records(
    client: TestClient, unit_id: UUID, import_batch: ImportBatch
) -> None:
    import_batch(("3201", "cash", "10.00", "10.00"))

    response = client.post(
        "/v1/units/U1/records/import",
        json={
            "actor_id": "importador",
            "records": [
                {
                    "external_code": "3201",
                    "service_date": "2026-03-10",
                    "payment_method": "cash",
                    "gross_amount": "10.00",
                    "net_amount": "10.00",
                },
                {
                    "external_code": "3202",
                    "service_date": "2026-03-10",
                    "payment_method": "pix",
                    "gross_amount": "10.00",
                    "net_amount": "12.00",
                },
            ],
        },
    )

    assert response.status_code == 400
    assert response.json()["details"] == {
        "invalid_records": {
            "3201": "already imported",
            "3202": "net_amount greater than gross_amount",
        }
    }


def test_import_records_returns_404_for_unknown_unit(client: TestClient) -> None:
    response = client.post(
        "/v1/units/ZZ/records/import",
        json={
            "actor_id": "importador",
            "records": [
                {
                    "external_code": "3301",
                    "service_date": "2026-03-10",
                    "payment_method": "cash",
                    "gross_amount": "10.00",
                    "net_amount": "10.00",
                }
            ],
        },
    )

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_list_records_filters_by_status(
    client: TestClient, unit_id: UUID, import_batch: ImportBatch
) -> None:
    import_batch(
        ("3401", "cash", "10.00", "10.00"),
        ("3402", "unpaid", "20.00", "0.00"),
    )

    response = client.get(
        "/v1/records",
        params={"unit_id": str(unit_id), "payment_status": "receivable"},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["total"] == 1
    assert [item["external_code"] for item in body["items"]] == ["3402"]
