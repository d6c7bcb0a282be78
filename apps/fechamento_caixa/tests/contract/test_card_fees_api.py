from __future__ import annotations

from uuid import UUID

from fastapi.testclient import TestClient


def test_put_card_fee_creates_and_updates_rate(
    client: TestClient, unit_id: UUID
) -> None:
    created = client.put(
        "/v1/card-fees",
        json={
            "unit_id": str(unit_id),
            "payment_method": "card_debit",
            "fee_rate": "0.015",
            "actor_id": "admin",
        },
    )
    updated = client.put(
        "/v1/card-fees",
        json={
            "unit_id": str(unit_id),
            "payment_method": "card_debit",
            "fee_rate": "0.0125",
            "actor_id": "admin",
        },
    )
    listed = client.get("/v1/card-fees")

    assert created.status_code == 200
    assert created.json()["fee_rate"] == "0.0150"
    assert updated.json()["id"] == created.json()["id"]
    assert [item["fee_rate"] for item in listed.json()["items"]] == ["0.0125"]


def test_put_card_fee_returns_400_for_cash(client: TestClient) -> None:
    response = client.put(
        "/v1/card-fees",
        json={"payment_method": "cash", "fee_rate": "0.01", "actor_id": "admin"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_put_card_fee_returns_400_for_rate_out_of_range(client: TestClient) -> None:
    response = client.put(
        "/v1/card-fees",
        json={"payment_method": "card_credit", "fee_rate": "1.5", "actor_id": "a"},
    )

    assert response.status_code == 400
