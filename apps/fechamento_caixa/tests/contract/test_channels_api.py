from __future__ import annotations

from collections.abc import Callable
from typing import Any
from uuid import UUID

from fastapi.testclient import TestClient

ImportBatch = Callable[..., list[dict[str, Any]]]


def test_list_eligible_returns_only_channel_records(
    client: TestClient, unit_id: UUID, import_batch: ImportBatch
) -> None:
    import_batch(
        ("4001", "cash", "120.00", "120.00"),
        ("4002", "cash", "30.50", "30.50"),
        ("4003", "pix", "80.00", "80.00"),
        ("4004", "unpaid", "60.00", "0.00"),
    )

    response = client.get(
        "/v1/channels/cash/eligible", params={"unit_id": str(unit_id)}
    )

    body = response.json()
    assert response.status_code == 200
    assert body["channel"] == "cash"
    assert sorted(item["external_code"] for item in body["items"]) == ["4001", "4002"]
    assert body["total_cash"] == "150.50"
    assert body["selected_record_ids"] == []


def test_list_eligible_can_preselect_every_record(
    client: TestClient, unit_id: UUID, import_batch: ImportBatch
) -> None:
    created = import_batch(
        ("4011", "pix", "40.00", "40.00"),
        ("4012", "pix", "25.00", "25.00"),
        ("4013", "cash", "10.00", "10.00"),
    )

    response = client.get(
        "/v1/channels/pix/eligible",
        params={"unit_id": str(unit_id), "select_all": "true"},
    )

    body = response.json()
    pix_ids = {item["id"] for item in created if item["payment_method"] == "pix"}
    assert response.status_code == 200
    assert set(body["selected_record_ids"]) == pix_ids
    assert body["selected_record_ids"] == [item["id"] for item in body["items"]]


def test_list_eligible_returns_400_for_inverted_period(
    client: TestClient, unit_id: UUID
) -> None:
    response = client.get(
        "/v1/channels/pix/eligible",
        params={
            "unit_id": str(unit_id),
            "start_date": "2026-03-31",
            "end_date": "2026-03-01",
        },
    )

    assert response.status_code == 400


def test_card_totals_apply_configured_fee(
    client: TestClient, unit_id: UUID, import_batch: ImportBatch
) -> None:
    records = import_batch(("4101", "card_credit", "300.00", "300.00"))
    client.put(
        "/v1/card-fees",
        json={
            "payment_method": "card_credit",
            "fee_rate": "0.0299",
            "actor_id": "admin",
        },
    )

    response = client.post(
        "/v1/channels/card/totals",
        json={"unit_id": str(unit_id), "record_ids": [records[0]["id"]]},
    )

    assert response.status_code == 200
    assert response.json() == {
        "channel": "card",
        "record_count": 1,
        "gross": "300.00",
        "fee": "8.97",
        "net": "291.03",
    }


def test_totals_return_400_for_record_of_another_channel(
    client: TestClient, unit_id: UUID, import_batch: ImportBatch
) -> None:
    records = import_batch(("4201", "pix", "50.00", "50.00"))

    response = client.post(
        "/v1/channels/cash/totals",
        json={"unit_id": str(unit_id), "record_ids": [records[0]["id"]]},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
