from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

ImportBatch = Callable[..., list[dict[str, Any]]]


@pytest.fixture
def import_batch(client: TestClient) -> ImportBatch:
    """Import records for unit U1 through the API and return the created items."""

    def factory(
        *records: tuple[str, str, str, str],
        service_date: str = "2025-01-10",
        payer_id: str = "Particular",
    ) -> list[dict[str, Any]]:
        response = client.post(
            "/v1/units/U1/records/import",
            json={
                "actor_id": "importador",
                "records": [
                    {
                        "external_code": code,
                        "service_date": service_date,
                        "payment_method": method,
                        "gross_amount": gross,
                        "net_amount": net,
                        "payer_id": payer_id,
                    }
                    for code, method, gross, net in records
                ],
            },
        )
        assert response.status_code == 201, response.text
        return list(response.json()["items"])

    return factory
