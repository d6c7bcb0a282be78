from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from fechamento_caixa.api.app import create_app
from fechamento_caixa.db.session import get_db_session


class _UnreachableDatabase:
    def execute(self, *_: object) -> None:
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.mark.parametrize(
    ("path", "expected"),
    [("/health/live", "alive"), ("/health/ready", "ready")],
)
def test_probes_report_healthy(client: TestClient, path: str, expected: str) -> None:
    response = client.get(path)

    assert response.status_code == 200
    assert response.json() == {"status": expected}


def test_readiness_reports_unavailable_database() -> None:
    app = create_app()

    def _override() -> Generator[_UnreachableDatabase, None, None]:
        yield _UnreachableDatabase()

    app.dependency_overrides[get_db_session] = _override

    with TestClient(app) as client:
        ready = client.get("/health/ready")
        live = client.get("/health/live")

    assert ready.status_code == 503
    assert ready.json() == {"status": "unavailable"}
    assert live.status_code == 200


def test_probes_are_hidden_from_openapi(client: TestClient) -> None:
    paths = client.get("/openapi.json").json()["paths"]

    assert not any(path.startswith("/health") for path in paths)
