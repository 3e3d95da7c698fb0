import pytest_mock
from fastapi import FastAPI
from fastapi.testclient import TestClient

from dataportal.constants import CORS_HEADERS


def test_unhandled_error(app: FastAPI, mocker: pytest_mock.MockerFixture) -> None:
    """Errors no route handles are still JSON with CORS headers."""
    mocker.patch(
        "dataportal.routers.connect.parse_submission",
        side_effect=RuntimeError("unexpected"),
    )

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.post("/connect", json={"pages": [{"id": "1"}]})

    assert response.status_code == 500
    assert response.json() == {"error": "Server error", "detail": "unexpected"}
    for header, value in CORS_HEADERS.items():
        assert response.headers[header] == value
