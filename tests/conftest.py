import os
from typing import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Settings are read when dataportal is imported
os.environ.setdefault("DB_HOST", "localhost")
os.environ.setdefault("DB_USER", "the_username")
os.environ.setdefault("DB_PASSWORD", "notarealpassword")
os.environ.setdefault("DB_NAME", "analytics")
os.environ.setdefault("SSL_REQUIRED", "false")
os.environ.setdefault("TESTING", "true")

# pylint: disable=wrong-import-position
from tests.utils import make_result  # noqa: E402

# pylint: disable=redefined-outer-name


@pytest.fixture
def mock_conn() -> AsyncMock:
    """A warehouse connection whose statements succeed and return nothing."""
    conn = AsyncMock()
    conn.execute.return_value = make_result()
    return conn


@pytest.fixture
def app() -> FastAPI:
    # pylint: disable=import-outside-toplevel
    from dataportal import app as portal_app

    return portal_app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
