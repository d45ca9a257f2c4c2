import os

import pytest
from fastapi.testclient import TestClient

from schemagen.api.main import app
from schemagen.core.observability.metrics import reset_metrics


@pytest.fixture(scope="session", autouse=True)
def _force_test_env():
    # Make runtime behave deterministically in tests
    os.environ.setdefault("SCHEMAGEN_ENV", "dev")


@pytest.fixture(autouse=True)
def _clean_generator_env(monkeypatch):
    for key in ("SCHEMAGEN_OPTIONS_FILE", "SCHEMAGEN_DEFAULT_DIALECT", "SCHEMAGEN_CHECK_HIGH_WATER_MARKS"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def client():
    reset_metrics()
    return TestClient(app)


@pytest.fixture()
def user_model_doc():
    """Single entity "User" with one string property "name"."""
    return {
        "entities": [
            {
                "name": "User",
                "id": "1:1001",
                "lastPropertyId": "1:2001",
                "properties": [
                    {"name": "name", "type": "string", "id": "1:2001"},
                ],
            }
        ],
        "lastEntityId": "1:1001",
    }
