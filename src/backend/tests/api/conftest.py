import os
import sys


BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from common.rules_engine.store import InMemoryRuleSetRepository


@pytest.fixture
def repository() -> InMemoryRuleSetRepository:
    return InMemoryRuleSetRepository()


@pytest.fixture
def client(repository, monkeypatch) -> TestClient:
    monkeypatch.setenv("DUTY_DATA_SOURCE", "memory")
    return TestClient(create_app(repository))
