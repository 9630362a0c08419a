# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from dealscope.api.http import app  # ensures imports resolve; run tests from repo root
from dealscope.domain.assumptions import AnalysisConfig


@pytest.fixture(scope="session")
def client():
    return TestClient(app)


@pytest.fixture
def default_config() -> AnalysisConfig:
    return AnalysisConfig()
